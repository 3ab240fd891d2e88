# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: in-memory member store.
Flat map id → Member plus a reverse index upline id → child ids, both kept
consistent on every insert, re-parent and delete.
"""
import bisect
from typing import Any, Optional

from member_service.core.errors import (
    CapacityExceeded, ConflictError, NotFoundError, ValidationError,
)
from member_service.models.domain import Member


class InMemoryMemberRepository:
    """In-memory member storage. Children lists are kept sorted by id."""

    def __init__(self) -> None:
        self._members: dict[int, Member] = {}
        self._downlines: dict[Optional[int], list[int]] = {}
        self._next_id = 1

    # ── Read ──

    async def get(self, member_id: int) -> Optional[Member]:
        return self._members.get(member_id)

    async def list_downlines(self, upline_id: int) -> list[Member]:
        return [self._members[i] for i in self._downlines.get(upline_id, [])]

    async def count_downlines(self, upline_id: int) -> int:
        return len(self._downlines.get(upline_id, []))

    async def find_root(self) -> Optional[Member]:
        roots = self._downlines.get(None)
        return self._members[roots[0]] if roots else None

    async def find_by_email_or_phone(self, email: Optional[str] = None,
                                     phone: Optional[str] = None,
                                     exclude_id: Optional[int] = None) -> Optional[Member]:
        for member in self._members.values():
            if member.id == exclude_id:
                continue
            if (email is not None and member.email == email) or \
                    (phone is not None and member.phone == phone):
                return member
        return None

    async def search(self, query: str, limit: int) -> list[Member]:
        needle = query.lower()
        hits = []
        for member_id in sorted(self._members):
            member = self._members[member_id]
            if any(needle in value.lower() for value in (member.name, member.email, member.phone)):
                hits.append(member)
                if len(hits) >= limit:
                    break
        return hits

    async def count(self) -> int:
        return len(self._members)

    # ── Write ──

    async def insert(self, fields: dict[str, Any], max_downlines: int) -> Member:
        """Insert a member; refuses when its upline already holds ``max_downlines`` children."""
        upline_id = fields.get("upline_id")
        if upline_id is not None:
            if upline_id not in self._members:
                raise ValidationError(f"Upline {upline_id} does not exist.")
            if len(self._downlines.get(upline_id, [])) >= max_downlines:
                raise CapacityExceeded(upline_id)
        self._check_unique(fields.get("email"), fields.get("phone"))

        member = Member(id=self._next_id, **fields)
        self._next_id += 1
        self._members[member.id] = member
        self._attach(member.id, member.upline_id)
        return member

    async def update(self, member_id: int, fields: dict[str, Any]) -> Member:
        current = self._members.get(member_id)
        if current is None:
            raise NotFoundError(member_id)
        if "upline_id" in fields and fields["upline_id"] is not None \
                and fields["upline_id"] not in self._members:
            raise ValidationError(f"Upline {fields['upline_id']} does not exist.")
        self._check_unique(fields.get("email"), fields.get("phone"), exclude_id=member_id)

        updated = current.model_copy(update=fields)
        if updated.upline_id != current.upline_id:
            self._detach(member_id, current.upline_id)
            self._attach(member_id, updated.upline_id)
        self._members[member_id] = updated
        return updated

    async def delete(self, member_id: int) -> Member:
        member = self._members.get(member_id)
        if member is None:
            raise NotFoundError(member_id)
        if self._downlines.get(member_id):
            raise ConflictError(f"Member {member_id} still has downlines.")
        del self._members[member_id]
        self._downlines.pop(member_id, None)
        self._detach(member_id, member.upline_id)
        return member

    # ── Lifecycle ──

    async def create_schema(self) -> None:
        return None

    async def verify_connection(self) -> None:
        return None

    async def dispose(self) -> None:
        return None

    # ── Private ──

    def _attach(self, member_id: int, upline_id: Optional[int]) -> None:
        bisect.insort(self._downlines.setdefault(upline_id, []), member_id)

    def _detach(self, member_id: int, upline_id: Optional[int]) -> None:
        children = self._downlines.get(upline_id)
        if children and member_id in children:
            children.remove(member_id)
            if not children:
                del self._downlines[upline_id]

    def _check_unique(self, email: Optional[str], phone: Optional[str],
                      exclude_id: Optional[int] = None) -> None:
        for member in self._members.values():
            if member.id == exclude_id:
                continue
            if email is not None and member.email == email:
                raise ValidationError(f"Email {email} is already registered.")
            if phone is not None and member.phone == phone:
                raise ValidationError(f"Phone {phone} is already registered.")

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for the member lifecycle: create, update, delete, tree, search."""
from typing import Any, Optional

from member_service.core.config import settings
from member_service.core.errors import (
    CapacityExceeded, ConflictError, NotFoundError, PlacementError, ValidationError,
)
from member_service.core.logging import get_logger
from member_service.metrics import (
    MEMBERS_CREATED, MEMBERS_DELETED, MEMBERS_TOTAL, PLACEMENT_DEPTH, PLACEMENT_RETRIES,
)
from member_service.models.domain import Member
from member_service.services.cascade import SubtreeDeleter
from member_service.services.placement import PlacementResolver
from member_service.services.search import MemberSearch
from member_service.services.tree import TreeBuilder

logger = get_logger(__name__)


class MemberService:
    def __init__(self, repo, max_downlines: int = settings.MAX_DOWNLINES,
                 search_limit: int = settings.SEARCH_LIMIT,
                 placement_retries: int = settings.PLACEMENT_MAX_RETRIES):
        self._repo = repo
        self._max_downlines = max_downlines
        self._placement_retries = placement_retries
        self.resolver = PlacementResolver(repo, max_downlines)
        self.trees = TreeBuilder(repo)
        self.deleter = SubtreeDeleter(repo)
        self.finder = MemberSearch(repo, search_limit)

    async def seed_gauges(self):
        MEMBERS_TOTAL.set(await self._repo.count())
        logger.info("Prometheus gauges loaded from store")

    # ── Create ─────────────────────────────────────────────────────────

    async def create_member(self, name: str, phone: str, email: str,
                            address: Optional[str] = None,
                            upline_id: Optional[int] = None) -> dict[str, Any]:
        if await self._repo.find_by_email_or_phone(email, phone):
            raise ValidationError("A member with the same email or phone already exists.")

        fields = {"name": name, "address": address or "", "phone": phone,
                  "email": email, "upline_id": None}
        if upline_id is None:
            member = await self._repo.insert(fields, self._max_downlines)
            MEMBERS_CREATED.labels(placement="root").inc()
        else:
            if await self._repo.get(upline_id) is None:
                raise ValidationError(f"Upline {upline_id} does not exist.")
            member = await self._place(fields, upline_id)

        MEMBERS_TOTAL.inc()
        logger.info("Member created id=%s upline=%s requested_upline=%s",
                    member.id, member.upline_id, upline_id)
        return member.to_dict()

    async def _place(self, fields: dict[str, Any], requested_id: int) -> Member:
        """Resolve a free slot and insert; a slot lost to a concurrent insert is re-resolved."""
        for attempt in range(1, self._placement_retries + 1):
            placement = await self.resolver.locate(requested_id)
            if placement is None:
                raise PlacementError(f"No eligible upline found under member {requested_id}.")
            try:
                member = await self._repo.insert(
                    {**fields, "upline_id": placement.target_id}, self._max_downlines,
                )
            except CapacityExceeded as exc:
                PLACEMENT_RETRIES.inc()
                logger.warning("Placement under %s lost the race (attempt %s/%s), re-resolving",
                               exc.upline_id, attempt, self._placement_retries)
                continue
            PLACEMENT_DEPTH.observe(placement.depth)
            MEMBERS_CREATED.labels(
                placement="direct" if placement.depth == 0 else "spillover"
            ).inc()
            return member
        raise PlacementError(
            f"Could not secure a slot under member {requested_id} "
            f"after {self._placement_retries} attempts."
        )

    # ── Update ─────────────────────────────────────────────────────────

    async def update_member(self, member_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        current = await self._repo.get(member_id)
        if current is None:
            raise NotFoundError(member_id)

        if changes.get("upline_id") is not None:
            await self._check_new_upline(current, changes["upline_id"])

        if "email" in changes or "phone" in changes:
            clash = await self._repo.find_by_email_or_phone(
                changes.get("email"), changes.get("phone"), exclude_id=member_id,
            )
            if clash:
                raise ValidationError("A member with the same email or phone already exists.")

        updated = await self._repo.update(member_id, changes)
        logger.info("Member updated id=%s fields=%s", member_id, sorted(changes))
        return updated.to_dict()

    async def _check_new_upline(self, current: Member, upline_id: int) -> None:
        if upline_id == current.id:
            raise ValidationError("A member cannot be their own upline.")
        if await self._repo.get(upline_id) is None:
            raise ValidationError(f"Upline {upline_id} does not exist.")
        if await self._is_descendant(upline_id, current.id):
            raise ValidationError(
                f"Member {upline_id} is a downline of member {current.id}; "
                "re-parenting would create a cycle."
            )
        if upline_id != current.upline_id:
            taken = await self._repo.count_downlines(upline_id)
            if taken >= self._max_downlines:
                logger.warning("Manual re-parent gives member %s %s downlines (limit %s)",
                               upline_id, taken + 1, self._max_downlines)

    async def _is_descendant(self, member_id: int, ancestor_id: int) -> bool:
        """Walk the upline chain from ``member_id``; True when it reaches ``ancestor_id``."""
        seen = set()
        node_id: Optional[int] = member_id
        while node_id is not None and node_id not in seen:
            if node_id == ancestor_id:
                return True
            seen.add(node_id)
            node = await self._repo.get(node_id)
            node_id = node.upline_id if node else None
        return False

    # ── Delete ─────────────────────────────────────────────────────────

    async def delete_member(self, member_id: int) -> dict[str, Any]:
        if await self._repo.get(member_id) is None:
            raise NotFoundError(member_id)
        if await self._repo.count_downlines(member_id) > 0:
            raise ConflictError("This member still has downlines and cannot be deleted.")
        member = await self._repo.delete(member_id)
        MEMBERS_DELETED.labels(mode="single").inc()
        MEMBERS_TOTAL.dec()
        logger.info("Member deleted id=%s", member_id)
        return member.to_dict()

    async def delete_member_cascade(self, member_id: int) -> dict[str, Any]:
        return await self.deleter.delete_cascade(member_id)

    # ── Read ───────────────────────────────────────────────────────────

    async def get_tree(self) -> list[dict[str, Any]]:
        return await self.trees.get_full_tree()

    async def search(self, query: str) -> list[dict[str, Any]]:
        return await self.finder.search(query)

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for members on a relational store (PostgreSQL or SQLite)."""
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from member_service.core.database import metadata
from member_service.core.errors import (
    CapacityExceeded, ConflictError, NotFoundError, ValidationError,
)
from member_service.core.logging import get_logger
from member_service.models.domain import MEMBER_FIELDS, Member

logger = get_logger(__name__)

MEMBER_COLS = "id, name, address, phone, email, upline_id"


def _row_to_member(row) -> Member:
    return Member(
        id=row[0],
        name=row[1],
        address=row[2] or "",
        phone=row[3],
        email=row[4],
        upline_id=row[5],
    )


def _like_pattern(query: str) -> str:
    escaped = query.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlMemberRepository:
    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    # ── Read ───────────────────────────────────────────────────────────

    async def get(self, member_id: int) -> Optional[Member]:
        async with self._engine.connect() as conn:
            row = (await conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members WHERE id = :id"),
                {"id": member_id},
            )).fetchone()
        return _row_to_member(row) if row else None

    async def list_downlines(self, upline_id: int) -> list[Member]:
        async with self._engine.connect() as conn:
            rows = (await conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members WHERE upline_id = :uid ORDER BY id"),
                {"uid": upline_id},
            )).fetchall()
        return [_row_to_member(r) for r in rows]

    async def count_downlines(self, upline_id: int) -> int:
        async with self._engine.connect() as conn:
            return (await conn.execute(
                text("SELECT COUNT(*) FROM members WHERE upline_id = :uid"),
                {"uid": upline_id},
            )).scalar() or 0

    async def find_root(self) -> Optional[Member]:
        async with self._engine.connect() as conn:
            row = (await conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members WHERE upline_id IS NULL ORDER BY id LIMIT 1"),
            )).fetchone()
        return _row_to_member(row) if row else None

    async def find_by_email_or_phone(self, email: Optional[str] = None,
                                     phone: Optional[str] = None,
                                     exclude_id: Optional[int] = None) -> Optional[Member]:
        conditions = []
        params: dict[str, Any] = {}
        if email is not None:
            conditions.append("email = :email")
            params["email"] = email
        if phone is not None:
            conditions.append("phone = :phone")
            params["phone"] = phone
        if not conditions:
            return None
        where = "(" + " OR ".join(conditions) + ")"
        if exclude_id is not None:
            where += " AND id != :exclude_id"
            params["exclude_id"] = exclude_id
        async with self._engine.connect() as conn:
            row = (await conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members WHERE {where} ORDER BY id LIMIT 1"),
                params,
            )).fetchone()
        return _row_to_member(row) if row else None

    async def search(self, query: str, limit: int) -> list[Member]:
        async with self._engine.connect() as conn:
            rows = (await conn.execute(
                text(f"""
                    SELECT {MEMBER_COLS} FROM members
                    WHERE LOWER(name) LIKE :pattern ESCAPE '\\'
                       OR LOWER(email) LIKE :pattern ESCAPE '\\'
                       OR LOWER(phone) LIKE :pattern ESCAPE '\\'
                    ORDER BY id LIMIT :limit
                """),
                {"pattern": _like_pattern(query), "limit": limit},
            )).fetchall()
        return [_row_to_member(r) for r in rows]

    async def count(self) -> int:
        async with self._engine.connect() as conn:
            return (await conn.execute(text("SELECT COUNT(*) FROM members"))).scalar() or 0

    # ── Write ──────────────────────────────────────────────────────────

    async def insert(self, fields: dict[str, Any], max_downlines: int) -> Member:
        """Insert a member; the child-count check and the insert share one transaction."""
        params = {k: fields.get(k) for k in MEMBER_FIELDS}
        params["address"] = params["address"] or ""
        upline_id = params["upline_id"]
        try:
            async with self._engine.begin() as conn:
                if upline_id is None:
                    new_id = (await conn.execute(
                        text("""
                            INSERT INTO members (name, address, phone, email, upline_id)
                            VALUES (:name, :address, :phone, :email, NULL)
                            RETURNING id
                        """),
                        params,
                    )).scalar_one()
                else:
                    if not await self._lock_member(conn, upline_id):
                        raise ValidationError(f"Upline {upline_id} does not exist.")
                    params["max_downlines"] = max_downlines
                    new_id = (await conn.execute(
                        text("""
                            INSERT INTO members (name, address, phone, email, upline_id)
                            SELECT :name, :address, :phone, :email, CAST(:upline_id AS INTEGER)
                            WHERE (
                                SELECT COUNT(*) FROM members WHERE upline_id = CAST(:upline_id AS INTEGER)
                            ) < CAST(:max_downlines AS INTEGER)
                            RETURNING id
                        """),
                        params,
                    )).scalar_one_or_none()
                    if new_id is None:
                        raise CapacityExceeded(upline_id)
        except IntegrityError as exc:
            logger.warning("Member insert rejected by store constraint: %s", exc.orig)
            raise ValidationError("A member with the same email or phone already exists.") from exc
        return Member(id=new_id, **{k: params[k] for k in MEMBER_FIELDS})

    async def update(self, member_id: int, fields: dict[str, Any]) -> Member:
        assignments = [f"{k} = :{k}" for k in MEMBER_FIELDS if k in fields]
        params = {k: fields[k] for k in MEMBER_FIELDS if k in fields}
        params["id"] = member_id
        try:
            async with self._engine.begin() as conn:
                if assignments:
                    result = await conn.execute(
                        text(f"UPDATE members SET {', '.join(assignments)} WHERE id = :id"),
                        params,
                    )
                    if result.rowcount == 0:
                        raise NotFoundError(member_id)
                row = (await conn.execute(
                    text(f"SELECT {MEMBER_COLS} FROM members WHERE id = :id"),
                    {"id": member_id},
                )).fetchone()
        except IntegrityError as exc:
            logger.warning("Member update rejected by store constraint: %s", exc.orig)
            raise ValidationError("Update violates a uniqueness or upline constraint.") from exc
        if row is None:
            raise NotFoundError(member_id)
        return _row_to_member(row)

    async def delete(self, member_id: int) -> Member:
        async with self._engine.begin() as conn:
            row = (await conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members WHERE id = :id"),
                {"id": member_id},
            )).fetchone()
            if row is None:
                raise NotFoundError(member_id)
            children = (await conn.execute(
                text("SELECT COUNT(*) FROM members WHERE upline_id = :id"),
                {"id": member_id},
            )).scalar()
            if children:
                raise ConflictError(f"Member {member_id} still has downlines.")
            await conn.execute(text("DELETE FROM members WHERE id = :id"), {"id": member_id})
        return _row_to_member(row)

    # ── Lifecycle ──────────────────────────────────────────────────────

    async def create_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info("Members table ready")

    async def verify_connection(self) -> None:
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self._engine.dispose()

    # ── Private ────────────────────────────────────────────────────────

    async def _lock_member(self, conn, member_id: int) -> bool:
        """Row-lock the upline on PostgreSQL so concurrent placements under it serialise."""
        lock = " FOR UPDATE" if self._engine.dialect.name == "postgresql" else ""
        row = (await conn.execute(
            text(f"SELECT id FROM members WHERE id = :id{lock}"), {"id": member_id},
        )).fetchone()
        return row is not None

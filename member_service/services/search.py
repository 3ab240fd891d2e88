# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Substring search over members, enriched with immediate relations."""
import asyncio
from typing import Any

from member_service.core.config import settings
from member_service.models.domain import Member


class MemberSearch:
    def __init__(self, repo, limit: int = settings.SEARCH_LIMIT):
        self._repo = repo
        self._limit = limit

    async def search(self, query: str) -> list[dict[str, Any]]:
        members = await self._repo.search(query or "", self._limit)
        return list(await asyncio.gather(*(self._enrich(m) for m in members)))

    async def _enrich(self, member: Member) -> dict[str, Any]:
        upline = await self._repo.get(member.upline_id) if member.upline_id is not None else None
        downlines = await self._repo.list_downlines(member.id)
        return {
            "id": member.id,
            "name": member.name,
            "email": member.email,
            "phone": member.phone,
            "upline": upline.summary() if upline else None,
            "downlines": [d.summary() for d in downlines],
        }

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Cascading removal of a member together with its whole subtree."""
from typing import Any

from member_service.core.errors import NotFoundError
from member_service.core.logging import get_logger
from member_service.metrics import MEMBERS_DELETED, MEMBERS_TOTAL

logger = get_logger(__name__)


class SubtreeDeleter:
    def __init__(self, repo):
        self._repo = repo

    async def delete_cascade(self, member_id: int) -> dict[str, Any]:
        if await self._repo.get(member_id) is None:
            raise NotFoundError(member_id)
        removed = await self._delete_subtree(member_id)
        logger.info("Cascade delete root=%s removed=%s", member_id, removed)
        return {"deleted": member_id, "count": removed}

    async def _delete_subtree(self, member_id: int) -> int:
        """Post-order walk with an explicit stack: every child row is gone before its upline."""
        removed = 0
        stack = [(member_id, False)]
        while stack:
            node_id, expanded = stack.pop()
            if not expanded:
                stack.append((node_id, True))
                children = await self._repo.list_downlines(node_id)
                stack.extend((child.id, False) for child in reversed(children))
                continue
            await self._repo.delete(node_id)
            MEMBERS_DELETED.labels(mode="cascade").inc()
            MEMBERS_TOTAL.dec()
            removed += 1
        return removed

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Materialises the hierarchy into nested display nodes."""
import asyncio
import time
from typing import Any

from member_service.core.errors import NotFoundError
from member_service.metrics import TREE_BUILD_SECONDS


class TreeBuilder:
    def __init__(self, repo):
        self._repo = repo

    async def get_full_tree(self) -> list[dict[str, Any]]:
        root = await self._repo.find_root()
        if root is None:
            return []
        start = time.perf_counter()
        tree = await self.build_tree(root.id)
        TREE_BUILD_SECONDS.observe(time.perf_counter() - start)
        return [tree]

    async def build_tree(self, member_id: int) -> dict[str, Any]:
        """
        Build the subtree rooted at ``member_id``.

        Sibling subtrees are disjoint, so they are built concurrently. Leaves
        carry no ``children`` key at all. A member that vanishes mid-build
        aborts the whole build with NotFoundError.
        """
        member = await self._repo.get(member_id)
        if member is None:
            raise NotFoundError(member_id)
        downlines = await self._repo.list_downlines(member_id)
        children = await asyncio.gather(*(self.build_tree(d.id) for d in downlines))

        node: dict[str, Any] = {
            "id": member.id,
            "name": member.name,
            "attributes": {
                "email": member.email,
                "phone": member.phone,
                "uplineId": member.upline_id,
            },
        }
        if children:
            node["children"] = list(children)
        return node

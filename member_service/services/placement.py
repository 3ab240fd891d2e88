# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Upline placement: breadth-first search for the shallowest member with a
free downline slot, starting from the requested sponsor.
"""
from collections import deque
from typing import NamedTuple, Optional

from member_service.core.config import settings


class Placement(NamedTuple):
    target_id: int
    depth: int


class PlacementResolver:
    """Read-only; never mutates the store."""

    def __init__(self, repo, max_downlines: int = settings.MAX_DOWNLINES):
        self._repo = repo
        self._max_downlines = max_downlines

    async def locate(self, candidate_id: int) -> Optional[Placement]:
        queue = deque([(candidate_id, 0)])
        seen = {candidate_id}
        while queue:
            current_id, depth = queue.popleft()
            downlines = await self._repo.list_downlines(current_id)
            if len(downlines) < self._max_downlines:
                return Placement(current_id, depth)
            for child in downlines:
                # a malformed (cyclic) hierarchy must not loop forever
                if child.id not in seen:
                    seen.add(child.id)
                    queue.append((child.id, depth + 1))
        return None

    async def resolve_placement(self, candidate_id: int) -> Optional[int]:
        """Id of the member the newcomer should hang under, or None when no slot is reachable."""
        placement = await self.locate(candidate_id)
        return placement.target_id if placement else None

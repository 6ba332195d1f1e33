from __future__ import annotations

from typing import Dict, List, Mapping, Optional


def would_create_cycle(
    child_id: str,
    proposed_parent_id: Optional[str],
    current_edges: Mapping[str, str],
) -> bool:
    """
    True if committing ``child_id -> proposed_parent_id`` closes a loop.

    Walks the proposed parent's ancestor chain through ``current_edges``
    (child -> parent). The walk is bounded by the number of committed edges,
    so even a corrupted mapping cannot spin forever.
    """
    if proposed_parent_id is None:
        return False
    if proposed_parent_id == child_id:
        return True

    current: Optional[str] = proposed_parent_id
    steps = 0
    limit = len(current_edges) + 1
    while current is not None and steps <= limit:
        if current == child_id:
            return True
        current = current_edges.get(current)
        steps += 1
    return current is not None


class EdgeSet:
    """
    Committed child -> parent edges for one build.

    Every edge goes through ``commit``; an edge that would close a cycle is
    refused and the child recorded in ``rejected``.
    """

    def __init__(self) -> None:
        self._parent: Dict[str, str] = {}
        self.rejected: List[str] = []

    def __contains__(self, child_id: str) -> bool:
        return child_id in self._parent

    def __len__(self) -> int:
        return len(self._parent)

    def parent_of(self, child_id: str) -> Optional[str]:
        return self._parent.get(child_id)

    def would_create_cycle(self, child_id: str, parent_id: str) -> bool:
        return would_create_cycle(child_id, parent_id, self._parent)

    def commit(self, child_id: str, parent_id: str) -> bool:
        if child_id in self._parent:
            raise ValueError(f"edge for {child_id!r} already committed")
        if self.would_create_cycle(child_id, parent_id):
            self.rejected.append(child_id)
            return False
        self._parent[child_id] = parent_id
        return True

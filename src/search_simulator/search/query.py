"""
Query state and query-group bookkeeping shared by every search strategy.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

# Key in prev_hops under which walkers keep their back-pointer trail, newest hop first.
# Flood instead keys prev_hops by node id.
PATH_KEY = -1


@dataclass
class Query:
    """
    One search agent.

    targets, visited and prev_hops may be shared by reference between a query
    and the replicas or respawns derived from it; current is always private.
    """
    query_id: int
    source: int
    targets: Set[int]
    current: Set[int]
    visited: Set[int]
    prev_hops: Dict[int, List[int]]
    ttl: int
    first_hop: bool = True
    deadlocked: bool = False
    # Node this walker arrived from, used for backtrack avoidance
    previous_node: Optional[int] = None

    @classmethod
    def start(
        cls,
        query_id: int,
        source: int,
        targets: Set[int],
        ttl: int,
        prev_hops: Optional[Dict[int, List[int]]] = None,
    ) -> "Query":
        """A fresh query sitting on its source."""
        return cls(
            query_id=query_id,
            source=source,
            targets=targets,
            current={source},
            visited={source},
            prev_hops=prev_hops if prev_hops is not None else {},
            ttl=ttl,
        )

    @property
    def position(self) -> Optional[int]:
        """Node holding a walker, or None once its frontier is empty."""
        return next(iter(self.current)) if self.current else None

    @property
    def found_target(self) -> bool:
        return bool(self.current & self.targets)

    @property
    def trail(self) -> List[int]:
        """Back-pointer trail recorded by walkers, newest first."""
        return self.prev_hops.get(PATH_KEY, [])


class QueryGroups:
    """Index from group id to the ordered ids of its member queries."""

    def __init__(self):
        self._members: Dict[int, List[int]] = {}
        self._group_of: Dict[int, int] = {}

    def add(self, group_id: int, query_id: int) -> None:
        if query_id in self._group_of:
            raise ValueError(f"Query {query_id} already belongs to group {self._group_of[query_id]}")
        self._members.setdefault(group_id, []).append(query_id)
        self._group_of[query_id] = group_id

    def group_of(self, query_id: int) -> int:
        return self._group_of[query_id]

    def members(self, group_id: int) -> List[int]:
        return list(self._members.get(group_id, []))

    def group_ids(self) -> List[int]:
        return sorted(self._members)

    def clear(self) -> None:
        self._members.clear()
        self._group_of.clear()

    def __len__(self) -> int:
        return len(self._members)

"""
Bidirectional linear search.

Each side picks a random first hop, remembers the bearing from its source to
that hop, and from then on keeps heading the same way: at every node it moves
to the neighbour whose bearing from the source is closest to the remembered
one, provided the move takes it strictly farther from the source. A walker
with no such neighbour is deadlocked; by default it is replaced by a fresh
walker that starts over from the source with one less unit of TTL.
"""

import logging
import random
from typing import Dict, Optional

from search_simulator.graph.store import GraphStore
from search_simulator.models import SearchConfig, StrategyType
from .base import Search
from .query import Query

logger = logging.getLogger(__name__)


def angular_difference(a: float, b: float) -> float:
    """Smallest angle between two bearings, in [0, 180]."""
    delta = abs(a - b) % 360.0
    return min(delta, 360.0 - delta)


class BidirectionalSearchLinear(Search):
    N_QUERIES = 2
    BIDIRECTIONAL = True
    STRATEGY = StrategyType.BIDIRECTIONAL_LINEAR

    def __init__(
        self,
        store: GraphStore,
        ttl: int,
        rng: Optional[random.Random] = None,
        respawn_on_deadlock: bool = True,
    ):
        super().__init__(store, ttl, rng)
        self.respawn_on_deadlock = respawn_on_deadlock
        self.reference_bearings: Dict[int, float] = {}

    @classmethod
    def from_config(
        cls, config: SearchConfig, store: GraphStore, rng: Optional[random.Random] = None
    ) -> "BidirectionalSearchLinear":
        return cls(store, config.ttl, rng, respawn_on_deadlock=config.respawn_on_deadlock)

    @property
    def respawns_deadlocked(self) -> bool:
        return self.respawn_on_deadlock

    def _reset(self) -> None:
        super()._reset()
        self.reference_bearings = {}

    def _propagate_tick(self) -> None:
        for query_id in list(self.queries):
            query = self.queries[query_id]
            if query.ttl <= 0:
                query.current = set()
                continue
            if query.deadlocked:
                continue
            self._advance(query)

    def _advance(self, query: Query) -> None:
        position = query.position
        if position is None:
            return

        if query.first_hop:
            next_hop = self.store.pick_random_neighbor(position, self.rng)
            if next_hop == position:
                logger.debug(f"Query {query.query_id} starts on isolated node {position}")
                query.ttl = 0
                return
            self.reference_bearings[query.query_id] = self.store.bearing(query.source, next_hop)
        else:
            next_hop = self.closest_outward_neighbor(query, position)
            if next_hop is None:
                query.deadlocked = True
                logger.debug(f"Query {query.query_id} deadlocked at node {position}")
                if self.respawn_on_deadlock:
                    self._respawn(query)
                return

        self._take_hop(query, position, next_hop)

    def closest_outward_neighbor(self, query: Query, position: int) -> Optional[int]:
        """Neighbour nearest the reference bearing among those farther from the source, or None."""
        reference = self.reference_bearings[query.query_id]
        current_distance = self.store.distance(query.source, position)
        best: Optional[int] = None
        best_delta = 0.0
        for neighbor in self.store.neighbors_of(position):
            if neighbor == query.source:
                continue
            if self.store.distance(query.source, neighbor) <= current_distance:
                continue
            delta = angular_difference(self.store.bearing(query.source, neighbor), reference)
            if best is None or delta < best_delta:
                best = neighbor
                best_delta = delta
        return best

    def _respawn(self, query: Query) -> None:
        group_id = self.groups.group_of(query.query_id)
        replacement = Query.start(
            self._next_query_id(),
            query.source,
            query.targets,
            query.ttl - 1,
            prev_hops=query.prev_hops,
        )
        query.ttl = 0
        self._schedule(replacement, group_id)
        logger.debug(
            f"Query {query.query_id} respawned at source {query.source} as query {replacement.query_id} "
            f"(ttl {replacement.ttl})"
        )

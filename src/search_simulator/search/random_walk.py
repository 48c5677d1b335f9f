import logging
import random
from typing import Optional

from search_simulator.graph.store import GraphStore
from search_simulator.models import SearchConfig, StrategyType
from .base import Search
from .query import Query

logger = logging.getLogger(__name__)


class RandomWalk(Search):
    """Single walker stepping to a uniformly random neighbour each tick."""

    STRATEGY = StrategyType.RANDOM_WALK
    AVOID_BACKTRACK_DEFAULT = False

    def __init__(
        self,
        store: GraphStore,
        ttl: int,
        rng: Optional[random.Random] = None,
        avoid_backtrack: Optional[bool] = None,
    ):
        super().__init__(store, ttl, rng)
        self.avoid_backtrack = self.AVOID_BACKTRACK_DEFAULT if avoid_backtrack is None else avoid_backtrack

    @classmethod
    def from_config(cls, config: SearchConfig, store: GraphStore, rng: Optional[random.Random] = None) -> "RandomWalk":
        return cls(store, config.ttl, rng, avoid_backtrack=config.avoid_backtrack)

    def _propagate_tick(self) -> None:
        # Replicas created this tick are queued, so iterating the current ids is safe
        for query_id in list(self.queries):
            query = self.queries[query_id]
            if query.ttl <= 0:
                query.current = set()
                continue
            self._advance(query)

    def _advance(self, query: Query) -> None:
        position = query.position
        if position is None:
            return
        next_hop = self._choose_next_hop(query, position)
        if next_hop == position:
            logger.debug(f"Walker {query.query_id} is stranded on isolated node {position}")
            query.ttl = 0
            return
        self._take_hop(query, position, next_hop)
        self._after_hop(query, next_hop)

    def _choose_next_hop(self, query: Query, position: int) -> int:
        next_hop = self.store.pick_random_neighbor(position, self.rng)
        if (
            self.avoid_backtrack
            and query.previous_node is not None
            and self.store.degree(position) > 1
        ):
            while next_hop == query.previous_node:
                next_hop = self.store.pick_random_neighbor(position, self.rng)
        return next_hop

    def _after_hop(self, query: Query, node_id: int) -> None:
        """Hook run after every successful hop."""
        pass

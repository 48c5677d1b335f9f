import logging
import random
from typing import Dict, Optional

from search_simulator.graph.store import GraphStore
from search_simulator.models import SearchConfig, StrategyType
from .query import Query
from .random_walk import RandomWalk

logger = logging.getLogger(__name__)

MAX_EXPONENT = 1023


class RandomlyReplicatedRandomWalk(RandomWalk):
    """
    Random walk whose walkers occasionally split in two.

    After each hop a walker replicates with probability p0 ** (2 ** k), where
    k is the number of replications its group has already made, so growth
    dies off quickly. The replica starts on the node just reached, shares the
    parent's targets, visited set and prev-hop record, and takes half of the
    parent's remaining TTL (rounded down).
    """

    STRATEGY = StrategyType.RRRW
    AVOID_BACKTRACK_DEFAULT = True

    def __init__(
        self,
        store: GraphStore,
        ttl: int,
        rng: Optional[random.Random] = None,
        replication_probability: float = 0.1,
        avoid_backtrack: Optional[bool] = None,
    ):
        super().__init__(store, ttl, rng, avoid_backtrack=avoid_backtrack)
        if not 0.0 <= replication_probability <= 1.0:
            raise ValueError(f"Replication probability must be in [0, 1], got {replication_probability}")
        self.replication_probability = replication_probability
        self.replications: Dict[int, int] = {}

    @classmethod
    def from_config(
        cls, config: SearchConfig, store: GraphStore, rng: Optional[random.Random] = None
    ) -> "RandomlyReplicatedRandomWalk":
        return cls(
            store,
            config.ttl,
            rng,
            replication_probability=config.replication_probability,
            avoid_backtrack=config.avoid_backtrack,
        )

    def _reset(self) -> None:
        super()._reset()
        self.replications = {}

    def replication_chance(self, group_id: int) -> float:
        p0 = self.replication_probability
        if p0 in (0.0, 1.0):
            return p0
        # 2 ** 1024 no longer fits in a float; p0 ** 2 ** 1023 has already underflowed to 0
        k = min(self.replications.get(group_id, 0), MAX_EXPONENT)
        return p0 ** float(2 ** k)

    def _after_hop(self, query: Query, node_id: int) -> None:
        group_id = self.groups.group_of(query.query_id)
        if self.rng.random() >= self.replication_chance(group_id):
            return

        remaining = query.ttl
        replica = Query(
            query_id=self._next_query_id(),
            source=node_id,
            targets=query.targets,
            current={node_id},
            visited=query.visited,
            prev_hops=query.prev_hops,
            ttl=remaining // 2,
            first_hop=False,
            previous_node=query.previous_node,
        )
        query.ttl = remaining - replica.ttl
        self.replications[group_id] = self.replications.get(group_id, 0) + 1
        self._schedule(replica, group_id)
        logger.debug(
            f"Query {query.query_id} replicated at node {node_id} as query {replica.query_id} "
            f"(ttl {query.ttl}/{replica.ttl})"
        )

import logging
import random
from typing import Dict, List, Optional, Set

from search_simulator.graph.store import GraphStore
from search_simulator.models import StrategyType
from .base import Search

logger = logging.getLogger(__name__)


class Flood(Search):
    """
    Breadth-first broadcast.

    Every frontier node forwards to all neighbours except those it received
    the query from. A node forwards at most once per run; the TTL counts
    ticks rather than messages.
    """

    STRATEGY = StrategyType.FLOOD

    def __init__(self, store: GraphStore, ttl: int, rng: Optional[random.Random] = None):
        super().__init__(store, ttl, rng)
        self.has_propagated: Set[int] = set()

    def _reset(self) -> None:
        super()._reset()
        self.has_propagated = set()

    def _propagate_tick(self) -> None:
        query = self.queries[0]
        if query.ttl <= 0:
            query.current = set()
            return

        next_frontier: Set[int] = set()
        received_from: Dict[int, List[int]] = {}
        for node_id in sorted(query.current):
            if node_id in self.has_propagated:
                continue
            self.has_propagated.add(node_id)
            senders = query.prev_hops.get(node_id, [])
            for neighbor in self.store.neighbors_of(node_id):
                if not query.first_hop and neighbor in senders:
                    continue
                next_frontier.add(neighbor)
                received_from.setdefault(neighbor, []).append(node_id)
                self.total_messages += 1

        query.prev_hops.update(received_from)
        query.current = next_frontier
        query.visited |= next_frontier
        query.first_hop = False
        query.ttl -= 1
        logger.debug(
            f"Flood tick {self.total_time + 1}: frontier {len(next_frontier)}, messages {self.total_messages}"
        )

"""
Search - the engine contract every strategy implements.

A run is a sequence of ticks. Each tick the driver calls propagate_queries()
to move every active query one hop, then check_terminating_conditions() to
decide whether the run is over. Engines only ever look at the adjacency of
the node a query currently sits on.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set, Tuple

from search_simulator.graph.store import GraphStore
from search_simulator.models import (
    STRATEGY_LABELS,
    QuerySnapshot,
    QueryStatus,
    SearchConfig,
    SearchOutcome,
    StrategyType,
    TerminationReason,
)
from .query import PATH_KEY, Query, QueryGroups

logger = logging.getLogger(__name__)


class Search(ABC):
    """Base class for search strategies."""

    N_QUERIES = 1
    BIDIRECTIONAL = False
    STRATEGY: Optional[StrategyType] = None

    def __init__(self, store: GraphStore, ttl: int, rng: Optional[random.Random] = None):
        if ttl < 0:
            raise ValueError(f"TTL must be non-negative, got {ttl}")
        self.store = store
        self.initial_ttl = ttl
        self.rng = rng if rng is not None else random.Random()

        self.queries: Dict[int, Query] = {}
        self.groups = QueryGroups()
        self.total_messages = 0
        self.total_time = 0
        self.result = SearchOutcome.FAILURE
        self.termination_reason: Optional[TerminationReason] = None
        self.is_complete = False
        self._degenerate = False
        # Queries created mid-tick; registered once the tick is over
        self._pending: List[Tuple[Query, int]] = []

    @property
    def label(self) -> str:
        if self.STRATEGY is None:
            return type(self).__name__
        return STRATEGY_LABELS[self.STRATEGY]

    @classmethod
    def from_config(cls, config: SearchConfig, store: GraphStore, rng: Optional[random.Random] = None) -> "Search":
        return cls(store, config.ttl, rng)

    # --- Setup ---

    def choose_source_and_targets(self) -> bool:
        """
        Pick a random source and a distinct random target.

        Returns False when the source is isolated; the run is then already
        complete with a failure.
        """
        node_count = self.store.node_count()
        if node_count < 2:
            raise ValueError(f"A search needs at least two nodes, network has {node_count}")
        source = self.rng.randrange(node_count)
        target = source
        while target == source:
            target = self.rng.randrange(node_count)
        return self.assign_source_and_target(source, target)

    def assign_source_and_target(self, source: int, target: int) -> bool:
        """Seed the initial queries; bidirectional engines get a mirrored second query."""
        if source == target:
            raise ValueError(f"Source and target must differ, both are {source}")
        self._reset()

        endpoints = [(source, target)]
        if self.BIDIRECTIONAL:
            endpoints.append((target, source))
        for group_id, (query_source, query_target) in enumerate(endpoints):
            query = Query.start(self._next_query_id(), query_source, {query_target}, self.initial_ttl)
            self._register(query, group_id)

        if self.store.degree(source) == 0:
            logger.warning(f"Source node {source} has no neighbours; search fails immediately")
            self._degenerate = True
            self._finish(SearchOutcome.FAILURE, TerminationReason.DEGENERATE_SOURCE)
            return False

        logger.debug(f"{self.label}: source {source}, target {target}, ttl {self.initial_ttl}")
        return True

    def _reset(self) -> None:
        self.queries.clear()
        self.groups.clear()
        self._pending.clear()
        self.total_messages = 0
        self.total_time = 0
        self.result = SearchOutcome.FAILURE
        self.termination_reason = None
        self.is_complete = False
        self._degenerate = False

    def _next_query_id(self) -> int:
        return len(self.queries) + len(self._pending)

    def _register(self, query: Query, group_id: int) -> None:
        self.queries[query.query_id] = query
        self.groups.add(group_id, query.query_id)

    def _schedule(self, query: Query, group_id: int) -> None:
        """Queue a query created during a tick; it moves from the next tick on."""
        self._pending.append((query, group_id))

    # --- Ticks ---

    def propagate_queries(self) -> None:
        """Advance every active query by one hop."""
        if self.is_complete:
            return
        if not self.queries:
            raise RuntimeError("No queries to propagate; choose a source and target first")

        self._propagate_tick()

        for query, group_id in self._pending:
            self._register(query, group_id)
        self._pending.clear()
        self.total_time += 1

    @abstractmethod
    def _propagate_tick(self) -> None:
        """Strategy-specific movement for one tick."""
        pass

    def _take_hop(self, query: Query, position: int, next_hop: int) -> None:
        """Move a single-node walker and charge one message plus one TTL unit."""
        query.prev_hops.setdefault(PATH_KEY, []).insert(0, position)
        query.previous_node = position
        query.current = {next_hop}
        query.visited.add(next_hop)
        query.first_hop = False
        query.deadlocked = False
        query.ttl -= 1
        self.total_messages += 1

    def _is_exhausted(self, query: Query) -> bool:
        return query.ttl <= 0 or (query.deadlocked and not self.respawns_deadlocked)

    @property
    def respawns_deadlocked(self) -> bool:
        return False

    def check_terminating_conditions(self) -> bool:
        """
        Decide whether the run is over and record the outcome.

        Success is any query holding one of its targets, or any query standing
        on a node another group has already visited. Failure is every query
        being out of TTL or stuck.
        """
        if self._degenerate:
            return True
        if self.is_complete:
            return True

        for query in self.queries.values():
            if query.found_target:
                return self._finish(SearchOutcome.SUCCESS, TerminationReason.TARGET_FOUND)

        if len(self.groups) > 1:
            visited_by_group = {group_id: self._group_visited(group_id) for group_id in self.groups.group_ids()}
            for query in self.queries.values():
                own_group = self.groups.group_of(query.query_id)
                for group_id, visited in visited_by_group.items():
                    if group_id != own_group and query.current & visited:
                        return self._finish(SearchOutcome.SUCCESS, TerminationReason.SEARCHES_MET)

        if all(self._is_exhausted(query) for query in self.queries.values()):
            if all(query.ttl <= 0 for query in self.queries.values()):
                reason = TerminationReason.TTL_EXHAUSTED
            else:
                reason = TerminationReason.ALL_DEADLOCKED
            return self._finish(SearchOutcome.FAILURE, reason)

        return False

    def _group_visited(self, group_id: int) -> Set[int]:
        visited: Set[int] = set()
        for query_id in self.groups.members(group_id):
            visited |= self.queries[query_id].visited
        return visited

    def _finish(self, outcome: SearchOutcome, reason: TerminationReason) -> bool:
        self.result = outcome
        self.termination_reason = reason
        self.is_complete = True
        logger.info(
            f"{self.label} finished: {outcome.name} ({reason.value}) after {self.total_time} ticks, "
            f"{self.total_messages} messages"
        )
        return True

    # --- Inspection ---

    def calculate_number_of_nodes_visited(self) -> int:
        visited: Set[int] = set()
        for query in self.queries.values():
            visited |= query.visited
        return len(visited)

    def query_status(self, query_id: int) -> QueryStatus:
        query = self.queries[query_id]
        if query.found_target:
            return QueryStatus.SUCCESS
        if query.deadlocked:
            return QueryStatus.DEADLOCKED
        if query.ttl <= 0:
            return QueryStatus.TTL_EXPIRED
        if query.first_hop:
            return QueryStatus.UNSTARTED
        return QueryStatus.PROPAGATING

    # --- Persistence ---

    def snapshot_query(self, query_id: int = 0) -> QuerySnapshot:
        query = self.queries[query_id]
        return QuerySnapshot(
            source=query.source,
            targets=sorted(query.targets),
            prev_hops={key: list(hops) for key, hops in query.prev_hops.items()},
        )

    def restore_query(self, snapshot: QuerySnapshot) -> bool:
        """
        Rebuild the initial queries from a saved primary query.

        For bidirectional engines the mirrored query starts at the saved
        target and searches for the saved source.
        """
        ok = self.assign_source_and_target(snapshot.source, snapshot.targets[0])
        primary = self.queries[0]
        primary.targets.update(snapshot.targets)
        primary.prev_hops.update({key: list(hops) for key, hops in snapshot.prev_hops.items()})
        return ok

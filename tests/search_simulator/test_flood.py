"""
Flooding tests: message accounting, single propagation per node and TTL handling.
"""

import pytest
import random

from search_simulator.models import QueryStatus, SearchOutcome, TerminationReason
from search_simulator.search import Flood


def run_to_completion(search, max_ticks=1000):
    for _ in range(max_ticks):
        search.propagate_queries()
        if search.check_terminating_conditions():
            return
    raise AssertionError("search did not terminate")


@pytest.mark.unit
class TestFlood:

    def test_cycle_each_node_propagates_once(self, cycle_with_isolated_target):
        flood = Flood(cycle_with_isolated_target, ttl=10, rng=random.Random(1))
        assert flood.assign_source_and_target(0, 5)

        run_to_completion(flood)

        # 0 -> {1, 4}, then 1 -> 2 and 4 -> 3, then 2 <-> 3; nothing after that
        assert flood.total_messages == 6
        assert flood.has_propagated == {0, 1, 2, 3, 4}
        assert flood.result == SearchOutcome.FAILURE
        assert flood.termination_reason == TerminationReason.TTL_EXHAUSTED
        assert flood.total_time == 10

    def test_messages_per_tick_on_cycle(self, cycle_with_isolated_target):
        flood = Flood(cycle_with_isolated_target, ttl=10, rng=random.Random(1))
        flood.assign_source_and_target(0, 5)

        counts = []
        for _ in range(4):
            flood.propagate_queries()
            counts.append(flood.total_messages)
        assert counts == [2, 4, 6, 6]
        assert flood.queries[0].current == set()

    def test_predecessors_not_sent_back(self, cycle_with_isolated_target):
        flood = Flood(cycle_with_isolated_target, ttl=10, rng=random.Random(1))
        flood.assign_source_and_target(0, 5)
        flood.propagate_queries()
        flood.propagate_queries()

        query = flood.queries[0]
        assert query.current == {2, 3}
        assert query.prev_hops[2] == [1]
        assert query.prev_hops[3] == [4]

    def test_reaches_target_on_path(self, path_store):
        flood = Flood(path_store, ttl=10, rng=random.Random(1))
        flood.assign_source_and_target(0, 4)

        run_to_completion(flood)

        assert flood.result == SearchOutcome.SUCCESS
        assert flood.termination_reason == TerminationReason.TARGET_FOUND
        assert flood.total_time == 4
        assert flood.total_messages == 4
        assert flood.query_status(0) == QueryStatus.SUCCESS
        assert flood.calculate_number_of_nodes_visited() == 5

    def test_ttl_too_short(self, path_store):
        flood = Flood(path_store, ttl=2, rng=random.Random(1))
        flood.assign_source_and_target(0, 4)

        run_to_completion(flood)

        assert flood.result == SearchOutcome.FAILURE
        assert flood.total_time == 2
        assert flood.query_status(0) == QueryStatus.TTL_EXPIRED

    def test_visited_contains_frontier(self, er_store):
        flood = Flood(er_store, ttl=4, rng=random.Random(5))
        flood.choose_source_and_targets()
        while True:
            flood.propagate_queries()
            query = flood.queries[0]
            assert query.current <= query.visited
            if flood.check_terminating_conditions():
                break

    def test_reassigning_clears_propagation_memory(self, cycle_with_isolated_target):
        flood = Flood(cycle_with_isolated_target, ttl=10, rng=random.Random(1))
        flood.assign_source_and_target(0, 5)
        run_to_completion(flood)

        flood.assign_source_and_target(0, 5)
        assert flood.has_propagated == set()
        assert flood.total_messages == 0
        assert not flood.is_complete

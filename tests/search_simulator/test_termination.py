"""
Every strategy must stop within its TTL budget and keep visited sets consistent.
"""

import pytest
import random

from search_simulator.models import STRATEGY_LABELS, SearchConfig, SearchOutcome, StrategyType
from search_simulator.search import STRATEGIES, create_search

TTLS = {
    StrategyType.FLOOD: 5,
    StrategyType.RANDOM_WALK: 60,
    StrategyType.RRRW: 60,
    StrategyType.BIDIRECTIONAL_RW: 60,
    StrategyType.BIDIRECTIONAL_RRRW: 60,
    StrategyType.BIDIRECTIONAL_LINEAR: 60,
}


@pytest.mark.unit
class TestTermination:

    def test_registry_covers_every_strategy(self):
        assert set(STRATEGIES) == set(StrategyType)

    @pytest.mark.parametrize("strategy", list(StrategyType))
    def test_engine_label_matches_strategy_table(self, strategy, path_store):
        engine_class = STRATEGIES[strategy]
        assert engine_class.STRATEGY == strategy

        search = create_search(SearchConfig(strategy=strategy), path_store, random.Random(1))
        assert search.label == STRATEGY_LABELS[strategy]

    @pytest.mark.parametrize("strategy", list(StrategyType))
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_terminates_within_ttl(self, strategy, seed, rg_store):
        ttl = TTLS[strategy]
        search = create_search(SearchConfig(strategy=strategy, ttl=ttl), rg_store, random.Random(seed))
        search.choose_source_and_targets()

        while not search.check_terminating_conditions():
            search.propagate_queries()
            for query in search.queries.values():
                assert query.current <= query.visited
            assert search.total_time <= ttl

        assert search.is_complete
        assert search.result in (SearchOutcome.SUCCESS, SearchOutcome.FAILURE)
        assert search.termination_reason is not None

    @pytest.mark.parametrize("strategy", list(StrategyType))
    def test_every_query_belongs_to_a_group(self, strategy, er_store):
        search = create_search(SearchConfig(strategy=strategy, ttl=20), er_store, random.Random(5))
        search.choose_source_and_targets()
        while not search.check_terminating_conditions():
            search.propagate_queries()

        for query_id in search.queries:
            assert search.groups.group_of(query_id) in search.groups.group_ids()
        assert len(search.groups) == search.N_QUERIES

    @pytest.mark.parametrize("strategy", list(StrategyType))
    def test_nodes_visited_counts_union(self, strategy, er_store):
        search = create_search(SearchConfig(strategy=strategy, ttl=20), er_store, random.Random(6))
        search.choose_source_and_targets()
        while not search.check_terminating_conditions():
            search.propagate_queries()

        union = set()
        for query in search.queries.values():
            union |= query.visited
        assert search.calculate_number_of_nodes_visited() == len(union)

"""
Coordinator tests: run lifecycle, batch modes and save/restore.
"""

import pytest
import random

from search_simulator.coordinator import SearchCoordinator
from search_simulator.exceptions import SimulatorException
from search_simulator.models import (
    BatchConfig,
    BatchMode,
    InitialState,
    NetworkConfig,
    NetworkType,
    QuerySnapshot,
    SearchConfig,
    StrategyType,
)


@pytest.fixture
def coordinator(small_network_config, flood_config, storage) -> SearchCoordinator:
    return SearchCoordinator(small_network_config, flood_config, rng=random.Random(21), storage=storage)


@pytest.mark.integration
class TestSearchCoordinatorRuns:

    def test_step_before_initialization(self, coordinator):
        with pytest.raises(SimulatorException):
            coordinator.step()

    def test_search_needs_network(self, coordinator):
        with pytest.raises(SimulatorException):
            coordinator.generate_search()

    def test_run_collects_statistics(self, coordinator):
        coordinator.initialize_network_and_search()
        run = coordinator.run()

        assert coordinator.search.is_complete
        assert run.total_time == coordinator.search.total_time
        assert run.total_messages == coordinator.search.total_messages
        assert run.total_links == coordinator.store.link_count()
        assert run.nodes_visited == coordinator.search.calculate_number_of_nodes_visited()
        assert run.success == (coordinator.search.result == 1)
        assert run.strategy == StrategyType.FLOOD
        assert run.network_type == NetworkType.ERDOS_RENYI

    def test_step_is_idempotent_once_complete(self, coordinator):
        coordinator.initialize_network_and_search()
        coordinator.run()
        ticks = coordinator.search.total_time
        assert coordinator.step()
        assert coordinator.search.total_time == ticks

    def test_reset_search_keeps_endpoints(self, coordinator):
        coordinator.initialize_network_and_search()
        before = coordinator.search.queries[0]
        source, targets = before.source, set(before.targets)
        store = coordinator.store
        coordinator.run()

        coordinator.reset_search()

        after = coordinator.search.queries[0]
        assert coordinator.store is store
        assert (after.source, after.targets) == (source, targets)
        assert coordinator.search.total_time == 0
        assert after.prev_hops == {}

    def test_initialize_search_keeps_network(self, coordinator):
        coordinator.initialize_network_and_search()
        store = coordinator.store
        coordinator.initialize_search()
        assert coordinator.store is store
        assert coordinator.search.total_time == 0


@pytest.mark.integration
class TestSearchCoordinatorBatches:

    def test_same_search_repeats_identically_for_flood(self, coordinator):
        summary = coordinator.run_batch(BatchConfig(runs=4, mode=BatchMode.SAME_NETWORK_SAME_SEARCH))

        assert summary.runs == 4
        assert summary.total_messages.stddev == 0.0
        assert summary.total_time.stddev == 0.0
        assert summary.success_rate in (0.0, 100.0)

    def test_same_network_keeps_link_count(self, coordinator):
        summary = coordinator.run_batch(BatchConfig(runs=5, mode=BatchMode.SAME_NETWORK_DIFFERENT_SEARCH))
        assert summary.total_links.stddev == 0.0
        assert summary.total_links.mean == coordinator.store.link_count()

    def test_different_network_regenerates(self, coordinator):
        coordinator.initialize_network_and_search()
        first_store = coordinator.store
        coordinator.run_batch(BatchConfig(runs=3, mode=BatchMode.DIFFERENT_NETWORK_DIFFERENT_SEARCH))
        assert coordinator.store is not first_store

    def test_batch_runs_are_stored(self, coordinator, storage):
        coordinator.run_batch(BatchConfig(runs=3, store_runs=True))
        runs = storage.load_runs()
        assert [run.run_index for run in runs] == [0, 1, 2]
        assert storage.storage_config.csv_path.exists()

    def test_all_strategies_share_one_network(self, storage):
        coordinator = SearchCoordinator(
            NetworkConfig(network_type=NetworkType.ERDOS_RENYI, n_nodes=60, link_probability=0.1),
            SearchConfig(strategy=StrategyType.FLOOD),
            rng=random.Random(8),
            storage=storage,
        )
        summaries = coordinator.run_all_strategies(BatchConfig(runs=2))

        assert set(summaries) == set(StrategyType)
        link_means = {summary.total_links.mean for summary in summaries.values()}
        assert len(link_means) == 1
        assert all(summary.runs == 2 for summary in summaries.values())


@pytest.mark.integration
class TestSaveRestore:

    def test_restore_reproduces_saved_search(self, small_network_config, storage):
        saver = SearchCoordinator(
            small_network_config, SearchConfig(strategy=StrategyType.FLOOD, ttl=5),
            rng=random.Random(1), storage=storage,
        )
        saver.initialize_network_and_search(InitialState.SAVE)
        saved_query = saver.search.queries[0]

        restorer = SearchCoordinator(
            small_network_config, SearchConfig(strategy=StrategyType.BIDIRECTIONAL_RW, ttl=50),
            rng=random.Random(2), storage=storage,
        )
        restorer.initialize_network_and_search(InitialState.RESTORE)

        assert restorer.store.link_count() == saver.store.link_count()
        assert restorer.store.locations == saver.store.locations
        first, second = restorer.search.queries[0], restorer.search.queries[1]
        assert first.source == saved_query.source
        assert first.targets == saved_query.targets
        assert second.source == next(iter(saved_query.targets))
        assert second.targets == {saved_query.source}

    def test_restore_without_saved_files(self, coordinator):
        assert not coordinator.initialize_network_and_search(InitialState.RESTORE)
        assert coordinator.search is None

    @pytest.mark.parametrize("source,targets", [(-1, [3]), (2, [-4]), (2, [500])])
    def test_restore_rejects_unknown_node_ids(self, coordinator, storage, source, targets):
        coordinator.initialize_network_and_search(InitialState.SAVE)
        storage.save_query(QuerySnapshot(source=source, targets=targets))

        assert not coordinator.initialize_network_and_search(InitialState.RESTORE)
        assert coordinator.search is None

    def test_save_requires_storage(self, small_network_config, flood_config):
        coordinator = SearchCoordinator(small_network_config, flood_config, rng=random.Random(1))
        with pytest.raises(SimulatorException):
            coordinator.initialize_network_and_search(InitialState.SAVE)

"""
Snapshot storage tests: network/query persistence and the run log.
"""

import pytest

from search_simulator.exceptions import RestoreFailedException
from search_simulator.models import QuerySnapshot, RunStatistics
from search_simulator.search import PATH_KEY


@pytest.mark.integration
class TestSnapshotStorage:

    def test_network_survives_save_and_load(self, storage, er_store):
        assert storage.save_network(er_store)
        restored = storage.load_network()

        assert restored.node_count() == er_store.node_count()
        assert restored.link_count() == er_store.link_count()
        assert restored.neighbors_of(17) == er_store.neighbors_of(17)

    def test_query_keeps_integer_prev_hop_keys(self, storage):
        snapshot = QuerySnapshot(source=3, targets=[9], prev_hops={PATH_KEY: [2, 1], 4: [3]})
        assert storage.save_query(snapshot)

        restored = storage.load_query()
        assert restored.source == 3
        assert restored.targets == [9]
        assert restored.prev_hops == {PATH_KEY: [2, 1], 4: [3]}

    def test_missing_snapshot(self, storage):
        with pytest.raises(RestoreFailedException):
            storage.load_network()
        with pytest.raises(RestoreFailedException):
            storage.load_query()

    def test_corrupt_snapshot(self, storage):
        storage.storage_config.storage_path.mkdir(parents=True)
        storage.storage_config.query_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RestoreFailedException):
            storage.load_query()

    def test_inconsistent_network(self, storage):
        storage.storage_config.storage_path.mkdir(parents=True)
        storage.storage_config.network_path.write_text(
            '{"node_count": 2, "locations": [[0.1, 0.1], [0.2, 0.2]], '
            '"links": [{"source_id": 0, "destination_id": 0}]}',
            encoding="utf-8",
        )
        with pytest.raises(RestoreFailedException):
            storage.load_network()

    def test_run_log_appends(self, storage):
        for index in range(2):
            run = RunStatistics(
                run_index=index, total_time=5, total_messages=5, total_links=40, nodes_visited=6, success=True
            )
            assert storage.store_run(run)

        runs = storage.load_runs()
        assert len(runs) == 2
        lines = storage.storage_config.csv_path.read_text(encoding="utf-8").strip().splitlines()
        assert lines[0].startswith("timestamp,run_index")
        assert len(lines) == 3

    def test_run_log_missing(self, storage):
        assert storage.load_runs() == []

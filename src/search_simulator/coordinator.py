"""
SearchCoordinator - drives networks and searches through single runs and batches.

The coordinator owns the current GraphStore and Search engine. It can step a
run one tick at a time (interactive use), run it to completion, repeat runs in
one of the batch modes, and save or restore the initial network and query.
"""

import logging
import random
from typing import Dict, List, Optional

from search_simulator.exceptions import RestoreFailedException, SimulatorException
from search_simulator.graph import GraphStore, create_generator
from search_simulator.models import (
    BatchConfig,
    BatchMode,
    BatchSummary,
    InitialState,
    NetworkConfig,
    RunStatistics,
    SearchConfig,
    SearchOutcome,
    StrategyType,
    all_strategies_ttl,
)
from search_simulator.search import Search, create_search
from search_simulator.stats import summarize
from search_simulator.storage import SnapshotStorageService

logger = logging.getLogger(__name__)


class SearchCoordinator:
    """Runs searches over generated networks."""

    def __init__(
        self,
        network_config: NetworkConfig,
        search_config: SearchConfig,
        rng: Optional[random.Random] = None,
        storage: Optional[SnapshotStorageService] = None,
    ):
        self.network_config = network_config
        self.search_config = search_config
        self.rng = rng if rng is not None else random.Random()
        self.storage = storage
        self.store: Optional[GraphStore] = None
        self.search: Optional[Search] = None

    # --- Construction ---

    def generate_network(self, network_config: Optional[NetworkConfig] = None) -> GraphStore:
        if network_config is not None:
            self.network_config = network_config
        store = GraphStore(self.network_config.n_nodes)
        create_generator(self.network_config, store, self.rng).generate()
        self.store = store
        self.search = None
        return store

    def generate_search(self, search_config: Optional[SearchConfig] = None) -> Search:
        """New engine over the current network; sources are chosen separately."""
        if search_config is not None:
            self.search_config = search_config
        if self.store is None:
            raise SimulatorException("Generate or restore a network before creating a search")
        self.search = create_search(self.search_config, self.store, self.rng)
        return self.search

    def initialize_network_and_search(self, initial_state: InitialState = InitialState.NEITHER) -> bool:
        """
        Fresh network and fresh search.

        SAVE persists the new network and primary query; RESTORE loads them
        instead of generating. Returns False if the search cannot start, either
        because the source is isolated or because the restore failed.
        """
        if initial_state == InitialState.RESTORE:
            return self._restore()

        self.generate_network()
        self.generate_search()
        ok = self.search.choose_source_and_targets()

        if initial_state == InitialState.SAVE:
            storage = self._require_storage()
            storage.save_network(self.store)
            storage.save_query(self.search.snapshot_query())
        return ok

    def _restore(self) -> bool:
        storage = self._require_storage()
        try:
            store = storage.load_network()
            snapshot = storage.load_query()
        except RestoreFailedException as e:
            logger.warning(f"Restore failed, search not started: {e.message}")
            self.search = None
            return False

        if any(store.node_by_id(node_id) is None for node_id in [snapshot.source, *snapshot.targets]):
            logger.warning("Restore failed, saved query refers to nodes outside the saved network")
            self.search = None
            return False

        self.store = store
        self.generate_search()
        return self.search.restore_query(snapshot)

    def initialize_search(self) -> bool:
        """Same network, new engine with a new source and target."""
        self.generate_search()
        return self.search.choose_source_and_targets()

    def reset_search(self) -> bool:
        """Same network, same source and target, fresh engine."""
        if self.search is None or not self.search.queries:
            raise SimulatorException("No search to reset")
        snapshot = self.search.snapshot_query().model_copy(update={"prev_hops": {}})
        self.generate_search()
        return self.search.restore_query(snapshot)

    def _require_storage(self) -> SnapshotStorageService:
        if self.storage is None:
            raise SimulatorException("Saving or restoring needs a storage service")
        return self.storage

    # --- Running ---

    def step(self) -> bool:
        """One tick. Returns True once the search is over."""
        if self.search is None:
            raise SimulatorException("No search initialized")
        if self.search.is_complete:
            return True
        self.search.propagate_queries()
        return self.search.check_terminating_conditions()

    def run(self) -> RunStatistics:
        """Tick until the search terminates."""
        while not self.step():
            pass
        return self.collect_statistics()

    def collect_statistics(self, run_index: int = 0) -> RunStatistics:
        if self.search is None or self.store is None:
            raise SimulatorException("No search initialized")
        return RunStatistics(
            run_index=run_index,
            strategy=self.search_config.strategy,
            network_type=self.network_config.network_type,
            total_time=self.search.total_time,
            total_messages=self.search.total_messages,
            total_links=self.store.link_count(),
            nodes_visited=self.search.calculate_number_of_nodes_visited(),
            success=self.search.result == SearchOutcome.SUCCESS,
            termination_reason=self.search.termination_reason,
        )

    def _prepare_run(self, mode: BatchMode, first: bool) -> None:
        if self.search is None:
            self.initialize_network_and_search()
            return
        untouched = self.search.total_time == 0 and not self.search.is_complete
        if first and untouched:
            return
        if mode == BatchMode.SAME_NETWORK_SAME_SEARCH:
            self.reset_search()
        elif mode == BatchMode.SAME_NETWORK_DIFFERENT_SEARCH:
            self.initialize_search()
        else:
            self.initialize_network_and_search()

    def run_batch(self, batch_config: BatchConfig) -> BatchSummary:
        """Repeat runs, regenerating what the batch mode asks for between them."""
        runs: List[RunStatistics] = []
        for index in range(batch_config.runs):
            self._prepare_run(batch_config.mode, first=index == 0)
            while not self.step():
                pass
            run = self.collect_statistics(run_index=index)
            runs.append(run)
            if batch_config.store_runs and self.storage is not None:
                self.storage.store_run(run)
            logger.debug(f"Run {index}: success={run.success}, ticks={run.total_time}, messages={run.total_messages}")

        summary = summarize(runs, batch_config.mode)
        logger.info(
            f"Batch of {summary.runs} {self.search_config.strategy.value} runs: "
            f"success rate {summary.success_rate:.1f}%, mean messages {summary.total_messages.mean:.1f}"
        )
        return summary

    def run_all_strategies(self, batch_config: BatchConfig) -> Dict[StrategyType, BatchSummary]:
        """Batch every strategy on the same network, each with its network-specific TTL."""
        if self.store is None:
            self.generate_network()

        summaries: Dict[StrategyType, BatchSummary] = {}
        for strategy in StrategyType:
            self.search_config = self.search_config.model_copy(
                update={"strategy": strategy, "ttl": all_strategies_ttl(strategy, self.network_config.network_type)}
            )
            self.initialize_search()
            summaries[strategy] = self.run_batch(batch_config)
        return summaries

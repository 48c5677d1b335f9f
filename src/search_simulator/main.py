import logging
import random
from typing import Dict, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from search_simulator.config import SimulatorConfig
from search_simulator.coordinator import SearchCoordinator
from search_simulator.logging_config import setup_logging, setup_prod_logging
from search_simulator.models import (
    STRATEGY_LABELS,
    DEFAULT_TTLS,
    BatchConfig,
    BatchMode,
    BatchSummary,
    InitialState,
    NetworkConfig,
    NetworkType,
    RunStatistics,
    SearchConfig,
    StrategyType,
)
from search_simulator.storage import SnapshotStorageService, StorageConfig

load_dotenv()

app = typer.Typer(help="Simulate decentralized search over random unstructured networks.")
console = Console()
logger = logging.getLogger(__name__)


def _configure(
    log_level: Optional[str],
    seed: Optional[int],
    storage_dir: Optional[str],
    log_file: Optional[str] = None,
) -> SimulatorConfig:
    config = SimulatorConfig.from_env()
    updates = {}
    if log_level is not None:
        updates["log_level"] = log_level
    if seed is not None:
        updates["seed"] = seed
    if storage_dir is not None:
        updates["storage_dir"] = storage_dir
    if log_file is not None:
        updates["log_file"] = log_file
    config = config.model_copy(update=updates)
    if config.log_file:
        # a mirrored log file gets plain records on the terminal too
        setup_prod_logging(level=config.log_level, log_file=config.log_file)
    else:
        setup_logging(level=config.log_level, use_rich=config.use_rich_logging)
    return config


def _build_coordinator(
    config: SimulatorConfig,
    network: NetworkType,
    nodes: int,
    probability: float,
    radius: float,
    initial_nodes: int,
    links_per_step: int,
    strategy: StrategyType,
    ttl: Optional[int],
) -> SearchCoordinator:
    network_config = NetworkConfig(
        network_type=network,
        n_nodes=nodes,
        link_probability=probability,
        radius=radius,
        initial_nodes=initial_nodes,
        links_per_step=links_per_step,
    )
    search_config = SearchConfig(strategy=strategy, ttl=ttl)
    storage = SnapshotStorageService(StorageConfig(storage_dir=config.storage_dir))
    return SearchCoordinator(network_config, search_config, rng=random.Random(config.seed), storage=storage)


def _initial_state(save: bool, restore: bool) -> InitialState:
    if save and restore:
        raise typer.BadParameter("--save and --restore cannot be combined")
    if restore:
        return InitialState.RESTORE
    if save:
        return InitialState.SAVE
    return InitialState.NEITHER


def _print_run(run: RunStatistics) -> None:
    table = Table(title=f"{STRATEGY_LABELS[run.strategy]} on {run.network_type.value}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Outcome", "SUCCESS" if run.success else "FAILURE")
    table.add_row("Reason", run.termination_reason.value if run.termination_reason else "-")
    table.add_row("Time (ticks)", str(run.total_time))
    table.add_row("Messages", str(run.total_messages))
    table.add_row("Links", str(run.total_links))
    table.add_row("Nodes visited", str(run.nodes_visited))
    console.print(table)


def _print_summaries(summaries: Dict[StrategyType, BatchSummary]) -> None:
    table = Table(title="Batch summary")
    table.add_column("Strategy", style="cyan")
    table.add_column("Runs", justify="right")
    table.add_column("Success %", justify="right")
    for metric in ("Time", "Messages", "Links", "Visited"):
        table.add_column(f"{metric} mean", justify="right")
        table.add_column(f"{metric} sd", justify="right")
    for strategy, summary in summaries.items():
        row = [STRATEGY_LABELS[strategy], str(summary.runs), f"{summary.success_rate:.1f}"]
        for metric in (summary.total_time, summary.total_messages, summary.total_links, summary.nodes_visited):
            row.extend([f"{metric.mean:.2f}", f"{metric.stddev:.2f}"])
        table.add_row(*row)
    console.print(table)


@app.command()
def run(
    network: NetworkType = typer.Option(NetworkType.ERDOS_RENYI, "--network", "-n", help="Network model."),
    nodes: int = typer.Option(1000, "--nodes", help="Number of nodes."),
    probability: float = typer.Option(0.02, "--probability", "-p", help="Erdos-Renyi link probability."),
    radius: float = typer.Option(0.08, "--radius", "-r", help="Random-geometric connection radius."),
    initial_nodes: int = typer.Option(2, "--initial-nodes", help="Barabasi-Albert seed size n0."),
    links_per_step: int = typer.Option(2, "--links-per-step", help="Barabasi-Albert links per new node m."),
    strategy: StrategyType = typer.Option(StrategyType.FLOOD, "--strategy", "-s", help="Search strategy."),
    ttl: Optional[int] = typer.Option(None, "--ttl", "-t", help="Hop budget; defaults per strategy."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for a reproducible run."),
    save: bool = typer.Option(False, "--save", help="Save the generated network and query."),
    restore: bool = typer.Option(False, "--restore", help="Restore the saved network and query instead of generating."),
    storage_dir: Optional[str] = typer.Option(None, "--storage-dir", help="Directory for snapshots and run logs."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR."),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also append log records to this file."),
):
    """
    Run a single search to completion.
    """
    config = _configure(log_level, seed, storage_dir, log_file)
    initial_state = _initial_state(save, restore)
    coordinator = _build_coordinator(
        config, network, nodes, probability, radius, initial_nodes, links_per_step, strategy, ttl
    )

    started = coordinator.initialize_network_and_search(initial_state)
    if coordinator.search is None:
        console.print("[red]Could not restore the saved network and query.[/red]")
        raise typer.Exit(code=1)
    if not started:
        logger.warning("Search could not start from the chosen source")

    _print_run(coordinator.run())


@app.command()
def batch(
    network: NetworkType = typer.Option(NetworkType.ERDOS_RENYI, "--network", "-n", help="Network model."),
    nodes: int = typer.Option(1000, "--nodes", help="Number of nodes."),
    probability: float = typer.Option(0.02, "--probability", "-p", help="Erdos-Renyi link probability."),
    radius: float = typer.Option(0.08, "--radius", "-r", help="Random-geometric connection radius."),
    initial_nodes: int = typer.Option(2, "--initial-nodes", help="Barabasi-Albert seed size n0."),
    links_per_step: int = typer.Option(2, "--links-per-step", help="Barabasi-Albert links per new node m."),
    strategy: StrategyType = typer.Option(StrategyType.FLOOD, "--strategy", "-s", help="Search strategy."),
    ttl: Optional[int] = typer.Option(None, "--ttl", "-t", help="Hop budget; defaults per strategy."),
    runs: int = typer.Option(10, "--runs", help="Number of runs."),
    mode: BatchMode = typer.Option(BatchMode.SAME_NETWORK_DIFFERENT_SEARCH, "--mode", help="What changes between runs."),
    all_strategies: bool = typer.Option(False, "--all-strategies", help="Batch every strategy on one network."),
    store_runs: bool = typer.Option(False, "--store-runs", help="Append each run to the run log."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for a reproducible batch."),
    storage_dir: Optional[str] = typer.Option(None, "--storage-dir", help="Directory for snapshots and run logs."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR."),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also append log records to this file."),
):
    """
    Repeat a search and report mean, deviation and success rate.
    """
    config = _configure(log_level, seed, storage_dir, log_file)
    coordinator = _build_coordinator(
        config, network, nodes, probability, radius, initial_nodes, links_per_step, strategy, ttl
    )
    batch_config = BatchConfig(runs=runs, mode=mode, store_runs=store_runs)

    if all_strategies:
        summaries = coordinator.run_all_strategies(batch_config)
    else:
        summaries = {strategy: coordinator.run_batch(batch_config)}
    _print_summaries(summaries)


@app.command()
def strategies():
    """
    List the available search strategies and their default TTLs.
    """
    table = Table(title="Strategies")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Default TTL", justify="right")
    for strategy in StrategyType:
        table.add_row(strategy.value, STRATEGY_LABELS[strategy], str(DEFAULT_TTLS[strategy]))
    console.print(table)


if __name__ == "__main__":
    app()

"""
Pytest configuration and shared fixtures for simulator testing.
"""

import pytest
import random
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from search_simulator.graph import GraphStore, ErdosRenyi, RandomGeometric
from search_simulator.models import NetworkConfig, NetworkType, SearchConfig, StrategyType
from search_simulator.storage import SnapshotStorageService, StorageConfig

# Configure logging for tests
logging.basicConfig(level=logging.INFO)

StoreFactory = Callable[..., GraphStore]

@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so every test is reproducible."""
    return random.Random(42)

@pytest.fixture
def make_store() -> StoreFactory:
    """Build a GraphStore from an explicit edge list and optional coordinates."""
    def _make(
        n_nodes: int,
        edges: Sequence[Tuple[int, int]],
        locations: Optional[List[Tuple[float, float]]] = None,
    ) -> GraphStore:
        store = GraphStore(n_nodes)
        for i in range(n_nodes):
            location = locations[i] if locations else (i / max(n_nodes, 1), 0.5)
            store.add_node(location=location)
        for a, b in edges:
            store.add_link(a, b)
        return store
    return _make

@pytest.fixture
def path_store(make_store: StoreFactory) -> GraphStore:
    """Path 0-1-2-3-4 laid out left to right."""
    return make_store(5, [(0, 1), (1, 2), (2, 3), (3, 4)])

@pytest.fixture
def cycle_with_isolated_target(make_store: StoreFactory) -> GraphStore:
    """5-cycle 0..4 plus node 5 with no links."""
    return make_store(6, [(0, 1), (1, 2), (2, 3), (3, 4), (4, 0)])

@pytest.fixture
def er_store() -> GraphStore:
    """Dense enough Erdos-Renyi network that walkers rarely get stuck."""
    store = GraphStore(200)
    ErdosRenyi(store, 200, 0.05, random.Random(7)).generate()
    return store

@pytest.fixture
def rg_store() -> GraphStore:
    store = GraphStore(300)
    RandomGeometric(store, 300, 0.12, random.Random(11)).generate()
    return store

@pytest.fixture
def small_network_config() -> NetworkConfig:
    return NetworkConfig(network_type=NetworkType.ERDOS_RENYI, n_nodes=80, link_probability=0.08)

@pytest.fixture
def flood_config() -> SearchConfig:
    return SearchConfig(strategy=StrategyType.FLOOD, ttl=5)

@pytest.fixture
def storage(tmp_path) -> SnapshotStorageService:
    """Storage service writing under pytest's temporary directory."""
    return SnapshotStorageService(StorageConfig(storage_dir=str(tmp_path / "simulator_data")))

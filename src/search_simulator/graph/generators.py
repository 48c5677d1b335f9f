"""
Random network generators.

Each generator fills an empty GraphStore in phases (nodes, then links, plus a
growth phase for Barabasi-Albert) using a caller-supplied random.Random so a
seeded run reproduces the same topology.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from search_simulator.exceptions import NetworkGenerationException
from search_simulator.models import NetworkConfig, NetworkType
from .store import GraphStore

logger = logging.getLogger(__name__)


class NetworkGenerator(ABC):
    """Base class for network models."""

    def __init__(self, store: GraphStore, n_nodes: int, rng: Optional[random.Random] = None):
        if n_nodes < 1:
            raise NetworkGenerationException(f"Network needs at least one node, got {n_nodes}")
        if store.node_count() != 0:
            raise NetworkGenerationException("Generators must start from an empty store")
        self.store = store
        self.n_nodes = n_nodes
        self.rng = rng if rng is not None else random.Random()

    @classmethod
    @abstractmethod
    def from_config(
        cls, config: NetworkConfig, store: GraphStore, rng: Optional[random.Random] = None
    ) -> "NetworkGenerator":
        """Build the generator with the parameters its model reads from config."""

    def generate_nodes(self) -> None:
        for _ in range(self.n_nodes):
            self.store.add_node(rng=self.rng)

    @abstractmethod
    def generate_links(self) -> None:
        pass

    def generate(self) -> GraphStore:
        """Run every phase and return the populated store."""
        self.generate_nodes()
        self.generate_links()
        logger.info(
            f"{type(self).__name__} generated {self.store.node_count()} nodes and {self.store.link_count()} links"
        )
        return self.store


class ErdosRenyi(NetworkGenerator):
    """G(n, p): every pair linked independently."""

    def __init__(self, store: GraphStore, n_nodes: int, link_probability: float, rng: Optional[random.Random] = None):
        super().__init__(store, n_nodes, rng)
        if not 0.0 <= link_probability <= 1.0:
            raise NetworkGenerationException(f"Link probability must be in [0, 1], got {link_probability}")
        self.link_probability = link_probability

    @classmethod
    def from_config(cls, config: NetworkConfig, store: GraphStore, rng: Optional[random.Random] = None) -> "ErdosRenyi":
        return cls(store, config.n_nodes, config.link_probability, rng)

    def generate_links(self) -> None:
        # Ordered pairs are each tried at p/2, so an unordered pair ends up linked with probability ~p
        half_p = self.link_probability * 0.5
        for a in range(self.n_nodes):
            for b in range(self.n_nodes):
                if a == b or self.store.is_connected(a, b):
                    continue
                if self.rng.random() < half_p:
                    self.store.add_link(a, b)


class BarabasiAlbert(NetworkGenerator):
    """Preferential attachment grown from a complete seed graph."""

    def __init__(
        self,
        store: GraphStore,
        n_nodes: int,
        initial_nodes: int,
        links_per_step: int,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(store, n_nodes, rng)
        if initial_nodes < 1:
            raise NetworkGenerationException(f"Seed graph needs at least one node, got {initial_nodes}")
        if links_per_step < 1:
            raise NetworkGenerationException(f"Each new node needs at least one link, got {links_per_step}")
        if initial_nodes > n_nodes:
            raise NetworkGenerationException(
                f"Seed graph ({initial_nodes} nodes) is larger than the network ({n_nodes} nodes)"
            )
        self.initial_nodes = initial_nodes
        self.links_per_step = links_per_step
        self.total_degree = 0

    @classmethod
    def from_config(
        cls, config: NetworkConfig, store: GraphStore, rng: Optional[random.Random] = None
    ) -> "BarabasiAlbert":
        return cls(store, config.n_nodes, config.initial_nodes, config.links_per_step, rng)

    def generate_nodes(self) -> None:
        """Only the seed nodes; the rest arrive during growth."""
        for _ in range(self.initial_nodes):
            self.store.add_node(rng=self.rng)

    def generate_links(self) -> None:
        """Make the seed nodes a complete graph."""
        for a in range(self.initial_nodes):
            for b in range(a + 1, self.initial_nodes):
                self.store.add_link(a, b)
                self.total_degree += 2

    def attach_new_node(self) -> int:
        """
        Add one node and link it to min(m, existing nodes) distinct nodes.

        Candidates are drawn uniformly and accepted with probability
        degree / total_degree, so links prefer well-connected nodes.
        """
        new_node = self.store.add_node(rng=self.rng).node_id
        wanted = min(self.links_per_step, new_node)
        attached = 0
        while attached < wanted:
            candidate = self.rng.randrange(self.store.node_count())
            if candidate == new_node or self.store.is_connected(new_node, candidate):
                continue
            if self.total_degree == 0:
                probability = 1.0
            else:
                probability = self.store.degree(candidate) / self.total_degree
            if self.rng.random() < probability:
                self.store.add_link(new_node, candidate)
                self.total_degree += 2
                attached += 1
        return new_node

    def generate_growth_model(self) -> None:
        while self.store.node_count() < self.n_nodes:
            self.attach_new_node()

    def generate(self) -> GraphStore:
        self.generate_nodes()
        self.generate_links()
        self.generate_growth_model()
        logger.info(
            f"BarabasiAlbert generated {self.store.node_count()} nodes and {self.store.link_count()} links"
        )
        return self.store


class RandomGeometric(NetworkGenerator):
    """Nodes closer than the radius are linked."""

    def __init__(self, store: GraphStore, n_nodes: int, radius: float, rng: Optional[random.Random] = None):
        super().__init__(store, n_nodes, rng)
        if radius < 0.0:
            raise NetworkGenerationException(f"Radius must be non-negative, got {radius}")
        self.radius = radius

    @classmethod
    def from_config(
        cls, config: NetworkConfig, store: GraphStore, rng: Optional[random.Random] = None
    ) -> "RandomGeometric":
        return cls(store, config.n_nodes, config.radius, rng)

    def generate_links(self) -> None:
        for a in range(self.n_nodes):
            for b in range(a + 1, self.n_nodes):
                if self.store.distance(a, b) < self.radius:
                    self.store.add_link(a, b)


GENERATORS: Dict[NetworkType, Type[NetworkGenerator]] = {
    NetworkType.ERDOS_RENYI: ErdosRenyi,
    NetworkType.BARABASI_ALBERT: BarabasiAlbert,
    NetworkType.RANDOM_GEOMETRIC: RandomGeometric,
}


def create_generator(
    config: NetworkConfig,
    store: GraphStore,
    rng: Optional[random.Random] = None,
) -> NetworkGenerator:
    """Build the generator for config.network_type with the matching parameters."""
    generator_class = GENERATORS.get(config.network_type)
    if generator_class is None:
        raise NetworkGenerationException(f"Unknown network type: {config.network_type}")
    return generator_class.from_config(config, store, rng)

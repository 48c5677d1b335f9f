# Network storage and random network models

from .store import GraphStore, Node, Link, LINK_PARITY_ERROR
from .generators import (
    NetworkGenerator,
    ErdosRenyi,
    BarabasiAlbert,
    RandomGeometric,
    GENERATORS,
    create_generator,
)

__all__ = [
    "GraphStore",
    "Node",
    "Link",
    "LINK_PARITY_ERROR",
    "NetworkGenerator",
    "ErdosRenyi",
    "BarabasiAlbert",
    "RandomGeometric",
    "GENERATORS",
    "create_generator",
]

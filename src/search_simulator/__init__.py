"""
Search Simulator - Core Library

Discrete-time simulation of decentralized search (flooding, random walks and
their bidirectional variants) over randomly generated unstructured networks.
"""

from .graph import GraphStore
from .search import Search, create_search
from .coordinator import SearchCoordinator

__all__ = ['GraphStore', 'Search', 'create_search', 'SearchCoordinator']

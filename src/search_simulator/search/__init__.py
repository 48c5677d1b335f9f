# Search engines over a GraphStore

from .query import PATH_KEY, Query, QueryGroups
from .base import Search
from .flood import Flood
from .random_walk import RandomWalk
from .replicated import RandomlyReplicatedRandomWalk
from .bidirectional import BidirectionalSearchRW, BidirectionalSearchRRRW
from .linear import BidirectionalSearchLinear, angular_difference
from .registry import STRATEGIES, create_search

__all__ = [
    "PATH_KEY",
    "Query",
    "QueryGroups",
    "Search",
    "Flood",
    "RandomWalk",
    "RandomlyReplicatedRandomWalk",
    "BidirectionalSearchRW",
    "BidirectionalSearchRRRW",
    "BidirectionalSearchLinear",
    "angular_difference",
    "STRATEGIES",
    "create_search",
]

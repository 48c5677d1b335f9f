import random
from typing import Dict, Optional, Type

from search_simulator.graph.store import GraphStore
from search_simulator.models import SearchConfig, StrategyType
from .base import Search
from .bidirectional import BidirectionalSearchRRRW, BidirectionalSearchRW
from .flood import Flood
from .linear import BidirectionalSearchLinear
from .random_walk import RandomWalk
from .replicated import RandomlyReplicatedRandomWalk

STRATEGIES: Dict[StrategyType, Type[Search]] = {
    StrategyType.FLOOD: Flood,
    StrategyType.RANDOM_WALK: RandomWalk,
    StrategyType.RRRW: RandomlyReplicatedRandomWalk,
    StrategyType.BIDIRECTIONAL_RW: BidirectionalSearchRW,
    StrategyType.BIDIRECTIONAL_RRRW: BidirectionalSearchRRRW,
    StrategyType.BIDIRECTIONAL_LINEAR: BidirectionalSearchLinear,
}


def create_search(config: SearchConfig, store: GraphStore, rng: Optional[random.Random] = None) -> Search:
    """Build an engine for config.strategy over store. Sources are not chosen yet."""
    return STRATEGIES[config.strategy].from_config(config, store, rng)

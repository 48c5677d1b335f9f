"""
Bidirectional walkers: one query leaves the source looking for the target
while a mirrored query leaves the target looking for the source. The run
succeeds as soon as either walker steps onto a node the other side has
visited.
"""

from search_simulator.models import StrategyType
from .random_walk import RandomWalk
from .replicated import RandomlyReplicatedRandomWalk


class BidirectionalSearchRW(RandomWalk):
    N_QUERIES = 2
    BIDIRECTIONAL = True
    STRATEGY = StrategyType.BIDIRECTIONAL_RW


class BidirectionalSearchRRRW(RandomlyReplicatedRandomWalk):
    """Replication counts are kept per side, so each side's growth decays independently."""
    N_QUERIES = 2
    BIDIRECTIONAL = True
    STRATEGY = StrategyType.BIDIRECTIONAL_RRRW

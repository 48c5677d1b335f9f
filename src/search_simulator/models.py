from typing import List, Dict, Optional, Tuple
from datetime import datetime
from enum import Enum, IntEnum
from pydantic import BaseModel, Field, field_validator, ValidationInfo

# --- Enums ---

class NetworkType(str, Enum):
    """Random network models the simulator can generate."""
    ERDOS_RENYI = "erdos_renyi"
    BARABASI_ALBERT = "barabasi_albert"
    RANDOM_GEOMETRIC = "random_geometric"

class StrategyType(str, Enum):
    """Search strategies, one engine class each."""
    FLOOD = "flood"
    RANDOM_WALK = "random_walk"
    RRRW = "rrrw"
    BIDIRECTIONAL_RW = "bidirectional_rw"
    BIDIRECTIONAL_RRRW = "bidirectional_rrrw"
    BIDIRECTIONAL_LINEAR = "bidirectional_linear"

class LinkType(str, Enum):
    UNDIRECTED = "undirected"
    DIRECTED = "directed"  # reserved, generators never emit it

class SearchOutcome(IntEnum):
    """Final result of a run. Integer valued so batch success rates can be averaged."""
    FAILURE = 0
    SUCCESS = 1

class TerminationReason(str, Enum):
    """Why a search stopped."""
    TARGET_FOUND = "target_found"
    SEARCHES_MET = "searches_met"
    TTL_EXHAUSTED = "ttl_exhausted"
    ALL_DEADLOCKED = "all_deadlocked"
    DEGENERATE_SOURCE = "degenerate_source"

class QueryStatus(str, Enum):
    UNSTARTED = "unstarted"
    PROPAGATING = "propagating"
    SUCCESS = "success"
    TTL_EXPIRED = "ttl_expired"
    DEADLOCKED = "deadlocked"

class BatchMode(str, Enum):
    """What is regenerated between the runs of a batch."""
    SAME_NETWORK_SAME_SEARCH = "same_network_same_search"
    SAME_NETWORK_DIFFERENT_SEARCH = "same_network_different_search"
    DIFFERENT_NETWORK_DIFFERENT_SEARCH = "different_network_different_search"

class InitialState(str, Enum):
    """Whether a freshly initialized network and search are persisted or read back."""
    NEITHER = "neither"
    SAVE = "save"
    RESTORE = "restore"

STRATEGY_LABELS: Dict[StrategyType, str] = {
    StrategyType.FLOOD: "Flooding",
    StrategyType.RANDOM_WALK: "Random walk",
    StrategyType.RRRW: "Randomly replicated random walk",
    StrategyType.BIDIRECTIONAL_RW: "Bidirectional random walk",
    StrategyType.BIDIRECTIONAL_RRRW: "Bidirectional RRRW",
    StrategyType.BIDIRECTIONAL_LINEAR: "Bidirectional linear",
}

DEFAULT_TTLS: Dict[StrategyType, int] = {
    StrategyType.FLOOD: 5,
    StrategyType.RANDOM_WALK: 500,
    StrategyType.RRRW: 500,
    StrategyType.BIDIRECTIONAL_RW: 500,
    StrategyType.BIDIRECTIONAL_RRRW: 500,
    StrategyType.BIDIRECTIONAL_LINEAR: 500,
}

# Flood TTLs for the all-strategies batch, per network model
ALL_STRATEGIES_FLOOD_TTLS: Dict[NetworkType, int] = {
    NetworkType.ERDOS_RENYI: 5,
    NetworkType.BARABASI_ALBERT: 4,
    NetworkType.RANDOM_GEOMETRIC: 40,
}
ALL_STRATEGIES_LINEAR_ER_TTL = 15
ALL_STRATEGIES_DEFAULT_TTL = 10000

def all_strategies_ttl(strategy: StrategyType, network_type: NetworkType) -> int:
    """TTL used for each strategy when every strategy is batched on one network."""
    if strategy == StrategyType.FLOOD:
        return ALL_STRATEGIES_FLOOD_TTLS[network_type]
    if strategy == StrategyType.BIDIRECTIONAL_LINEAR and network_type == NetworkType.ERDOS_RENYI:
        return ALL_STRATEGIES_LINEAR_ER_TTL
    return ALL_STRATEGIES_DEFAULT_TTL

# --- Configuration Models ---

class NetworkConfig(BaseModel):
    """Parameters for one generated network."""
    network_type: NetworkType = Field(NetworkType.ERDOS_RENYI, description="Random network model")
    n_nodes: int = Field(1000, ge=1, description="Total number of nodes")
    link_probability: float = Field(0.02, ge=0.0, le=1.0, description="Erdos-Renyi link probability p")
    initial_nodes: int = Field(2, ge=1, description="Barabasi-Albert seed clique size n0")
    links_per_step: int = Field(2, ge=1, description="Barabasi-Albert links added per new node m")
    radius: float = Field(0.08, ge=0.0, description="Random-geometric connection radius r")

    @field_validator("initial_nodes")
    @classmethod
    def initial_nodes_fit_network(cls, v: int, info: ValidationInfo) -> int:
        n_nodes = info.data.get("n_nodes")
        if n_nodes is not None and v > n_nodes:
            raise ValueError(f"initial_nodes ({v}) cannot exceed n_nodes ({n_nodes})")
        return v

class SearchConfig(BaseModel):
    """Parameters for one search engine."""
    strategy: StrategyType = Field(StrategyType.FLOOD, description="Search strategy")
    ttl: Optional[int] = Field(None, validate_default=True, description="Hop budget; defaults per strategy")
    avoid_backtrack: Optional[bool] = Field(
        None, description="Exclude the immediate predecessor when a walker picks its next hop; defaults per strategy"
    )
    replication_probability: float = Field(0.1, ge=0.0, le=1.0, description="Base replication probability p0 for RRRW")
    respawn_on_deadlock: bool = Field(True, description="Respawn deadlocked bidirectional-linear queries at their source")

    @field_validator("ttl")
    @classmethod
    def default_ttl_for_strategy(cls, v: Optional[int], info: ValidationInfo) -> int:
        if v is not None:
            if v < 0:
                raise ValueError(f"ttl must be non-negative, got {v}")
            return v
        strategy = info.data.get("strategy", StrategyType.FLOOD)
        return DEFAULT_TTLS[strategy]

class BatchConfig(BaseModel):
    """Repeated-run settings."""
    runs: int = Field(10, ge=1, description="Number of runs in the batch")
    mode: BatchMode = Field(BatchMode.SAME_NETWORK_DIFFERENT_SEARCH, description="What changes between runs")
    store_runs: bool = Field(False, description="Append every run to the run log")

# --- Persistence Models ---

class LinkRecord(BaseModel):
    source_id: int
    destination_id: int
    link_type: LinkType = LinkType.UNDIRECTED

class NetworkSnapshot(BaseModel):
    """Everything needed to rebuild a GraphStore."""
    node_count: int = Field(..., ge=0)
    locations: List[Tuple[float, float]] = Field(default_factory=list, description="Coordinates indexed by node id")
    links: List[LinkRecord] = Field(default_factory=list)
    saved_at: datetime = Field(default_factory=datetime.now)

class QuerySnapshot(BaseModel):
    """Source, targets and prev-hop record of the primary query."""
    source: int
    targets: List[int] = Field(..., min_length=1)
    prev_hops: Dict[int, List[int]] = Field(default_factory=dict)
    saved_at: datetime = Field(default_factory=datetime.now)

# --- Result Models ---

class RunStatistics(BaseModel):
    """Per-run record collected by the coordinator."""
    run_index: int = 0
    strategy: Optional[StrategyType] = None
    network_type: Optional[NetworkType] = None
    total_time: int = Field(..., description="Ticks until termination")
    total_messages: int = Field(..., description="Hop messages sent")
    total_links: int = Field(..., description="Undirected links in the network")
    nodes_visited: int = Field(..., description="Distinct nodes in any visited set")
    success: bool
    termination_reason: Optional[TerminationReason] = None
    timestamp: datetime = Field(default_factory=datetime.now)

class MetricSummary(BaseModel):
    mean: float = 0.0
    stddev: float = 0.0
    min: float = 0.0
    max: float = 0.0

class BatchSummary(BaseModel):
    """Aggregate over a batch of runs."""
    strategy: Optional[StrategyType] = None
    network_type: Optional[NetworkType] = None
    mode: Optional[BatchMode] = None
    runs: int = 0
    total_time: MetricSummary = Field(default_factory=MetricSummary)
    total_messages: MetricSummary = Field(default_factory=MetricSummary)
    total_links: MetricSummary = Field(default_factory=MetricSummary)
    nodes_visited: MetricSummary = Field(default_factory=MetricSummary)
    success_rate: float = Field(0.0, description="Percentage of successful runs")

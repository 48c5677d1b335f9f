import os
from typing import Optional
from pydantic import BaseModel

class SimulatorConfig(BaseModel):
    """Process-level settings for the simulator."""

    # Logging
    log_level: str = "INFO"
    use_rich_logging: bool = True
    log_file: Optional[str] = None

    # Reproducibility; None draws a fresh seed per process
    seed: Optional[int] = None

    # Snapshot and run-log directory
    storage_dir: str = "simulator_data"

    @classmethod
    def from_env(cls) -> "SimulatorConfig":
        """Create config from environment variables."""
        seed = os.getenv("SEARCH_SIM_SEED")
        return cls(
            log_level=os.getenv("SEARCH_SIM_LOG_LEVEL", "INFO"),
            use_rich_logging=os.getenv("SEARCH_SIM_RICH_LOGGING", "true").lower() == "true",
            log_file=os.getenv("SEARCH_SIM_LOG_FILE") or None,
            seed=int(seed) if seed else None,
            storage_dir=os.getenv("SEARCH_SIM_STORAGE_DIR", "simulator_data"),
        )

from pathlib import Path
from pydantic import BaseModel, Field
import os

class StorageConfig(BaseModel):
    """Where snapshots and run records are written."""
    storage_dir: str = Field(
        default_factory=lambda: os.environ.get("SEARCH_SIM_STORAGE_DIR", "simulator_data"),
        description="Directory for snapshots and run records"
    )

    # Output formats
    enable_jsonl: bool = Field(True, description="Append complete run records as JSONL")
    enable_summary_csv: bool = Field(True, description="Append a summary CSV row per run")

    # File naming
    network_filename: str = Field("network.json", description="Saved network snapshot")
    query_filename: str = Field("query.json", description="Saved primary query snapshot")
    jsonl_filename: str = Field("runs.jsonl", description="Name of the JSONL run log")
    csv_filename: str = Field("runs_summary.csv", description="Name of the summary CSV file")

    @property
    def storage_path(self) -> Path:
        return Path(self.storage_dir)

    @property
    def network_path(self) -> Path:
        return self.storage_path / self.network_filename

    @property
    def query_path(self) -> Path:
        return self.storage_path / self.query_filename

    @property
    def jsonl_path(self) -> Path:
        return self.storage_path / self.jsonl_filename

    @property
    def csv_path(self) -> Path:
        return self.storage_path / self.csv_filename

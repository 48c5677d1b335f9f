import csv
import logging
from pathlib import Path
from typing import List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from search_simulator.exceptions import RestoreFailedException
from search_simulator.graph.store import GraphStore
from search_simulator.models import NetworkSnapshot, QuerySnapshot, RunStatistics
from .storage_config import StorageConfig

ModelT = TypeVar("ModelT", bound=BaseModel)

CSV_FIELDS = [
    "timestamp",
    "run_index",
    "strategy",
    "network_type",
    "total_time",
    "total_messages",
    "total_links",
    "nodes_visited",
    "success",
    "termination_reason",
]

class SnapshotStorageService:
    """Saves and restores network/query snapshots and appends run records."""

    def __init__(self, storage_config: StorageConfig):
        self.storage_config = storage_config
        self.logger = logging.getLogger(__name__)

    def _ensure_storage_dir(self) -> None:
        self.storage_config.storage_path.mkdir(parents=True, exist_ok=True)

    # --- Snapshots ---

    def save_network(self, store: GraphStore) -> bool:
        return self._write_model(store.to_snapshot(), self.storage_config.network_path)

    def load_network(self) -> GraphStore:
        snapshot = self._read_model(NetworkSnapshot, self.storage_config.network_path)
        try:
            return GraphStore.from_snapshot(snapshot)
        except ValueError as e:
            raise RestoreFailedException(f"Saved network is inconsistent: {e}") from e

    def save_query(self, snapshot: QuerySnapshot) -> bool:
        return self._write_model(snapshot, self.storage_config.query_path)

    def load_query(self) -> QuerySnapshot:
        return self._read_model(QuerySnapshot, self.storage_config.query_path)

    def _write_model(self, model: BaseModel, path: Path) -> bool:
        try:
            self._ensure_storage_dir()
            with open(path, 'w', encoding='utf-8') as f:
                f.write(model.model_dump_json(indent=2))
            self.logger.info(f"Saved {type(model).__name__} to {path}")
            return True
        except OSError as e:
            self.logger.error(f"Failed to save {type(model).__name__} to {path}: {e}")
            return False

    def _read_model(self, model_class: Type[ModelT], path: Path) -> ModelT:
        if not path.exists():
            raise RestoreFailedException(f"No saved {model_class.__name__} at {path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return model_class.model_validate_json(f.read())
        except (OSError, ValidationError) as e:
            raise RestoreFailedException(f"Could not read {model_class.__name__} from {path}: {e}") from e

    # --- Run records ---

    def store_run(self, run: RunStatistics) -> bool:
        """Append one run to the JSONL log and the summary CSV."""
        try:
            self._ensure_storage_dir()
            if self.storage_config.enable_jsonl:
                with open(self.storage_config.jsonl_path, 'a', encoding='utf-8') as f:
                    f.write(run.model_dump_json() + '\n')
            if self.storage_config.enable_summary_csv:
                self._append_csv_row(run)
            return True
        except OSError as e:
            self.logger.error(f"Failed to store run {run.run_index}: {e}")
            return False

    def _append_csv_row(self, run: RunStatistics) -> None:
        csv_path = self.storage_config.csv_path
        write_header = not csv_path.exists()
        row = run.model_dump(mode="json")
        with open(csv_path, 'a', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction='ignore')
            if write_header:
                writer.writeheader()
            writer.writerow(row)

    def load_runs(self) -> List[RunStatistics]:
        """All run records in the JSONL log, skipping lines that do not parse."""
        jsonl_file = self.storage_config.jsonl_path
        runs: List[RunStatistics] = []
        if not jsonl_file.exists():
            self.logger.info(f"Run log not found: {jsonl_file}")
            return runs
        with open(jsonl_file, 'r', encoding='utf-8') as f:
            for i, line in enumerate(f):
                try:
                    runs.append(RunStatistics.model_validate_json(line))
                except ValidationError as e:
                    self.logger.error(f"Error processing run record on line {i+1} in {jsonl_file}: {e}")
        return runs

from .storage_config import StorageConfig
from .snapshot_storage import SnapshotStorageService

__all__ = ["StorageConfig", "SnapshotStorageService"]

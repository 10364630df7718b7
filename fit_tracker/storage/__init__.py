"""Storage backends behind one interface."""

from fit_tracker.storage.base import ConflictError, Storage, StorageError
from fit_tracker.storage.provider import (
    MemoryStorageProvider,
    SqlStorageProvider,
    StorageProvider,
    init_storage,
)

__all__ = [
    "ConflictError",
    "MemoryStorageProvider",
    "SqlStorageProvider",
    "Storage",
    "StorageError",
    "StorageProvider",
    "init_storage",
]

"""Services package."""

from finfree.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    StateStorageInterface,
    StorageError,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "StateStorageInterface",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageReadError",
    "StorageWriteError",
]

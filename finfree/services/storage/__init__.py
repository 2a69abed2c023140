"""
Storage Services Package

Provides the abstract blob interface and its implementations.
The JSON file backend is the default; memory is for tests.
"""

from finfree.services.storage.interface import (
    StateStorageInterface,
    StorageError,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)
from finfree.services.storage.json_file import JsonFileStorage
from finfree.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "StateStorageInterface",
    # Exceptions
    "StorageError",
    "StorageQuotaExceededError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]

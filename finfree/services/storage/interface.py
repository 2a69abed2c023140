"""
Abstract Storage Interface

DESIGN DECISION: The store sees storage as a flat key-value space of
text blobs. This allows us to:
1. Keep the state in a JSON file on the device
2. Use in-memory storage for testing
3. Simulate a full disk or a browser-style quota
4. Keep the store decoupled from where bytes end up

The interface is intentionally tiny: read, write and remove a blob.
Serialization belongs to the store, not to the backend.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StateStorageInterface(ABC):
    """
    Abstract interface for persisted state blobs.

    Any backend (a JSON file, memory, ...) must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the blob stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None if nothing is stored

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, data: str) -> None:
        """
        Replace the blob under a key.

        A write either lands whole or not at all.

        Raises:
            StorageQuotaExceededError: If the backend is out of space
            StorageWriteError: If the write fails for any other reason
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove the blob under a key. Missing keys are ignored."""
        pass

    def exists(self, key: str) -> bool:
        return self.read(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data could not be read."""
    pass


class StorageWriteError(StorageError):
    """Data could not be written."""
    pass


class StorageQuotaExceededError(StorageWriteError):
    """The backend has no room for the blob."""
    pass

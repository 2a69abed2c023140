"""
In-Memory Storage

Used by tests and by the UI when no writable directory is available.
An optional byte quota mimics a browser storage limit.
"""

from typing import Optional

from finfree.services.storage.interface import (
    StateStorageInterface,
    StorageQuotaExceededError,
)


class InMemoryStorage(StateStorageInterface):
    """Blobs held in a dict. Nothing survives the process."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.blobs: dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.write_count = 0

    def _size_with(self, key: str, data: str) -> int:
        others = sum(len(v.encode("utf-8")) for k, v in self.blobs.items() if k != key)
        return others + len(data.encode("utf-8"))

    def read(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write(self, key: str, data: str) -> None:
        if self.quota_bytes is not None and self._size_with(key, data) > self.quota_bytes:
            raise StorageQuotaExceededError(
                f"Writing {key!r} would exceed the {self.quota_bytes} byte quota"
            )
        self.blobs[key] = data
        self.write_count += 1

    def remove(self, key: str) -> None:
        self.blobs.pop(key, None)

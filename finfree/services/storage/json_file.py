"""
JSON File Storage Implementation

DESIGN DECISION: Each key is one file, <directory>/<key>.json.
Writes go to a temporary file beside the target and are moved over it
with os.replace, so a crash mid-write leaves the previous blob intact.

TRADEOFFS:
- One writer at a time; concurrent processes overwrite each other
- The whole blob is rewritten on every commit (fine for a personal ledger)
"""

import errno
import os
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finfree.config import get_settings
from finfree.services.storage.interface import (
    StateStorageInterface,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)

logger = structlog.get_logger()

_QUOTA_ERRNOS = {errno.ENOSPC, errno.EDQUOT} if hasattr(errno, "EDQUOT") else {errno.ENOSPC}


class _TransientWriteError(Exception):
    """An OSError worth another attempt."""


class JsonFileStorage(StateStorageInterface):
    """
    Stores blobs as files in a single directory.

    Transient OS errors on write are retried with exponential backoff;
    a full disk is reported immediately.
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        write_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._directory = Path(directory or settings.directory)
        self._write_attempts = write_attempts or settings.write_attempts

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read state blob", key=key, path=str(path), error=str(e))
            raise StorageReadError(f"Could not read {path}: {e}") from e

    def _write_once(self, path: Path, data: str) -> None:
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            if e.errno in _QUOTA_ERRNOS:
                raise StorageQuotaExceededError(f"No space left for {path}") from e
            raise _TransientWriteError(str(e)) from e

    def write(self, key: str, data: str) -> None:
        path = self.path_for(key)
        retrying = Retrying(
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.1, max=2),
            retry=retry_if_exception_type(_TransientWriteError),
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._write_once(path, data)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(
                "State write failed",
                key=key,
                path=str(path),
                attempts=self._write_attempts,
                error=str(cause),
            )
            raise StorageWriteError(f"Could not write {path}: {cause}") from cause
        except StorageQuotaExceededError:
            logger.error("Storage quota exceeded", key=key, path=str(path), size=len(data))
            raise

        logger.debug("State written", key=key, path=str(path), size=len(data))

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

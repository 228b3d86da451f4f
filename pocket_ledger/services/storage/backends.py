"""
Key-Value Storage Backends

Two implementations of KeyValueStorageInterface:

- InMemoryKeyValueStorage: a dict, for tests and throwaway sessions
- JSONFileKeyValueStorage: one ``<key>.json`` file per key under a data
  directory

TRADEOFFS of the file backend:
- Every write replaces the whole file (fine for a personal ledger)
- No locking; one process is expected to own the directory
- Writes go to a temporary sibling first and are moved into place, so a
  crash mid-write leaves the previous value intact
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocket_ledger.services.storage.interface import KeyValueStorageInterface


logger = structlog.get_logger(__name__)


class InMemoryKeyValueStorage(KeyValueStorageInterface):
    """Dict-backed storage. Contents are lost with the instance."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JSONFileKeyValueStorage(KeyValueStorageInterface):
    """
    File-backed storage, one file per key.

    File I/O runs in a worker thread so callers can await it like any
    other storage backend.
    """

    def __init__(self, data_dir: Path, write_retries: int = 3):
        self._data_dir = Path(data_dir).expanduser()
        self._write_retries = write_retries

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """File holding the value of a key."""
        return self._data_dir / f"{key}.json"

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_with_retry, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    def _read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write_with_retry(self, key: str, value: str) -> None:
        writer = retry(
            stop=stop_after_attempt(self._write_retries),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )(self._write)
        writer(key, value)

    def _write(self, key: str, value: str) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)

        fd, tmp_name = tempfile.mkstemp(
            dir=self._data_dir,
            prefix=f".{key}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError:
            logger.warning("storage_write_attempt_failed", key=key, path=str(path))
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            pass

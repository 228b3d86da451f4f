"""
Directory Share Sink

Shares a file by copying it into a target directory, the desktop
equivalent of "download to the Downloads folder".
"""

import asyncio
import os
import shutil
from pathlib import Path
from typing import Optional

import structlog

from pocket_ledger.config import get_settings
from pocket_ledger.services.sharing.interface import ShareSinkInterface


logger = structlog.get_logger(__name__)


class DirectoryShareSink(ShareSinkInterface):
    """Copies shared files into ``target_dir`` (created on demand)."""

    def __init__(self, target_dir: Optional[Path] = None):
        self._target_dir = Path(target_dir or get_settings().export.share_dir).expanduser()
        self.shared: list[Path] = []

    @property
    def target_dir(self) -> Path:
        return self._target_dir

    async def is_available(self) -> bool:
        return await asyncio.to_thread(self._is_writable)

    def _is_writable(self) -> bool:
        # Nearest existing ancestor decides whether the directory can be created
        candidate = self._target_dir
        while not candidate.exists():
            if candidate.parent == candidate:
                return False
            candidate = candidate.parent
        return candidate.is_dir() and os.access(candidate, os.W_OK)

    async def share(self, path: Path) -> None:
        destination = await asyncio.to_thread(self._copy, Path(path))
        self.shared.append(destination)
        logger.info("file_shared", source=str(path), destination=str(destination))

    def _copy(self, path: Path) -> Path:
        self._target_dir.mkdir(parents=True, exist_ok=True)
        destination = self._target_dir / path.name
        shutil.copyfile(path, destination)
        return destination

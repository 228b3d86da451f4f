"""
Abstract Sharing Interface

The exported workbook is handed to a platform sharing/download sink.
The ledger only needs to know whether sharing is possible right now and
to hand over a file.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class ShareSinkInterface(ABC):
    """Destination for exported files."""

    @abstractmethod
    async def is_available(self) -> bool:
        """
        Check whether files can be shared at the moment.

        Returns:
            False if share() would certainly fail
        """
        pass

    @abstractmethod
    async def share(self, path: Path) -> None:
        """
        Hand a file over to the sink.

        Args:
            path: Existing file to share

        Raises:
            OSError: If the handoff fails
        """
        pass

"""
Abstract Storage Interface

We define an abstract interface for the durable key-value storage the
ledger sits on. This allows us to:
1. Keep the collection in a JSON file on disk
2. Use in-memory storage for testing
3. Swap in another key-value backend without touching the store logic

The interface is intentionally tiny - the whole transaction collection
lives under one key and is always read and written as a whole.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    Any storage implementation must implement these methods. Absence of
    a key is a valid state, not an error.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key has never been written
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Overwrite the value stored under a key.

        The overwrite must be all-or-nothing from the caller's view.

        Raises:
            OSError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Delete a key. Removing a missing key is a no-op.

        Raises:
            OSError: If the delete fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ReadFailureError(StorageError):
    """Stored collection could not be read or deserialized."""
    pass


class WriteFailureError(StorageError):
    """Collection could not be written; the mutation did not happen."""
    pass

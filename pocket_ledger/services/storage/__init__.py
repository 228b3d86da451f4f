"""
Storage Services Package

Provides the abstract key-value interface, concrete backends, and the
transaction store built on top of them.
"""

from pocket_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    ReadFailureError,
    StorageError,
    WriteFailureError,
)
from pocket_ledger.services.storage.backends import (
    InMemoryKeyValueStorage,
    JSONFileKeyValueStorage,
)
from pocket_ledger.services.storage.transaction_store import TransactionStore

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "ReadFailureError",
    "StorageError",
    "WriteFailureError",
    # Backends
    "InMemoryKeyValueStorage",
    "JSONFileKeyValueStorage",
    # Store
    "TransactionStore",
]

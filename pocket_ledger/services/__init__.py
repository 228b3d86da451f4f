"""Services package."""

from pocket_ledger.services.clock import Clock, FixedClock, SystemClock
from pocket_ledger.services.sharing import DirectoryShareSink, ShareSinkInterface
from pocket_ledger.services.storage import (
    InMemoryKeyValueStorage,
    JSONFileKeyValueStorage,
    KeyValueStorageInterface,
    ReadFailureError,
    StorageError,
    TransactionStore,
    WriteFailureError,
)

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    # Sharing
    "DirectoryShareSink",
    "ShareSinkInterface",
    # Storage
    "InMemoryKeyValueStorage",
    "JSONFileKeyValueStorage",
    "KeyValueStorageInterface",
    "ReadFailureError",
    "StorageError",
    "TransactionStore",
    "WriteFailureError",
]

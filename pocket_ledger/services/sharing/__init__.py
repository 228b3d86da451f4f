"""Sharing services package."""

from pocket_ledger.services.sharing.interface import ShareSinkInterface
from pocket_ledger.services.sharing.directory import DirectoryShareSink

__all__ = ["DirectoryShareSink", "ShareSinkInterface"]

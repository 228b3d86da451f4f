"""
Transaction Store

The single source of truth for transaction records. The whole collection
is kept as a JSON array under one storage key and is always read and
written in full; there are no partial updates.

Stored order is newest-insert first. Nothing relies on that order for
correctness: queries sort by occurred_at themselves.

CONCURRENCY: the store takes no locks. Two mutations racing on the same
key lose one of the updates (last write wins on the whole collection).
Callers must issue append/remove/clear one at a time.

Records that fail validation are hidden from reads but never dropped:
mutations carry them through as their raw stored values.
"""

import json
from typing import Any, Optional

import structlog
from pydantic import ValidationError as SchemaValidationError

from pocket_ledger.audit import AuditLogger
from pocket_ledger.config import get_settings
from pocket_ledger.models.transaction import Transaction
from pocket_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    ReadFailureError,
    WriteFailureError,
)


logger = structlog.get_logger(__name__)


class TransactionStore:
    """
    Whole-collection persistence of transactions on a key-value backend.

    Read policy:
    - list_all() never raises. Unreadable or corrupted storage yields an
      empty collection; individually malformed records are skipped. Both
      cases are audited.
    - append() and remove() raise ReadFailureError when the stored payload
      is not a JSON array, instead of overwriting it. Malformed records
      inside a valid array are kept and written back as they were.

    Write policy: every failed write raises WriteFailureError and the
    caller must assume nothing changed.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._key = key or get_settings().storage.storage_key
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def key(self) -> str:
        return self._key

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def _decode_payload(self, payload: Optional[str]) -> list[Any]:
        """Parse the stored JSON array. Absent payload is an empty collection."""
        if payload is None:
            return []
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ReadFailureError(f"Stored collection is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise ReadFailureError(
                f"Stored collection must be a JSON array, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def _parse_record(record: Any) -> Optional[Transaction]:
        """The record as a Transaction, or None if it does not validate."""
        if not isinstance(record, dict):
            return None
        try:
            return Transaction.from_record(record)
        except (SchemaValidationError, ValueError):
            return None

    @staticmethod
    def _entry_id(entry: Any) -> Optional[str]:
        if isinstance(entry, Transaction):
            return entry.id
        if isinstance(entry, dict) and entry.get("id") is not None:
            return str(entry["id"])
        return None

    @staticmethod
    def _transactions(entries: list[Any]) -> list[Transaction]:
        return [e for e in entries if isinstance(e, Transaction)]

    def _encode_entries(self, entries: list[Any]) -> str:
        return json.dumps(
            [e.to_record() if isinstance(e, Transaction) else e for e in entries],
            ensure_ascii=False,
        )

    async def _read_payload(self) -> Optional[str]:
        try:
            return await self._storage.get(self._key)
        except Exception as e:
            raise ReadFailureError(f"Failed to read '{self._key}': {e}") from e

    async def _read_for_update(self) -> list[Any]:
        """
        Read the collection ahead of a mutation.

        Each entry is a Transaction, or the raw stored value of a record
        that does not validate.
        """
        records = self._decode_payload(await self._read_payload())
        entries = []
        kept = 0
        for record in records:
            transaction = self._parse_record(record)
            if transaction is None:
                kept += 1
                entries.append(record)
            else:
                entries.append(transaction)
        if kept:
            logger.warning("store_malformed_records_kept", key=self._key, kept=kept)
        return entries

    async def _write(self, entries: list[Any], operation: str) -> None:
        payload = self._encode_entries(entries)
        try:
            await self._storage.set(self._key, payload)
        except Exception as e:
            logger.error("store_write_failed", operation=operation, key=self._key, error=str(e))
            raise WriteFailureError(f"Failed to {operation} transaction: {e}") from e

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def list_all(self) -> list[Transaction]:
        """
        Read the whole collection.

        Applies the legacy type default to every record. Returns an empty
        list when nothing was ever written, and also when the stored data
        cannot be read. The ledger stays usable at the cost of hiding
        the corrupted payload, which is left untouched on disk.
        """
        try:
            records = self._decode_payload(await self._read_payload())
        except ReadFailureError as e:
            self._audit_logger.log_store_read_failed(
                storage_key=self._key,
                error_message=str(e),
            )
            return []

        transactions = []
        for record in records:
            transaction = self._parse_record(record)
            if transaction is not None:
                transactions.append(transaction)

        skipped = len(records) - len(transactions)
        if skipped:
            self._audit_logger.log_records_skipped(
                storage_key=self._key,
                skipped=skipped,
                loaded=len(transactions),
            )

        return transactions

    async def get(self, transaction_id: str) -> Optional[Transaction]:
        """Find a transaction by id."""
        for transaction in await self.list_all():
            if transaction.id == transaction_id:
                return transaction
        return None

    async def append(self, transaction: Transaction) -> list[Transaction]:
        """
        Prepend a transaction and write the collection back.

        Id uniqueness is not checked here; ids come from creation time.

        Returns:
            The updated collection, newest first

        Raises:
            ReadFailureError: the stored payload could not be parsed
            WriteFailureError: the write did not go through
        """
        entries = [transaction, *await self._read_for_update()]
        await self._write(entries, "append")
        logger.info("transaction_appended", id=transaction.id, size=len(entries))
        return self._transactions(entries)

    async def remove(self, transaction_id: str) -> list[Transaction]:
        """
        Remove the record with the given id, valid or not.

        Removing an unknown id is a no-op and does not write.

        Returns:
            The updated collection

        Raises:
            ReadFailureError: the stored payload could not be parsed
            WriteFailureError: the write did not go through
        """
        current = await self._read_for_update()
        updated = [e for e in current if self._entry_id(e) != transaction_id]
        if len(updated) == len(current):
            return self._transactions(current)

        await self._write(updated, "remove")
        logger.info("transaction_removed", id=transaction_id, size=len(updated))
        return self._transactions(updated)

    async def clear(self) -> None:
        """Delete the storage key entirely."""
        try:
            await self._storage.remove(self._key)
        except Exception as e:
            logger.error("store_clear_failed", key=self._key, error=str(e))
            raise WriteFailureError(f"Failed to clear transactions: {e}") from e
        logger.info("transactions_cleared", key=self._key)

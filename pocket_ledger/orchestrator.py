"""
Main Orchestrator for Pocket Ledger

This module ties the components together behind the small interface the
user interface calls:

1. Record (form input -> validate -> append)
2. Query (load -> filter -> sort -> summarize)
3. Delete / clear
4. Export (load -> expenses only -> workbook -> share)

The ledger holds no state of its own between calls. Every method reads
the durable collection and returns a fresh list; the caller re-renders
from what it gets back.
"""

from pathlib import Path
from typing import Any, Mapping, Optional
from uuid import UUID

from pocket_ledger.audit import AuditLogger, configure_logging, create_correlation_id
from pocket_ledger.config import get_settings
from pocket_ledger.export import ExcelExporter, ExportError
from pocket_ledger.models.query import FilterCriteria, MonthlyOverview, SummaryStats
from pocket_ledger.models.transaction import Transaction
from pocket_ledger.queries import (
    filter_transactions,
    monthly_overview,
    sort_newest_first,
    summarize,
)
from pocket_ledger.services.clock import Clock, SystemClock
from pocket_ledger.services.sharing import DirectoryShareSink, ShareSinkInterface
from pocket_ledger.services.storage import (
    InMemoryKeyValueStorage,
    JSONFileKeyValueStorage,
    KeyValueStorageInterface,
    StorageError,
    TransactionStore,
)
from pocket_ledger.validation import ValidationError, normalize


class LedgerService:
    """
    Read/write/query interface over the transaction store.

    Calls must be issued one at a time; see TransactionStore for the
    single-writer contract.
    """

    def __init__(
        self,
        store: TransactionStore,
        exporter: Optional[ExcelExporter] = None,
        clock: Optional[Clock] = None,
        audit_logger: Optional[AuditLogger] = None,
        week_starts_on: Optional[int] = None,
    ):
        self._store = store
        self._exporter = exporter
        self._clock = clock or SystemClock()
        self._audit_logger = audit_logger or AuditLogger()
        self._week_starts_on = (
            week_starts_on
            if week_starts_on is not None
            else get_settings().app.week_starts_on
        )

    @property
    def store(self) -> TransactionStore:
        return self._store

    @property
    def clock(self) -> Clock:
        return self._clock

    async def add_transaction(
        self,
        raw: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Validate form input and save it as a new transaction.

        Raises:
            ValidationError: input must be corrected; nothing was saved
            StorageError: the collection could not be read or written
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            transaction = normalize(raw, clock=self._clock)
        except ValidationError as e:
            self._audit_logger.log_validation_failed(
                field=e.field,
                message=e.message,
                correlation_id=correlation_id,
            )
            raise

        try:
            await self._store.append(transaction)
        except StorageError as e:
            self._audit_logger.log_save_failed(
                operation="append",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_transaction_saved(
            transaction_id=transaction.id,
            transaction_type=transaction.type.value,
            amount=transaction.amount_text,
            correlation_id=correlation_id,
        )
        return transaction

    async def list_transactions(
        self,
        criteria: Optional[FilterCriteria] = None,
    ) -> list[Transaction]:
        """Matching transactions, newest first."""
        collection = await self._store.list_all()
        matched = filter_transactions(
            collection,
            criteria,
            clock=self._clock,
            week_starts_on=self._week_starts_on,
        )
        if criteria is not None:
            self._audit_logger.log_query_executed(
                criteria=criteria.model_dump(mode="json"),
                result_count=len(matched),
            )
        return sort_newest_first(matched)

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return await self._store.get(transaction_id)

    async def summarize(
        self,
        criteria: Optional[FilterCriteria] = None,
    ) -> tuple[list[Transaction], SummaryStats]:
        """
        Matching transactions together with their statistics.

        Returns:
            (transactions newest first, summary stats)
        """
        transactions = await self.list_transactions(criteria)
        return transactions, summarize(transactions)

    async def monthly_overview(self) -> MonthlyOverview:
        """Income, expense and savings for the current month."""
        collection = await self._store.list_all()
        return monthly_overview(collection, clock=self._clock)

    async def delete_transaction(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        """
        Permanently remove a transaction. Unknown ids are a no-op.

        Returns:
            The remaining collection
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            found = await self._store.get(transaction_id) is not None
            remaining = await self._store.remove(transaction_id)
        except StorageError as e:
            self._audit_logger.log_save_failed(
                operation="remove",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_transaction_deleted(
            transaction_id=transaction_id,
            found=found,
            remaining=len(remaining),
            correlation_id=correlation_id,
        )
        return remaining

    async def clear_all(self, correlation_id: Optional[UUID] = None) -> None:
        """Delete every transaction."""
        try:
            await self._store.clear()
        except StorageError as e:
            self._audit_logger.log_save_failed(
                operation="clear",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        self._audit_logger.log_collection_cleared(
            storage_key=self._store.key,
            correlation_id=correlation_id,
        )

    async def export_expenses(self, correlation_id: Optional[UUID] = None) -> bool:
        """
        Export all expenses as a spreadsheet and share it.

        Returns:
            False when there is nothing to export or sharing is unavailable

        Raises:
            ExportError: encoding or sharing failed
        """
        if self._exporter is None:
            raise ExportError("No exporter configured")

        correlation_id = correlation_id or create_correlation_id()

        try:
            exported = await self._exporter.export_expenses()
        except ExportError as e:
            self._audit_logger.log_external_service_error(
                service="export",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        if exported:
            self._audit_logger.log_export_completed(
                path=str(self._exporter.output_path),
                row_count=self._exporter.last_row_count,
                correlation_id=correlation_id,
            )
        else:
            self._audit_logger.log_export_skipped(
                reason="nothing to export or sharing unavailable",
                correlation_id=correlation_id,
            )
        return exported


def create_app_components(
    data_dir: Optional[Path] = None,
    in_memory: bool = False,
    storage: Optional[KeyValueStorageInterface] = None,
    sink: Optional[ShareSinkInterface] = None,
    clock: Optional[Clock] = None,
) -> LedgerService:
    """
    Factory function to build a wired LedgerService from settings.

    Args:
        data_dir: Override for the storage directory
        in_memory: Keep transactions in memory only (testing, demos)
        storage: Explicit key-value backend; wins over the other options
        sink: Sharing sink for exports (directory sink by default)
        clock: Clock for date presets (system clock by default)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    if storage is None:
        if in_memory:
            storage = InMemoryKeyValueStorage()
        else:
            storage = JSONFileKeyValueStorage(
                data_dir or settings.storage.data_dir,
                write_retries=settings.storage.write_retries,
            )

    audit_logger = AuditLogger()
    store = TransactionStore(
        storage,
        key=settings.storage.storage_key,
        audit_logger=audit_logger,
    )
    exporter = ExcelExporter(
        store,
        sink or DirectoryShareSink(settings.export.share_dir),
        settings=settings.export,
    )

    return LedgerService(
        store=store,
        exporter=exporter,
        clock=clock,
        audit_logger=audit_logger,
        week_starts_on=settings.app.week_starts_on,
    )

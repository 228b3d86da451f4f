"""
Spreadsheet Export

Expenses (never income) are written to a single-sheet .xlsx workbook and
handed to a sharing sink. The header row is the stored field names, so
the sheet mirrors the durable layout column for column.

"Nothing to export" is a normal outcome and is reported as False, not
as an error. Encoding and sharing failures always propagate.
"""

import asyncio
from collections.abc import Iterable
from io import BytesIO
from pathlib import Path
from typing import Optional

import structlog
from openpyxl import Workbook

from pocket_ledger.config import ExportSettings, get_settings
from pocket_ledger.models.transaction import RECORD_FIELDS, Transaction, TransactionType
from pocket_ledger.services.sharing import ShareSinkInterface
from pocket_ledger.services.storage import TransactionStore


logger = structlog.get_logger(__name__)


class ExportError(Exception):
    """Base exception for export operations."""
    pass


class EncodingFailureError(ExportError):
    """The workbook could not be built or written to disk."""
    pass


class ShareFailureError(ExportError):
    """The sharing sink rejected the exported file."""
    pass


def transaction_to_row(transaction: Transaction) -> list:
    """One sheet row, in RECORD_FIELDS order."""
    record = transaction.to_record()
    return [record[field] for field in RECORD_FIELDS]


def encode_workbook(
    transactions: Iterable[Transaction],
    sheet_name: str = "Expenses",
) -> bytes:
    """
    Encode transactions as an .xlsx byte stream.

    Raises:
        EncodingFailureError: If the workbook cannot be produced
    """
    try:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = sheet_name
        sheet.append(list(RECORD_FIELDS))
        for transaction in transactions:
            sheet.append(transaction_to_row(transaction))

        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
    except Exception as e:
        raise EncodingFailureError(f"Failed to encode workbook: {e}") from e


class ExcelExporter:
    """
    Exports all stored expenses and shares the resulting workbook.

    The collection is re-read from the store on every export.
    """

    def __init__(
        self,
        store: TransactionStore,
        sink: ShareSinkInterface,
        settings: Optional[ExportSettings] = None,
    ):
        self._store = store
        self._sink = sink
        self._settings = settings or get_settings().export
        self.last_row_count = 0

    @property
    def output_path(self) -> Path:
        return Path(self._settings.cache_dir).expanduser() / self._settings.file_name

    async def export_expenses(self) -> bool:
        """
        Export every expense to a workbook and share it.

        Returns:
            True if the file was shared, False if there was nothing to
            export or the sink is not available

        Raises:
            EncodingFailureError: workbook could not be built or saved
            ShareFailureError: the sink failed to take the file
        """
        collection = await self._store.list_all()
        expenses = [t for t in collection if t.type == TransactionType.EXPENSE]
        self.last_row_count = 0

        if not expenses:
            logger.info("export_skipped", reason="no_expenses")
            return False

        payload = encode_workbook(expenses, sheet_name=self._settings.sheet_name)
        path = self.output_path
        try:
            await asyncio.to_thread(self._write_file, path, payload)
        except OSError as e:
            raise EncodingFailureError(f"Failed to write {path}: {e}") from e

        if not await self._sink.is_available():
            logger.warning("export_skipped", reason="sharing_unavailable", path=str(path))
            return False

        try:
            await self._sink.share(path)
        except Exception as e:
            logger.error("export_share_failed", path=str(path), error=str(e))
            raise ShareFailureError(f"Failed to share {path.name}: {e}") from e

        self.last_row_count = len(expenses)
        logger.info("export_completed", path=str(path), rows=len(expenses))
        return True

    @staticmethod
    def _write_file(path: Path, payload: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)

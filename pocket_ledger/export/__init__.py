"""Spreadsheet export package."""

from pocket_ledger.export.excel import (
    EncodingFailureError,
    ExcelExporter,
    ExportError,
    ShareFailureError,
    encode_workbook,
    transaction_to_row,
)

__all__ = [
    "EncodingFailureError",
    "ExcelExporter",
    "ExportError",
    "ShareFailureError",
    "encode_workbook",
    "transaction_to_row",
]

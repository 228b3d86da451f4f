"""
Data Models Package

This package contains all Pydantic models used in Pocket Ledger.
All data flowing through the system must conform to these schemas.
"""

from pocket_ledger.models.transaction import (
    COUNTERPARTIES,
    EXPENSE_CATEGORIES,
    INCOME_SOURCES,
    RECORD_FIELDS,
    SELF_COUNTERPARTY,
    Transaction,
    TransactionType,
    apply_type_default,
    categories_for,
    decimal_text,
    isoformat_utc,
)
from pocket_ledger.models.query import (
    DatePreset,
    DateSelector,
    FilterCriteria,
    MonthlyOverview,
    SummaryStats,
)
from pocket_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "COUNTERPARTIES",
    "EXPENSE_CATEGORIES",
    "INCOME_SOURCES",
    "RECORD_FIELDS",
    "SELF_COUNTERPARTY",
    "Transaction",
    "TransactionType",
    "apply_type_default",
    "categories_for",
    "decimal_text",
    "isoformat_utc",
    # Query models
    "DatePreset",
    "DateSelector",
    "FilterCriteria",
    "MonthlyOverview",
    "SummaryStats",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

"""
Core Transaction Model for Pocket Ledger

A Transaction is one recorded income or expense event. It is the only
entity that is persisted; everything else (filters, statistics) is
derived from the stored collection on demand.

The model is frozen: a transaction is written once, may be deleted by id,
and is never edited in place.

The durable layout predates this package, so the model accepts and emits
the original field names through aliases:

    category      <-> purpose
    counterparty  <-> withWhom
    occurred_at   <-> date
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS AND VOCABULARIES
# =============================================================================

class TransactionType(str, Enum):
    """Kind of money movement. Values are the on-disk spelling."""
    INCOME = "income"
    EXPENSE = "expense"


# Suggested choices offered by the entry form. Stored values are free
# text and are never checked against these lists.
EXPENSE_CATEGORIES = (
    "Food",
    "Travelling",
    "Tea/Coffee",
    "Movie",
    "Entertainment",
    "Shopping",
    "Others",
)
INCOME_SOURCES = ("Job", "Bonus", "Shares", "Stock", "Others")
COUNTERPARTIES = ("Self", "Family", "Relatives", "Friends", "Unknown")

SELF_COUNTERPARTY = "Self"

# Column order of the durable layout (also the export header row)
RECORD_FIELDS = ("id", "type", "amount", "purpose", "withWhom", "place", "date")


def categories_for(transaction_type: TransactionType) -> tuple[str, ...]:
    """Return the suggested category vocabulary for a transaction type."""
    if transaction_type == TransactionType.INCOME:
        return INCOME_SOURCES
    return EXPENSE_CATEGORIES


def apply_type_default(record: dict[str, Any]) -> dict[str, Any]:
    """
    Return a copy of a stored record with a resolvable ``type``.

    Records written before income tracking existed carry no ``type`` key
    and are expenses. The default is applied every time records are read;
    storage itself is never rewritten by this step.
    """
    if record.get("type"):
        return dict(record)
    return {**record, "type": TransactionType.EXPENSE.value}


def isoformat_utc(dt: datetime) -> str:
    """Render a timestamp as ISO 8601 UTC with milliseconds and a trailing Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def decimal_text(value: Decimal) -> str:
    """Plain decimal text without exponent or trailing zeros (100.0 -> '100')."""
    return format(value.normalize(), "f")


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense record.

    Invariants:
    - amount is a finite, non-negative decimal
    - every instance has a resolved type
    - income is always attributed to "Self"
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Unique id, epoch milliseconds of creation"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    amount: Annotated[
        Decimal,
        Field(ge=0, allow_inf_nan=False, description="Amount, never negative")
    ]
    category: str = Field(
        ...,
        min_length=1,
        alias="purpose",
        description="Expense purpose or income source"
    )
    counterparty: str = Field(
        ...,
        min_length=1,
        alias="withWhom",
        description="Who the money was spent with"
    )
    place: str = Field(
        default="",
        description="Shop name or free-text note"
    )
    occurred_at: datetime = Field(
        ...,
        alias="date",
        description="When the transaction was recorded"
    )

    @model_validator(mode='before')
    @classmethod
    def attribute_income_to_self(cls, data: Any) -> Any:
        """Income has no counterparty choice; it is always "Self"."""
        if not isinstance(data, dict):
            return data
        if data.get("type") == TransactionType.INCOME:
            data = {
                k: v for k, v in data.items()
                if k not in ("withWhom", "counterparty")
            }
            data["withWhom"] = SELF_COUNTERPARTY
        return data

    @field_validator('place', mode='before')
    @classmethod
    def blank_place(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('occurred_at')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps in stored data are UTC.

        Precision is cut to milliseconds, the resolution of the durable
        layout, so a record reads back equal to the one that was written.
        """
        v = v.replace(microsecond=v.microsecond // 1000 * 1000)
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, v: Decimal) -> Union[int, float]:
        # Stored as a plain JSON number, like records written by older clients
        if v == v.to_integral_value():
            return int(v)
        return float(v)

    @field_serializer('occurred_at', when_used='json')
    def serialize_occurred_at(self, v: datetime) -> str:
        return isoformat_utc(v)

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def amount_text(self) -> str:
        """Amount as plain text, used for free-text search."""
        return decimal_text(self.amount)

    def to_record(self) -> dict[str, Any]:
        """Convert to the durable JSON layout (original field names)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Transaction":
        """Build from a stored record, applying the legacy type default."""
        return cls.model_validate(apply_type_default(record))

"""
Transaction Input Validation

Form input is validated and normalized into a Transaction before it can
reach the store. Validation NEVER silently fixes bad input: a missing or
unusable amount is reported back to the caller for correction.

Checks performed:
- amount present and a finite, non-negative decimal
- category present
- counterparty present for expenses (income is always "Self")
- type, when given, is a known transaction type

Everything else (id, timestamp, type) is filled in when absent.
"""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import ValidationError as SchemaValidationError

from pocket_ledger.models.transaction import (
    SELF_COUNTERPARTY,
    Transaction,
    TransactionType,
)
from pocket_ledger.services.clock import Clock, SystemClock


class ValidationError(ValueError):
    """Input cannot become a Transaction. Carries the offending field."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class MissingAmountError(ValidationError):
    """No amount was entered."""

    def __init__(self, message: str = "Please enter an amount"):
        super().__init__("amount", message)


class InvalidAmountError(ValidationError):
    """The amount is not a finite, non-negative number."""

    def __init__(self, value: Any, reason: str = "must be a non-negative number"):
        super().__init__("amount", f"Invalid amount {value!r}: {reason}")
        self.value = value


class MissingFieldError(ValidationError):
    """A required text field is missing or blank."""

    def __init__(self, field: str):
        super().__init__(field, f"{field} is required")


class InvalidFieldError(ValidationError):
    """A field holds a value outside its allowed set."""

    def __init__(self, field: str, value: Any):
        super().__init__(field, f"Invalid {field}: {value!r}")
        self.value = value


def _pick(raw: Mapping, *names: str) -> Any:
    """First non-None value among alternative field names."""
    for name in names:
        value = raw.get(name)
        if value is not None:
            return value
    return None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(value: Any) -> Decimal:
    """
    Parse a user-entered amount.

    Raises:
        MissingAmountError: nothing was entered
        InvalidAmountError: not a finite, non-negative number
    """
    if _blank(value):
        raise MissingAmountError()

    # bool is an int subclass; True is not an amount
    if isinstance(value, bool):
        raise InvalidAmountError(value, "not a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAmountError(value, "not a number")
    else:
        raise InvalidAmountError(value, "not a number")

    if not amount.is_finite():
        raise InvalidAmountError(value, "must be finite")
    if amount < 0:
        raise InvalidAmountError(value, "must not be negative")

    return amount


def parse_type(value: Any) -> TransactionType:
    """Resolve a transaction type; absent means expense."""
    if _blank(value):
        return TransactionType.EXPENSE
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().lower())
    except ValueError:
        raise InvalidFieldError("type", value)


def generate_id(now: datetime) -> str:
    """Id derived from the creation instant, in epoch milliseconds."""
    return str(int(now.timestamp() * 1000))


def normalize(
    raw: Mapping[str, Any],
    *,
    now: Optional[datetime] = None,
    clock: Optional[Clock] = None,
) -> Transaction:
    """
    Validate form input and build a Transaction.

    Field names may be given either as model names (category,
    counterparty, occurred_at) or as stored names (purpose, withWhom,
    date).

    Two transactions normalized in the same millisecond get the same id;
    callers must not create records faster than that.

    Raises:
        ValidationError: input must be corrected by the user
    """
    if now is None:
        now = (clock or SystemClock()).now()

    amount = parse_amount(raw.get("amount"))
    transaction_type = parse_type(raw.get("type"))

    category = _pick(raw, "category", "purpose")
    if _blank(category):
        raise MissingFieldError("category")

    if transaction_type == TransactionType.INCOME:
        counterparty = SELF_COUNTERPARTY
    else:
        counterparty = _pick(raw, "counterparty", "withWhom")
        if _blank(counterparty):
            raise MissingFieldError("counterparty")

    transaction_id = _pick(raw, "id")
    if _blank(transaction_id):
        transaction_id = generate_id(now)

    occurred_at = _pick(raw, "occurred_at", "date") or now

    try:
        return Transaction(
            id=str(transaction_id),
            type=transaction_type,
            amount=amount,
            category=category,
            counterparty=counterparty,
            place=_pick(raw, "place") or "",
            occurred_at=occurred_at,
        )
    except SchemaValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or "transaction"
        raise InvalidFieldError(field, error.get("input")) from e

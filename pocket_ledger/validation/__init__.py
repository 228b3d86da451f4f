"""Input validation package."""

from pocket_ledger.validation.validator import (
    InvalidAmountError,
    InvalidFieldError,
    MissingAmountError,
    MissingFieldError,
    ValidationError,
    generate_id,
    normalize,
    parse_amount,
    parse_type,
)

__all__ = [
    "InvalidAmountError",
    "InvalidFieldError",
    "MissingAmountError",
    "MissingFieldError",
    "ValidationError",
    "generate_id",
    "normalize",
    "parse_amount",
    "parse_type",
]

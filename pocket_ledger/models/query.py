"""
Query Models for Pocket Ledger

FilterCriteria is built fresh for every query by the caller and is never
persisted. SummaryStats and MonthlyOverview are derived results; they
are recomputed from the full collection each time they are requested.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from pocket_ledger.models.transaction import TransactionType


DateBound = Union[datetime, date]


class DatePreset(str, Enum):
    """
    Named date windows.

    All clock-relative presets use the calendar period that contains the
    current instant, in the local time of the machine at query time.
    CUSTOM defers to the explicit range or month/year on the selector.
    """
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"
    ALL = "all"
    CUSTOM = "custom"


class DateSelector(BaseModel):
    """
    Date clause of a query.

    Under CUSTOM the explicit range is checked first; month/year is only
    consulted when neither range bound is set. A date (not datetime)
    bound covers the whole local day.
    """
    model_config = ConfigDict(frozen=True)

    preset: DatePreset = Field(
        default=DatePreset.ALL,
        description="Named window, or CUSTOM for explicit bounds"
    )

    # Custom range (inclusive)
    start: Optional[DateBound] = None
    end: Optional[DateBound] = None

    # Custom calendar month
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1, le=9999)

    @classmethod
    def custom_range(
        cls,
        start: Optional[DateBound],
        end: Optional[DateBound],
    ) -> "DateSelector":
        return cls(preset=DatePreset.CUSTOM, start=start, end=end)

    @classmethod
    def custom_month(cls, month: int, year: int) -> "DateSelector":
        return cls(preset=DatePreset.CUSTOM, month=month, year=year)

    @property
    def has_range(self) -> bool:
        return self.start is not None or self.end is not None

    @property
    def has_month(self) -> bool:
        return self.month is not None or self.year is not None


class FilterCriteria(BaseModel):
    """
    Composite query over the transaction collection.

    Every clause is optional; an unset clause passes everything and the
    set clauses are combined with logical AND.
    """
    model_config = ConfigDict(frozen=True)

    type: Optional[TransactionType] = None
    date: DateSelector = Field(default_factory=DateSelector)
    category: Optional[str] = None
    counterparty: Optional[str] = None
    search: str = ""

    @classmethod
    def for_preset(cls, preset: DatePreset, **kwargs) -> "FilterCriteria":
        """Criteria with a named date window plus any other clauses."""
        return cls(date=DateSelector(preset=preset), **kwargs)


class SummaryStats(BaseModel):
    """Statistics over a filtered sequence. Zero-valued when it is empty."""

    total: Decimal = Field(default=Decimal("0"), ge=0)
    highest: Decimal = Field(default=Decimal("0"), ge=0)
    modal_category: Optional[str] = Field(
        default=None,
        description="Most frequent category, None for an empty sequence"
    )
    count: int = Field(default=0, ge=0)


class MonthlyOverview(BaseModel):
    """Income against expense for one calendar month."""

    year: int
    month: int = Field(ge=1, le=12)
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def savings(self) -> Decimal:
        """Income minus expense; negative when overspent."""
        return self.income - self.expense

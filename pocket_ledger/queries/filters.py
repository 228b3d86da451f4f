"""
Filter Engine

Derives filtered views of the transaction collection. Filtering is a
pure, order-preserving subset operation: the input is never mutated and
the surviving records keep their relative order. Sorting for display is
a separate step (sort_newest_first).

A query is the logical AND of its clauses; an unset clause passes
everything. Because clauses are independent, applying A then B gives the
same result as applying A and B together.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from pocket_ledger.config import get_settings
from pocket_ledger.models.query import DateBound, DatePreset, DateSelector, FilterCriteria
from pocket_ledger.models.transaction import Transaction, TransactionType
from pocket_ledger.services.clock import Clock, SystemClock, localize, to_local


# =============================================================================
# CLAUSES
# =============================================================================

def matches_type(
    transaction: Transaction,
    transaction_type: Optional[TransactionType],
) -> bool:
    return transaction_type is None or transaction.type == transaction_type


def matches_category(transaction: Transaction, category: Optional[str]) -> bool:
    """Exact, case-sensitive match."""
    return category is None or transaction.category == category


def matches_counterparty(transaction: Transaction, counterparty: Optional[str]) -> bool:
    """Exact, case-sensitive match."""
    return counterparty is None or transaction.counterparty == counterparty


def matches_search(transaction: Transaction, search: Optional[str]) -> bool:
    """
    Case-insensitive substring match on category, place, counterparty and
    the plain text of the amount.

    Surrounding whitespace in the query is ignored, so a whitespace-only
    query matches everything rather than only fields containing spaces.
    """
    if search is None or not search.strip():
        return True
    query = search.strip().lower()
    haystack = (
        transaction.category,
        transaction.place,
        transaction.counterparty,
        transaction.amount_text,
    )
    return any(query in field.lower() for field in haystack if field)


def week_bounds(today: date, week_starts_on: int) -> tuple[date, date]:
    """First and last day of the calendar week containing ``today``."""
    start = today - timedelta(days=(today.weekday() - week_starts_on) % 7)
    return start, start + timedelta(days=6)


def _lower_bound(bound: DateBound, tz: Optional[tzinfo]) -> datetime:
    if isinstance(bound, datetime):
        return bound if bound.tzinfo else localize(bound, tz)
    return localize(datetime.combine(bound, time.min), tz)


def _upper_bound(bound: DateBound, tz: Optional[tzinfo]) -> datetime:
    if isinstance(bound, datetime):
        return bound if bound.tzinfo else localize(bound, tz)
    return localize(datetime.combine(bound, time.max), tz)


def _matches_custom(
    transaction: Transaction,
    selector: DateSelector,
    tz: Optional[tzinfo],
) -> bool:
    # Range wins over month/year when both are populated
    if selector.has_range:
        if selector.start is None or selector.end is None:
            # A half-open range is treated as unsatisfiable
            return False
        start = _lower_bound(selector.start, tz)
        end = _upper_bound(selector.end, tz)
        return start <= transaction.occurred_at <= end

    if selector.has_month:
        if selector.month is None or selector.year is None:
            return False
        local = to_local(transaction.occurred_at, tz)
        return local.month == selector.month and local.year == selector.year

    return True


def matches_date(
    transaction: Transaction,
    selector: DateSelector,
    now: datetime,
    week_starts_on: int = 6,
    tz: Optional[tzinfo] = None,
) -> bool:
    """
    Date clause, evaluated on the calendar of ``tz``.

    ``now`` must be timezone-aware. Records are converted with the rules
    of ``tz`` at their own instant (None: the machine zone), so daylight
    saving changes between a record and ``now`` do not shift boundaries.
    Periods are inclusive of both ends.
    """
    preset = selector.preset
    if preset == DatePreset.ALL:
        return True

    if preset == DatePreset.CUSTOM:
        return _matches_custom(transaction, selector, tz)

    local = to_local(transaction.occurred_at, tz)
    today = to_local(now, tz).date()

    if preset == DatePreset.TODAY:
        return local.date() == today
    if preset == DatePreset.THIS_WEEK:
        start, end = week_bounds(today, week_starts_on)
        return start <= local.date() <= end
    if preset == DatePreset.THIS_MONTH:
        return (local.year, local.month) == (today.year, today.month)
    if preset == DatePreset.THIS_YEAR:
        return local.year == today.year

    raise ValueError(f"Unknown date preset: {preset}")


# =============================================================================
# QUERIES
# =============================================================================

def filter_transactions(
    collection: Iterable[Transaction],
    criteria: Optional[FilterCriteria] = None,
    *,
    clock: Optional[Clock] = None,
    week_starts_on: Optional[int] = None,
) -> list[Transaction]:
    """
    Return the transactions matching every clause of ``criteria``.

    The clock is read once, so every record is judged against the same
    instant.
    """
    if criteria is None:
        return list(collection)

    clock = clock or SystemClock()
    now = clock.now()
    tz = clock.tz
    if week_starts_on is None:
        week_starts_on = get_settings().app.week_starts_on

    return [
        t for t in collection
        if matches_type(t, criteria.type)
        and matches_date(t, criteria.date, now, week_starts_on, tz)
        and matches_category(t, criteria.category)
        and matches_counterparty(t, criteria.counterparty)
        and matches_search(t, criteria.search)
    ]


def sort_newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Order by occurred_at, most recent first. Ties keep their input order."""
    return sorted(transactions, key=lambda t: t.occurred_at, reverse=True)

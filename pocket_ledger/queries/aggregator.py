"""
Aggregator

Summary statistics over any filtered sequence of transactions. Every
call recomputes from the records it is given; nothing is cached.

An empty sequence is a normal state (no spending this week) and yields
zero totals and no modal category rather than an error.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from pocket_ledger.models.query import DatePreset, DateSelector, MonthlyOverview, SummaryStats
from pocket_ledger.models.transaction import Transaction, TransactionType
from pocket_ledger.queries.filters import matches_date
from pocket_ledger.services.clock import Clock, SystemClock, to_local


def modal_category(transactions: Iterable[Transaction]) -> Optional[str]:
    """
    Most frequent category.

    Ties go to the category that was seen first in the sequence.
    """
    counts: dict[str, int] = {}
    for transaction in transactions:
        counts[transaction.category] = counts.get(transaction.category, 0) + 1

    best = None
    best_count = 0
    for category, count in counts.items():
        if count > best_count:
            best, best_count = category, count
    return best


def summarize(transactions: Iterable[Transaction]) -> SummaryStats:
    """Total, highest single amount and modal category of a sequence."""
    records = list(transactions)
    if not records:
        return SummaryStats()

    amounts = [t.amount for t in records]
    return SummaryStats(
        total=sum(amounts, Decimal("0")),
        highest=max(amounts),
        modal_category=modal_category(records),
        count=len(records),
    )


def totals_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum of amounts per category, in first-seen order."""
    totals: dict[str, Decimal] = {}
    for transaction in transactions:
        totals[transaction.category] = (
            totals.get(transaction.category, Decimal("0")) + transaction.amount
        )
    return totals


def monthly_overview(
    collection: Iterable[Transaction],
    *,
    clock: Optional[Clock] = None,
) -> MonthlyOverview:
    """Income against expense for the calendar month containing now."""
    clock = clock or SystemClock()
    now = clock.now()
    tz = clock.tz
    this_month = DateSelector(preset=DatePreset.THIS_MONTH)

    income = Decimal("0")
    expense = Decimal("0")
    for transaction in collection:
        if not matches_date(transaction, this_month, now, tz=tz):
            continue
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        else:
            expense += transaction.amount

    local_now = to_local(now, tz)
    return MonthlyOverview(
        year=local_now.year,
        month=local_now.month,
        income=income,
        expense=expense,
    )

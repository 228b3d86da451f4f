"""Query package: filtering and aggregation over the transaction collection."""

from pocket_ledger.queries.filters import (
    filter_transactions,
    matches_category,
    matches_counterparty,
    matches_date,
    matches_search,
    matches_type,
    sort_newest_first,
    week_bounds,
)
from pocket_ledger.queries.aggregator import (
    modal_category,
    monthly_overview,
    summarize,
    totals_by_category,
)

__all__ = [
    "filter_transactions",
    "matches_category",
    "matches_counterparty",
    "matches_date",
    "matches_search",
    "matches_type",
    "modal_category",
    "monthly_overview",
    "sort_newest_first",
    "summarize",
    "totals_by_category",
    "week_bounds",
]

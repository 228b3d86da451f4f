"""Tests for the filter engine."""

import pytest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from pocket_ledger.models.query import DatePreset, DateSelector, FilterCriteria
from pocket_ledger.models.transaction import TransactionType
from pocket_ledger.queries import (
    filter_transactions,
    matches_search,
    sort_newest_first,
    week_bounds,
)
from pocket_ledger.services.clock import FixedClock, SystemClock, localize, to_local

from conftest import make_transaction, utc


IST = timezone(timedelta(hours=5, minutes=30))


def ids(transactions) -> list[str]:
    return [t.id for t in transactions]


@pytest.fixture
def mixed_records():
    return [
        make_transaction("a", amount=100, category="Food", counterparty="Friends",
                         place="Starbucks", occurred_at=utc(2024, 6, 15, 8, 0)),
        make_transaction("b", amount=45, category="Coffee", counterparty="Family",
                         place="Costa", occurred_at=utc(2024, 6, 12, 8, 0)),
        make_transaction("c", amount=20, type=TransactionType.INCOME, category="Job",
                         occurred_at=utc(2024, 6, 1, 0, 0)),
        make_transaction("d", amount=75, category="food", counterparty="Friends",
                         occurred_at=utc(2024, 5, 31, 23, 59)),
        make_transaction("e", amount=12.5, category="Movie", counterparty="Self",
                         occurred_at=utc(2023, 12, 31, 12, 0)),
    ]


class TestClauses:
    """Tests for the non-date clauses."""

    def test_no_criteria_returns_everything(self, mixed_records, clock):
        assert ids(filter_transactions(mixed_records, None, clock=clock)) == list("abcde")
        assert ids(filter_transactions(mixed_records, FilterCriteria(), clock=clock)) == list("abcde")

    def test_type_clause(self, mixed_records, clock):
        income = filter_transactions(
            mixed_records, FilterCriteria(type=TransactionType.INCOME), clock=clock
        )
        assert ids(income) == ["c"]

    def test_category_is_case_sensitive(self, mixed_records, clock):
        result = filter_transactions(mixed_records, FilterCriteria(category="Food"), clock=clock)
        assert ids(result) == ["a"]

    def test_counterparty_clause(self, mixed_records, clock):
        result = filter_transactions(
            mixed_records, FilterCriteria(counterparty="Friends"), clock=clock
        )
        assert ids(result) == ["a", "d"]

    def test_income_counterparty_is_self(self, mixed_records, clock):
        result = filter_transactions(mixed_records, FilterCriteria(counterparty="Self"), clock=clock)
        assert ids(result) == ["c", "e"]


class TestSearch:
    """Tests for the free-text search clause."""

    def test_search_matches_place_case_insensitively(self, mixed_records, clock):
        result = filter_transactions(mixed_records, FilterCriteria(search="starbucks"), clock=clock)
        assert ids(result) == ["a"]

    def test_search_does_not_match_other_shop(self, mixed_records):
        costa = mixed_records[1]
        assert costa.category == "Coffee"
        assert matches_search(costa, "starbucks") is False

    def test_search_matches_category_and_counterparty(self, mixed_records, clock):
        assert ids(filter_transactions(mixed_records, FilterCriteria(search="FOOD"), clock=clock)) == ["a", "d"]
        assert ids(filter_transactions(mixed_records, FilterCriteria(search="famil"), clock=clock)) == ["b"]

    def test_search_matches_amount_text(self, mixed_records, clock):
        assert ids(filter_transactions(mixed_records, FilterCriteria(search="12.5"), clock=clock)) == ["e"]
        assert ids(filter_transactions(mixed_records, FilterCriteria(search="45"), clock=clock)) == ["b"]

    def test_integral_amount_has_no_trailing_zeros(self):
        t = make_transaction("x", amount="100.00")
        assert matches_search(t, "100") is True
        assert matches_search(t, "100.0") is False

    def test_surrounding_whitespace_is_ignored(self, mixed_records, clock):
        result = filter_transactions(mixed_records, FilterCriteria(search="  food "), clock=clock)
        assert ids(result) == ["a", "d"]
        assert matches_search(mixed_records[1], " ") is True

    @pytest.mark.parametrize("search", ["", "   "])
    def test_blank_search_passes_everything(self, mixed_records, clock, search):
        result = filter_transactions(mixed_records, FilterCriteria(search=search), clock=clock)
        assert len(result) == len(mixed_records)


class TestDatePresets:
    """Tests for clock-relative date windows. The clock reads Saturday 2024-06-15."""

    def test_today(self, mixed_records, clock):
        result = filter_transactions(mixed_records, FilterCriteria.for_preset(DatePreset.TODAY), clock=clock)
        assert ids(result) == ["a"]

    def test_this_week_starts_sunday(self, mixed_records, clock):
        assert week_bounds(date(2024, 6, 15), 6) == (date(2024, 6, 9), date(2024, 6, 15))
        result = filter_transactions(
            mixed_records, FilterCriteria.for_preset(DatePreset.THIS_WEEK), clock=clock, week_starts_on=6
        )
        assert ids(result) == ["a", "b"]

    def test_this_week_starts_monday(self):
        assert week_bounds(date(2024, 6, 15), 0) == (date(2024, 6, 10), date(2024, 6, 16))
        assert week_bounds(date(2024, 6, 10), 0) == (date(2024, 6, 10), date(2024, 6, 16))
        assert week_bounds(date(2024, 6, 9), 0) == (date(2024, 6, 3), date(2024, 6, 9))

    def test_this_month_includes_first_excludes_previous(self, clock):
        first = make_transaction("first", occurred_at=utc(2024, 6, 1, 0, 0))
        previous = make_transaction("previous", occurred_at=utc(2024, 5, 31, 23, 59))

        result = filter_transactions(
            [first, previous], FilterCriteria.for_preset(DatePreset.THIS_MONTH), clock=clock
        )
        assert ids(result) == ["first"]

    def test_this_month_uses_local_time(self):
        """20:00 UTC on 31 May is already 1 June in India."""
        clock = FixedClock(datetime(2024, 6, 15, 12, 0, tzinfo=IST))
        late_may_utc = make_transaction("x", occurred_at=utc(2024, 5, 31, 20, 0))

        result = filter_transactions(
            [late_may_utc], FilterCriteria.for_preset(DatePreset.THIS_MONTH), clock=clock
        )
        assert ids(result) == ["x"]

    def test_this_year(self, mixed_records, clock):
        result = filter_transactions(mixed_records, FilterCriteria.for_preset(DatePreset.THIS_YEAR), clock=clock)
        assert ids(result) == ["a", "b", "c", "d"]

    def test_all(self, mixed_records, clock):
        result = filter_transactions(mixed_records, FilterCriteria.for_preset(DatePreset.ALL), clock=clock)
        assert len(result) == 5


class TestCustomDates:
    """Tests for the custom range and month/year selectors."""

    def test_range_is_inclusive_of_whole_days(self, mixed_records, clock):
        criteria = FilterCriteria(date=DateSelector.custom_range(date(2024, 6, 1), date(2024, 6, 12)))
        assert ids(filter_transactions(mixed_records, criteria, clock=clock)) == ["b", "c"]

    def test_range_with_datetime_bounds(self, mixed_records, clock):
        criteria = FilterCriteria(
            date=DateSelector.custom_range(utc(2024, 6, 12, 8, 0), utc(2024, 6, 15, 8, 0))
        )
        assert ids(filter_transactions(mixed_records, criteria, clock=clock)) == ["a", "b"]

    @pytest.mark.parametrize("start,end", [(date(2024, 6, 1), None), (None, date(2024, 6, 30))])
    def test_half_open_range_matches_nothing(self, mixed_records, clock, start, end):
        criteria = FilterCriteria(date=DateSelector.custom_range(start, end))
        assert filter_transactions(mixed_records, criteria, clock=clock) == []

    def test_inverted_range_matches_nothing(self, mixed_records, clock):
        criteria = FilterCriteria(date=DateSelector.custom_range(date(2024, 6, 30), date(2024, 6, 1)))
        assert filter_transactions(mixed_records, criteria, clock=clock) == []

    def test_month_and_year(self, mixed_records, clock):
        criteria = FilterCriteria(date=DateSelector.custom_month(5, 2024))
        assert ids(filter_transactions(mixed_records, criteria, clock=clock)) == ["d"]

    def test_month_without_year_matches_nothing(self, mixed_records, clock):
        criteria = FilterCriteria(date=DateSelector(preset=DatePreset.CUSTOM, month=6))
        assert filter_transactions(mixed_records, criteria, clock=clock) == []

    def test_range_takes_precedence_over_month(self, mixed_records, clock):
        selector = DateSelector(
            preset=DatePreset.CUSTOM,
            start=date(2023, 12, 1),
            end=date(2023, 12, 31),
            month=6,
            year=2024,
        )
        result = filter_transactions(mixed_records, FilterCriteria(date=selector), clock=clock)
        assert ids(result) == ["e"]

    def test_empty_custom_passes_everything(self, mixed_records, clock):
        criteria = FilterCriteria(date=DateSelector(preset=DatePreset.CUSTOM))
        assert len(filter_transactions(mixed_records, criteria, clock=clock)) == 5

    def test_custom_fields_ignored_for_named_presets(self, mixed_records, clock):
        selector = DateSelector(preset=DatePreset.ALL, month=1, year=1999)
        assert len(filter_transactions(mixed_records, FilterCriteria(date=selector), clock=clock)) == 5


class TestComposition:
    """Filtering is a pure, order-preserving subset operation."""

    def test_sequential_equals_combined(self, mixed_records, clock):
        a = FilterCriteria(type=TransactionType.EXPENSE)
        b = FilterCriteria.for_preset(DatePreset.THIS_MONTH)
        both = FilterCriteria.for_preset(DatePreset.THIS_MONTH, type=TransactionType.EXPENSE)

        sequential = filter_transactions(filter_transactions(mixed_records, a, clock=clock), b, clock=clock)
        assert sequential == filter_transactions(mixed_records, both, clock=clock)
        assert ids(sequential) == ["a", "b"]

    def test_order_preserved(self, mixed_records, clock):
        shuffled = [mixed_records[i] for i in (3, 0, 4, 1, 2)]
        result = filter_transactions(shuffled, FilterCriteria(type=TransactionType.EXPENSE), clock=clock)
        assert ids(result) == ["d", "a", "e", "b"]

    def test_input_not_mutated(self, mixed_records, clock):
        original = list(mixed_records)
        filter_transactions(mixed_records, FilterCriteria(category="Food"), clock=clock)
        assert mixed_records == original

    def test_sort_newest_first(self, mixed_records):
        shuffled = [mixed_records[i] for i in (4, 2, 0, 3, 1)]
        assert ids(sort_newest_first(shuffled)) == ["a", "b", "c", "d", "e"]

    def test_sort_is_stable_for_equal_times(self):
        when = utc(2024, 6, 1, 10, 0)
        records = [make_transaction(str(i), occurred_at=when) for i in range(3)]
        assert ids(sort_newest_first(records)) == ["0", "1", "2"]


class TestDaylightSaving:
    """Calendar boundaries follow zone rules at each record's own instant."""

    BERLIN = ZoneInfo("Europe/Berlin")

    @pytest.fixture
    def summer_clock(self):
        """Mid-July in Berlin, when the offset is +02:00."""
        return FixedClock(datetime(2026, 7, 15, 12, 0, tzinfo=self.BERLIN))

    @pytest.fixture
    def new_years_eve(self):
        """23:45 on 31 December in Berlin (+01:00), 22:45 UTC."""
        return make_transaction("x", occurred_at=utc(2025, 12, 31, 22, 45))

    def test_winter_record_stays_in_december(self, summer_clock, new_years_eve):
        january = FilterCriteria(date=DateSelector.custom_month(1, 2026))
        december = FilterCriteria(date=DateSelector.custom_month(12, 2025))

        assert filter_transactions([new_years_eve], january, clock=summer_clock) == []
        assert ids(filter_transactions([new_years_eve], december, clock=summer_clock)) == ["x"]

    def test_this_year_uses_winter_offset(self, summer_clock, new_years_eve):
        criteria = FilterCriteria.for_preset(DatePreset.THIS_YEAR)
        assert filter_transactions([new_years_eve], criteria, clock=summer_clock) == []

    def test_date_bounds_use_winter_offset(self, summer_clock, new_years_eve):
        criteria = FilterCriteria(date=DateSelector.custom_range(date(2026, 1, 1), date(2026, 1, 31)))
        assert filter_transactions([new_years_eve], criteria, clock=summer_clock) == []

    def test_this_month_in_winter(self):
        clock = FixedClock(datetime(2026, 1, 15, 12, 0, tzinfo=self.BERLIN))
        just_after_midnight = make_transaction("x", occurred_at=utc(2025, 12, 31, 23, 30))

        result = filter_transactions(
            [just_after_midnight], FilterCriteria.for_preset(DatePreset.THIS_MONTH), clock=clock
        )
        assert ids(result) == ["x"]

    def test_system_clock_uses_machine_zone_rules(self):
        clock = SystemClock()
        record_time = utc(2025, 12, 31, 22, 45)

        assert clock.tz is None
        assert to_local(record_time, clock.tz) == record_time.astimezone()
        assert localize(datetime(2026, 1, 1), clock.tz).tzinfo is not None

"""Unit tests for the financial aggregation engine"""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.models.ledger import RecordType
from app.services.aggregation import (
    ALL,
    FinancialFilters,
    aggregate,
    available_years,
    monthly_series,
    resolve_total_funding,
    safe_average,
    summarize,
    vertical_breakdown,
)


def record(record_type, on, amount, vertical="SaaS", entity="Parent Company (India)"):
    return SimpleNamespace(
        record_type=record_type,
        date=on,
        amount=Decimal(str(amount)),
        vertical=vertical,
        entity=entity,
    )


def revenue(on, amount, **kwargs):
    kwargs.setdefault("vertical", "Product Sales")
    return record("revenue", on, amount, **kwargs)


def expense(on, amount, **kwargs):
    return record("expense", on, amount, **kwargs)


class TestMonthlySeries:
    """Tests for monthly bucketing"""

    def test_concrete_year_without_records_has_twelve_zero_months(self):
        buckets = monthly_series([], 2024)
        assert [b.label for b in buckets] == [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
        ]
        assert all(b.revenue == 0 and b.expenses == 0 for b in buckets)

    def test_all_years_keeps_same_month_of_different_years_apart(self):
        records = [
            revenue(date(2024, 1, 10), 100),
            revenue(date(2025, 1, 5), 200),
        ]
        buckets = monthly_series(records, ALL)
        assert [b.label for b in buckets] == ["2024-Jan", "2025-Jan"]
        assert [b.revenue for b in buckets] == [Decimal("100"), Decimal("200")]

    def test_all_years_is_chronological_and_sparse(self):
        records = [
            expense(date(2025, 3, 1), 50),
            revenue(date(2023, 11, 20), 10),
            expense(date(2023, 11, 21), 4),
        ]
        buckets = monthly_series(records, ALL)
        assert [b.label for b in buckets] == ["2023-Nov", "2025-Mar"]
        assert buckets[0].revenue == Decimal("10")
        assert buckets[0].expenses == Decimal("4")

    def test_concrete_year_ignores_other_years(self):
        records = [
            revenue(date(2024, 2, 1), 100),
            revenue(date(2023, 2, 1), 999),
        ]
        buckets = monthly_series(records, 2024)
        assert buckets[1].revenue == Decimal("100")
        assert sum(b.revenue for b in buckets) == Decimal("100")


class TestVerticalBreakdown:
    """Tests for per-vertical totals"""

    def test_sorted_by_value_descending(self):
        records = [
            expense(date(2024, 1, 1), 100, vertical="Marketing"),
            expense(date(2024, 1, 2), 300, vertical="Salaries"),
            expense(date(2024, 1, 3), 50, vertical="Marketing"),
        ]
        breakdown = vertical_breakdown(records, RecordType.EXPENSE)
        assert [(v.name, v.value) for v in breakdown] == [
            ("Salaries", Decimal("300")),
            ("Marketing", Decimal("150")),
        ]

    def test_custom_labels_group_case_insensitively(self):
        records = [
            expense(date(2024, 1, 1), 10, vertical="Legal  Fees"),
            expense(date(2024, 1, 2), 15, vertical="legal fees"),
        ]
        breakdown = vertical_breakdown(records, RecordType.EXPENSE)
        assert len(breakdown) == 1
        assert breakdown[0].name == "Legal Fees"
        assert breakdown[0].value == Decimal("25")

    def test_known_vertical_matched_regardless_of_case(self):
        records = [
            revenue(date(2024, 1, 1), 10, vertical="product sales"),
            revenue(date(2024, 1, 2), 5, vertical="Product Sales"),
        ]
        breakdown = vertical_breakdown(records, RecordType.REVENUE)
        assert [(v.name, v.value) for v in breakdown] == [("Product Sales", Decimal("15"))]

    def test_other_record_type_is_skipped(self):
        records = [revenue(date(2024, 1, 1), 10), expense(date(2024, 1, 1), 20)]
        assert [v.value for v in vertical_breakdown(records, RecordType.REVENUE)] == [Decimal("10")]


class TestAggregate:
    """Tests for the full aggregation run"""

    @pytest.fixture
    def records(self):
        return [
            revenue(date(2024, 1, 5), 1000, vertical="Product Sales"),
            revenue(date(2024, 6, 5), 500, vertical="Service Revenue", entity="Subsidiary 1 (US)"),
            revenue(date(2025, 1, 7), 250, vertical="Product Sales"),
            expense(date(2024, 1, 8), 300, vertical="Salaries"),
            expense(date(2025, 2, 9), 120, vertical="Marketing", entity="Subsidiary 1 (US)"),
        ]

    def test_vertical_sums_equal_summary_totals(self, records):
        for filters in [
            FinancialFilters(),
            FinancialFilters(year=2024),
            FinancialFilters(entity="Subsidiary 1 (US)"),
            FinancialFilters(entity="Subsidiary 1 (US)", year=2025),
        ]:
            snapshot = aggregate(records, filters)
            assert sum(v.value for v in snapshot.revenue_by_vertical) == snapshot.summary.total_revenue
            assert sum(v.value for v in snapshot.expenses_by_vertical) == snapshot.summary.total_expenses

    def test_all_years_breakdown_covers_every_year(self, records):
        snapshot = aggregate(records, FinancialFilters())
        by_name = {v.name: v.value for v in snapshot.revenue_by_vertical}
        assert by_name["Product Sales"] == Decimal("1250")

    def test_entity_filter(self, records):
        snapshot = aggregate(records, FinancialFilters(entity="Subsidiary 1 (US)"))
        assert snapshot.summary.total_revenue == Decimal("500")
        assert snapshot.summary.total_expenses == Decimal("120")
        assert len(snapshot.revenues) == 1
        assert len(snapshot.expenses) == 1

    def test_available_funds(self, records):
        snapshot = aggregate(records, FinancialFilters(year=2024), investment_amounts=[Decimal("10000")])
        assert snapshot.summary.total_funding == Decimal("10000")
        assert snapshot.summary.available_funds == Decimal("10000") + Decimal("1500") - Decimal("300")

    def test_empty_records(self):
        snapshot = aggregate([], FinancialFilters(year=2024))
        assert len(snapshot.monthly) == 12
        assert snapshot.revenue_by_vertical == []
        assert snapshot.summary.available_funds == 0

    def test_deterministic(self, records):
        first = aggregate(records, FinancialFilters()).to_dict()
        second = aggregate(records, FinancialFilters()).to_dict()
        assert first == second

    def test_to_dict_uses_month_labels(self, records):
        data = aggregate(records, FinancialFilters()).to_dict()
        assert data["filters"] == {"entity": "all", "year": "all"}
        assert data["monthly"][0]["month_name"] == "2024-Jan"


class TestTotalFunding:
    """Tests for the reconciliation rule"""

    def test_records_sum_wins_over_cache(self):
        assert resolve_total_funding([Decimal("100"), Decimal("50")], Decimal("999")) == Decimal("150")

    def test_cache_used_when_no_records(self):
        assert resolve_total_funding([], Decimal("75000")) == Decimal("75000")

    def test_missing_cache_is_zero(self):
        assert resolve_total_funding([], None) == Decimal("0")

    def test_negative_cache_is_floored(self):
        assert resolve_total_funding([], Decimal("-10")) == Decimal("0")


class TestHelpers:
    """Tests for summary and average helpers"""

    def test_summarize(self):
        summary = summarize(
            [revenue(date(2024, 1, 1), 20000), expense(date(2024, 1, 2), 5000)],
            Decimal("100000"),
        )
        assert summary.available_funds == Decimal("115000")

    def test_safe_average_of_nothing_is_zero(self):
        assert safe_average([]) == Decimal("0")

    def test_safe_average(self):
        assert safe_average([Decimal("10"), Decimal("20")]) == Decimal("15")


class TestAvailableYears:
    """Tests for the year filter options"""

    def test_from_registration_year(self):
        years = available_years(date(2022, 5, 1), [], today=date(2025, 3, 1))
        assert years == ["all", 2025, 2024, 2023, 2022]

    def test_falls_back_to_earliest_record(self):
        years = available_years(None, [date(2024, 2, 1), date(2023, 7, 1)], today=date(2025, 1, 1))
        assert years == ["all", 2025, 2024, 2023]

    def test_current_year_only_without_data(self):
        assert available_years(None, [], today=date(2025, 1, 1)) == ["all", 2025]

    def test_registration_in_future_year(self):
        assert available_years(date(2030, 1, 1), [], today=date(2025, 1, 1)) == ["all", 2025]

    def test_year_filter_date_range(self):
        assert FinancialFilters(year=2024).date_range() == (date(2024, 1, 1), date(2024, 12, 31))
        assert FinancialFilters().date_range() is None

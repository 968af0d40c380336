"""
Financial Aggregation Engine

Pure transformations of raw ledger records into the monthly series,
per-vertical breakdowns and summary totals shown on the financials panel.
Nothing here touches the database; the same (records, filters) input always
produces the same output.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from app.models.ledger import RecordType
from app.services.verticals import Vertical

ALL = "all"
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
ZERO = Decimal("0")

YearFilter = Union[int, str]


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored amount (Decimal, int, float, str or None) to Decimal"""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def safe_average(values: Iterable[Any]) -> Decimal:
    """Mean of the values, or zero when there are none"""
    items = [to_decimal(v) for v in values]
    if not items:
        return ZERO
    return sum(items, ZERO) / len(items)


def _record_type(record: Any) -> RecordType:
    return RecordType(record.record_type)


@dataclass(frozen=True)
class FinancialFilters:
    """Entity/year selection; "all" leaves that dimension unconstrained"""
    entity: str = ALL
    year: YearFilter = ALL

    @property
    def all_years(self) -> bool:
        return self.year == ALL

    def matches(self, record: Any) -> bool:
        if self.entity != ALL and record.entity != self.entity:
            return False
        if not self.all_years and record.date.year != self.year:
            return False
        return True

    def date_range(self) -> Optional[Tuple[date, date]]:
        """Inclusive date bounds for a concrete year"""
        if self.all_years:
            return None
        return date(self.year, 1, 1), date(self.year, 12, 31)


@dataclass
class MonthlyBucket:
    """Revenue and expenses summed over one month"""
    month: int  # 1-12
    year: Optional[int] = None  # Set only when bucketing across all years
    revenue: Decimal = ZERO
    expenses: Decimal = ZERO

    @property
    def label(self) -> str:
        name = MONTHS[self.month - 1]
        return f"{self.year}-{name}" if self.year is not None else name


@dataclass
class VerticalTotal:
    """Summed amount for one vertical"""
    name: str
    value: Decimal


@dataclass
class FinancialSummary:
    """Headline totals for the selected records"""
    total_revenue: Decimal
    total_expenses: Decimal
    total_funding: Decimal

    @property
    def available_funds(self) -> Decimal:
        return self.total_funding + self.total_revenue - self.total_expenses


@dataclass
class FinancialsSnapshot:
    """Everything the financials panel renders for one filter selection"""
    filters: FinancialFilters
    monthly: List[MonthlyBucket]
    revenue_by_vertical: List[VerticalTotal]
    expenses_by_vertical: List[VerticalTotal]
    summary: FinancialSummary
    expenses: List[Any] = field(default_factory=list)
    revenues: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filters": {"entity": self.filters.entity, "year": self.filters.year},
            "monthly": [
                {"month_name": b.label, "revenue": b.revenue, "expenses": b.expenses}
                for b in self.monthly
            ],
            "revenue_by_vertical": [{"name": v.name, "value": v.value} for v in self.revenue_by_vertical],
            "expenses_by_vertical": [{"name": v.name, "value": v.value} for v in self.expenses_by_vertical],
            "summary": {
                "total_revenue": self.summary.total_revenue,
                "total_expenses": self.summary.total_expenses,
                "total_funding": self.summary.total_funding,
                "available_funds": self.summary.available_funds,
            },
        }


def monthly_series(records: Iterable[Any], year: YearFilter) -> List[MonthlyBucket]:
    """
    Bucket records by month.

    For a concrete year all twelve months are returned (zeros included) and
    records from other years are ignored. For "all" the bucket key is
    (year, month), so January 2024 and January 2025 stay separate, and only
    months that have records appear, in chronological order.
    """
    if year == ALL:
        buckets: Dict[Tuple[int, int], MonthlyBucket] = {}
        for record in records:
            key = (record.date.year, record.date.month)
            if key not in buckets:
                buckets[key] = MonthlyBucket(month=key[1], year=key[0])
            _add_to_bucket(buckets[key], record)
        return [buckets[key] for key in sorted(buckets)]

    months = [MonthlyBucket(month=m) for m in range(1, 13)]
    for record in records:
        if record.date.year != year:
            continue
        _add_to_bucket(months[record.date.month - 1], record)
    return months


def _add_to_bucket(bucket: MonthlyBucket, record: Any) -> None:
    amount = to_decimal(record.amount)
    if _record_type(record) == RecordType.REVENUE:
        bucket.revenue += amount
    else:
        bucket.expenses += amount


def vertical_breakdown(records: Iterable[Any], record_type: RecordType) -> List[VerticalTotal]:
    """Sum amounts of one record type per vertical, largest first"""
    totals: "OrderedDict[str, VerticalTotal]" = OrderedDict()
    for record in records:
        if _record_type(record) != record_type:
            continue
        vertical = Vertical.parse(record_type, record.vertical)
        entry = totals.get(vertical.key)
        if entry is None:
            entry = totals[vertical.key] = VerticalTotal(name=vertical.label, value=ZERO)
        entry.value += to_decimal(record.amount)
    return sorted(totals.values(), key=lambda v: (-v.value, v.name))


def resolve_total_funding(investment_amounts: Iterable[Any], cached_total: Any = None) -> Decimal:
    """
    Total funding shown to the user.

    The sum of investment record amounts is authoritative; the cached
    startup-level figure is used only when that sum is zero.
    """
    total = sum((to_decimal(a) for a in investment_amounts), ZERO)
    if total == ZERO:
        return max(to_decimal(cached_total), ZERO)
    return total


def summarize(records: Iterable[Any], total_funding: Decimal) -> FinancialSummary:
    total_revenue = ZERO
    total_expenses = ZERO
    for record in records:
        if _record_type(record) == RecordType.REVENUE:
            total_revenue += to_decimal(record.amount)
        else:
            total_expenses += to_decimal(record.amount)
    return FinancialSummary(
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        total_funding=total_funding,
    )


def aggregate(
    records: Iterable[Any],
    filters: FinancialFilters,
    investment_amounts: Iterable[Any] = (),
    cached_total_funding: Any = None,
) -> FinancialsSnapshot:
    """
    Run the full aggregation for one filter selection.

    Algorithm:
    1. Keep records matching the entity and year filters
    2. Bucket them by month (composite year-month key for "all")
    3. Sum revenue and expenses per vertical from the same filtered set
    4. Reconcile total funding and derive available funds
    """
    selected = [r for r in records if filters.matches(r)]
    total_funding = resolve_total_funding(investment_amounts, cached_total_funding)

    return FinancialsSnapshot(
        filters=filters,
        monthly=monthly_series(selected, filters.year),
        revenue_by_vertical=vertical_breakdown(selected, RecordType.REVENUE),
        expenses_by_vertical=vertical_breakdown(selected, RecordType.EXPENSE),
        summary=summarize(selected, total_funding),
        expenses=[r for r in selected if _record_type(r) == RecordType.EXPENSE],
        revenues=[r for r in selected if _record_type(r) == RecordType.REVENUE],
    )


def available_years(
    registration_date: Optional[date],
    record_dates: Iterable[date],
    today: Optional[date] = None,
) -> List[YearFilter]:
    """
    Year options for the filter: "all", then current year down to the
    registration year. Without a registration date the earliest record year
    is used; without records only the current year is offered.
    """
    current_year = (today or date.today()).year
    if registration_date is not None:
        start_year = registration_date.year
    else:
        dates = list(record_dates)
        start_year = min(dates).year if dates else current_year

    options: List[YearFilter] = [ALL]
    options.extend(range(current_year, min(start_year, current_year) - 1, -1))
    return options

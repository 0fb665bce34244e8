"""
Reports Service Module

Builds the time-bucketed farm reports (sales, finance, feed, health,
breeding) and the herd inventory snapshot. Records in the requested window
are fetched as plain values and bucketed in Python with `bucket_key`, so
every report labels periods identically and orders them chronologically.
Reports are read-only and recomputed on every call.
"""

import datetime
import logging
import math
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ...core.config import DUE_SOON_DAYS
from ..breeding.models import BreedingRecord
from ..feed.models import FeedRecord
from ..health.models import HealthRecord
from ..herd.models import Goat
from ..sales.models import SaleItem
from .exceptions import InvalidReportParameterError
from .merge import outer_join_by_period
from .periods import DateRange as Window, bucket_key, period_sort_key
from .schemas import (
    BREEDING_REPORT_TYPES,
    AgeBucketCount,
    BreedingReport,
    BreedingRow,
    BreedingTotals,
    DateRange,
    FeedFilters,
    FeedReport,
    FeedRow,
    FeedTotals,
    FinanceReport,
    FinanceRow,
    FinanceTotals,
    HealthReport,
    HealthRow,
    HealthTotals,
    InventoryFilters,
    InventoryReport,
    SalesReport,
    SalesRow,
    SalesTotals,
    StatusCount,
)

logger = logging.getLogger(__name__)

AGE_BUCKETS = (
    (0, 1, "0-1 year"),
    (1, 3, "1-3 years"),
    (3, 5, "3-5 years"),
    (5, 8, "5-8 years"),
    (8, 100, "8+ years"),
)
UNKNOWN_AGE_BUCKET = "Unknown"
DAYS_PER_YEAR = 365.25

BREEDING_TYPE_COLUMNS: Dict[str, Sequence[str]] = {
    "matings": ("matings",),
    "pregnancies": ("pregnancies",),
    "kiddings": ("kiddings", "kids_born", "kids_survived", "avg_litter_size"),
    "all": ("matings", "pregnancies", "kiddings", "kids_born", "kids_survived", "avg_litter_size"),
}

Metric = Callable[[Dict[str, Any]], float]


def _bucket(
    records: Iterable[Dict[str, Any]], date_field: str, group: str, metrics: Dict[str, Metric]
) -> List[Dict[str, Any]]:
    """Sums each metric per period of `date_field`, chronologically ordered."""
    key = bucket_key(group)
    buckets: Dict[str, Dict[str, Any]] = {}
    for record in records:
        period = key(record[date_field])
        row = buckets.setdefault(period, {"period": period, **{name: 0 for name in metrics}})
        for name, metric in metrics.items():
            row[name] += metric(record)
    return [buckets[p] for p in sorted(buckets, key=period_sort_key)]


def _column_totals(rows: List[Dict[str, Any]], columns: Sequence[str]) -> Dict[str, Any]:
    return {column: sum(row[column] for row in rows) for column in columns}


def _count(record: Dict[str, Any]) -> int:
    return 1


def _value_or_zero(field: str) -> Metric:
    return lambda record: record[field] or 0


def _avg_litter_size(kids_born: float, kiddings: float) -> float:
    return kids_born / kiddings if kiddings else 0.0


async def _revenue_items(window: Window, buyer: Optional[str] = None) -> List[Dict[str, Any]]:
    query = SaleItem.filter(sale__date__gte=window[0], sale__date__lte=window[1])
    if buyer:
        query = query.filter(sale__buyer_name__icontains=buyer)
    return await query.values("sale__invoice_number", "sale__date", "goat_id", "quantity", "total")


async def sales_report(window: Window, group: str, buyer: Optional[str] = None) -> SalesReport:
    """
    Sales per period: distinct invoices, goats sold and line-item revenue.

    Args:
        window: The (start, end) range, inclusive, on the sale date.
        group: ``day``, ``week`` or ``month``.
        buyer: Case-insensitive substring of the buyer name.

    Returns:
        SalesReport with one summary row per period that had sales, and
        totals equal to the column sums of those rows.
    """
    items = await _revenue_items(window, buyer)

    key = bucket_key(group)
    buckets: Dict[str, Dict[str, Any]] = {}
    for item in items:
        period = key(item["sale__date"])
        bucket = buckets.setdefault(period, {"invoices": set(), "goat_quantity": 0, "revenue": 0.0})
        bucket["invoices"].add(item["sale__invoice_number"])
        if item["goat_id"] is not None:
            bucket["goat_quantity"] += item["quantity"] or 1
        bucket["revenue"] += item["total"] or 0

    rows = [
        {
            "period": period,
            "invoices_count": len(buckets[period]["invoices"]),
            "goat_quantity": buckets[period]["goat_quantity"],
            "revenue": buckets[period]["revenue"],
        }
        for period in sorted(buckets, key=period_sort_key)
    ]
    totals = _column_totals(rows, ("invoices_count", "goat_quantity", "revenue"))
    return SalesReport(
        range=DateRange(start=window[0], end=window[1]),
        group=group,
        summary=[SalesRow(**row) for row in rows],
        totals=SalesTotals(**totals),
    )


async def finance_report(window: Window, group: str) -> FinanceReport:
    """
    Revenue against costs per period.

    Revenue comes from sale line items, costs from feed, health and breeding
    records (breeding and veterinary cost, on the mating date). A period
    that appears in any series gets a row; series without data for it
    contribute 0. ``total_cost`` is the sum of the three costs and ``net``
    is revenue minus ``total_cost``.
    """
    start, end = window
    sale_items = await _revenue_items(window)
    feed = await FeedRecord.filter(date__gte=start, date__lte=end).values("date", "cost")
    health = await HealthRecord.filter(date__gte=start, date__lte=end).values("date", "cost")
    breeding = await BreedingRecord.filter(mating_date__gte=start, mating_date__lte=end).values(
        "mating_date", "breeding_cost", "veterinary_cost"
    )

    merged = outer_join_by_period(
        [
            _bucket(sale_items, "sale__date", group, {"revenue": _value_or_zero("total")}),
            _bucket(feed, "date", group, {"feed_cost": _value_or_zero("cost")}),
            _bucket(health, "date", group, {"health_cost": _value_or_zero("cost")}),
            _bucket(
                breeding,
                "mating_date",
                group,
                {"breeding_cost": lambda r: (r["breeding_cost"] or 0) + (r["veterinary_cost"] or 0)},
            ),
        ],
        ("revenue", "feed_cost", "health_cost", "breeding_cost"),
    )
    for row in merged:
        row["total_cost"] = row["feed_cost"] + row["health_cost"] + row["breeding_cost"]
        row["net"] = row["revenue"] - row["total_cost"]

    totals = _column_totals(
        merged, ("revenue", "feed_cost", "health_cost", "breeding_cost", "total_cost", "net")
    )
    return FinanceReport(
        range=DateRange(start=start, end=end),
        group=group,
        summary=[FinanceRow(**row) for row in merged],
        totals=FinanceTotals(**totals),
    )


async def feed_report(
    window: Window, group: str, feed_type: Optional[str] = None, unit: Optional[str] = None
) -> FeedReport:
    query = FeedRecord.filter(date__gte=window[0], date__lte=window[1])
    if feed_type:
        query = query.filter(feed_type=feed_type)
    if unit:
        query = query.filter(unit=unit)
    records = await query.values("date", "quantity", "cost")

    rows = _bucket(
        records,
        "date",
        group,
        {
            "records": _count,
            "total_quantity": _value_or_zero("quantity"),
            "total_cost": _value_or_zero("cost"),
        },
    )
    totals = _column_totals(rows, ("records", "total_quantity", "total_cost"))
    return FeedReport(
        range=DateRange(start=window[0], end=window[1]),
        group=group,
        filters=FeedFilters(feed_type=feed_type or None, unit=unit or None),
        summary=[FeedRow(**row) for row in rows],
        totals=FeedTotals(**totals),
    )


async def health_report(
    window: Window, group: str, record_type: Optional[str], now: datetime.datetime
) -> HealthReport:
    """
    Health records and their cost per period, plus follow-up counters.

    `record_type` of None or ``All`` means every type. The overdue and
    upcoming counters look at ``next_due_date`` across all health records,
    independent of the window and the type filter: overdue is before `now`,
    upcoming within ``DUE_SOON_DAYS`` from `now`.
    """
    record_type = record_type or "All"
    query = HealthRecord.filter(date__gte=window[0], date__lte=window[1])
    if record_type != "All":
        query = query.filter(type=record_type)
    records = await query.values("date", "cost")

    rows = _bucket(records, "date", group, {"records": _count, "total_cost": _value_or_zero("cost")})
    totals = _column_totals(rows, ("records", "total_cost"))

    horizon = now + datetime.timedelta(days=DUE_SOON_DAYS)
    overdue_count = await HealthRecord.filter(next_due_date__lt=now).count()
    upcoming_count = await HealthRecord.filter(next_due_date__gte=now, next_due_date__lte=horizon).count()

    return HealthReport(
        range=DateRange(start=window[0], end=window[1]),
        group=group,
        type=record_type,
        summary=[HealthRow(**row) for row in rows],
        totals=HealthTotals(**totals),
        overdue_count=overdue_count,
        upcoming_count=upcoming_count,
    )


def normalize_breeding_type(
    report_type: Optional[str], allowed: Sequence[str] = BREEDING_REPORT_TYPES, default: str = "all"
) -> str:
    if report_type is None or not report_type.strip():
        return default
    normalized = report_type.strip().lower()
    if normalized not in allowed:
        raise InvalidReportParameterError(
            f"Unsupported breeding type '{report_type}', expected one of: {', '.join(allowed)}"
        )
    return normalized


async def breeding_report(window: Window, group: str, report_type: Optional[str] = None) -> BreedingReport:
    """
    Breeding activity per period.

    Matings are bucketed on the mating date, confirmed pregnancies on the
    confirmation date and kiddings on the kidding date, each restricted to
    the window. `report_type` (``matings``, ``pregnancies``, ``kiddings`` or
    ``all``) selects which series are computed; rows and totals then only
    carry that type's columns. ``avg_litter_size`` is kids born per kidding,
    0 without kiddings, and is recomputed for the totals rather than summed.

    Raises:
        InvalidReportParameterError: For an unknown `report_type`.
    """
    report_type = normalize_breeding_type(report_type)
    start, end = window
    series = []

    if report_type in ("matings", "all"):
        matings = await BreedingRecord.filter(mating_date__gte=start, mating_date__lte=end).values("mating_date")
        series.append(_bucket(matings, "mating_date", group, {"matings": _count}))

    if report_type in ("pregnancies", "all"):
        pregnancies = await BreedingRecord.filter(
            pregnancy_confirmed=True, confirmation_date__gte=start, confirmation_date__lte=end
        ).values("confirmation_date")
        series.append(_bucket(pregnancies, "confirmation_date", group, {"pregnancies": _count}))

    if report_type in ("kiddings", "all"):
        kiddings = await BreedingRecord.filter(kidding_date__gte=start, kidding_date__lte=end).values(
            "kidding_date", "kids_born", "kids_survived"
        )
        series.append(
            _bucket(
                kiddings,
                "kidding_date",
                group,
                {
                    "kiddings": _count,
                    "kids_born": _value_or_zero("kids_born"),
                    "kids_survived": _value_or_zero("kids_survived"),
                },
            )
        )

    counted = ("matings", "pregnancies", "kiddings", "kids_born", "kids_survived")
    merged = outer_join_by_period(series, counted)
    for row in merged:
        row["avg_litter_size"] = _avg_litter_size(row["kids_born"], row["kiddings"])
    totals = _column_totals(merged, counted)
    totals["avg_litter_size"] = _avg_litter_size(totals["kids_born"], totals["kiddings"])

    columns = BREEDING_TYPE_COLUMNS[report_type]
    return BreedingReport(
        range=DateRange(start=start, end=end),
        group=group,
        type=report_type,
        summary=[BreedingRow(period=row["period"], **{c: row[c] for c in columns}) for row in merged],
        totals=BreedingTotals(**{c: totals[c] for c in columns}),
    )


def age_bucket(date_of_birth: Optional[datetime.date], now: datetime.datetime) -> str:
    if date_of_birth is None:
        return UNKNOWN_AGE_BUCKET
    born = datetime.datetime.combine(date_of_birth, datetime.time.min)
    age_years = math.floor((now - born).total_seconds() / (DAYS_PER_YEAR * 86400))
    for lower, upper, label in AGE_BUCKETS:
        if lower <= age_years < upper:
            return label
    return UNKNOWN_AGE_BUCKET


async def inventory_report(
    now: datetime.datetime, breed: Optional[str] = None, gender: Optional[str] = None
) -> InventoryReport:
    """
    Snapshot of the herd: head count per status and an age histogram.

    Status counts are sorted by status name. Age buckets follow the
    ``0-1 year`` .. ``8+ years`` order with ``Unknown`` last; buckets with
    no goats are left out.
    """
    filters = {}
    if breed:
        filters["breed"] = breed
    if gender:
        filters["gender"] = gender
    goats = await Goat.filter(**filters).values("status", "date_of_birth")

    statuses = Counter(goat["status"] or "Unknown" for goat in goats)
    ages = Counter(age_bucket(goat["date_of_birth"], now) for goat in goats)
    age_order = [label for _, _, label in AGE_BUCKETS] + [UNKNOWN_AGE_BUCKET]

    return InventoryReport(
        filters=InventoryFilters(breed=breed or None, gender=gender or None),
        total_goats=len(goats),
        status_counts=[StatusCount(status=s, count=statuses[s]) for s in sorted(statuses)],
        age_buckets=[AgeBucketCount(bucket=label, count=ages[label]) for label in age_order if ages[label]],
    )

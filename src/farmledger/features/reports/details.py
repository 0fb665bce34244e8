"""
Drill-down listings behind a single report bucket.

Each fetcher takes a bucket label as produced by the summary reports, maps it
back to its date range and returns the raw records in it, newest first.
"""

from typing import Optional, Union

from ...core.config import REPORT_DETAILS_DEFAULT_LIMIT, REPORT_DETAILS_MAX_LIMIT
from ..breeding.models import BreedingRecord
from ..feed.models import FeedRecord
from ..health.models import HealthRecord
from ..sales.models import Sale
from .exceptions import InvalidReportParameterError
from .periods import period_to_date_range
from .schemas import (
    BREEDING_DETAIL_TYPES,
    BreedingDetailRow,
    BreedingDetails,
    FeedDetailRow,
    FeedDetails,
    FeedFilters,
    GoatRef,
    HealthDetailFilters,
    HealthDetailRow,
    HealthDetails,
    Pagination,
    SaleDetailRow,
    SalesDetails,
)
from .service import normalize_breeding_type


# Date field each breeding detail type is bucketed on
BREEDING_DATE_FIELDS = {
    "matings": "mating_date",
    "pregnancies": "confirmation_date",
    "kiddings": "kidding_date",
}


def _parse_int(name: str, value: Union[int, str, None]) -> Optional[int]:
    if value is None or isinstance(value, int):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise InvalidReportParameterError(f"Invalid {name} '{value}', expected an integer")


def clamp_limit(limit: Union[int, str, None]) -> int:
    limit = _parse_int("limit", limit)
    if limit is None:
        return REPORT_DETAILS_DEFAULT_LIMIT
    return max(1, min(limit, REPORT_DETAILS_MAX_LIMIT))


def clamp_page(page: Union[int, str, None]) -> int:
    return max(_parse_int("page", page) or 1, 1)


def _goat_ref(goat) -> Optional[GoatRef]:
    if goat is None:
        return None
    return GoatRef(public_id=goat.public_id, tag_number=goat.tag_number, name=goat.name)


async def sales_details(
    period: Optional[str],
    group: str,
    buyer: Optional[str] = None,
    page: Union[int, str, None] = None,
    limit: Union[int, str, None] = None,
) -> SalesDetails:
    """One row per sale in the bucket, with item count, goats sold and item total."""
    start, end = period_to_date_range(period, group)
    page, limit = clamp_page(page), clamp_limit(limit)

    query = Sale.filter(date__gte=start, date__lte=end)
    if buyer:
        query = query.filter(buyer_name__icontains=buyer)
    sales = (
        await query.order_by("-date", "-id")
        .offset((page - 1) * limit)
        .limit(limit)
        .prefetch_related("items")
    )

    rows = []
    for sale in sales:
        items = list(sale.items)
        rows.append(SaleDetailRow(
            invoice_number=sale.invoice_number,
            date=sale.date,
            buyer_name=sale.buyer_name,
            items_count=len(items),
            goat_quantity=sum(item.quantity or 1 for item in items if item.goat_id is not None),
            total_amount=sum(item.total or 0 for item in items),
        ))
    return SalesDetails(
        period=period, group=group, pagination=Pagination(page=page, limit=limit), rows=rows
    )


async def feed_details(
    period: Optional[str],
    group: str,
    feed_type: Optional[str] = None,
    unit: Optional[str] = None,
    page: Union[int, str, None] = None,
    limit: Union[int, str, None] = None,
) -> FeedDetails:
    start, end = period_to_date_range(period, group)
    page, limit = clamp_page(page), clamp_limit(limit)

    query = FeedRecord.filter(date__gte=start, date__lte=end)
    if feed_type:
        query = query.filter(feed_type=feed_type)
    if unit:
        query = query.filter(unit=unit)
    records = (
        await query.order_by("-date", "-id")
        .offset((page - 1) * limit)
        .limit(limit)
        .prefetch_related("goat")
    )

    rows = [
        FeedDetailRow(
            public_id=r.public_id,
            date=r.date,
            goat=_goat_ref(r.goat if r.goat_id else None),
            pen=r.pen,
            feed_type=r.feed_type,
            unit=r.unit,
            quantity=r.quantity,
            cost=r.cost,
            supplier=r.supplier,
            notes=r.notes,
        )
        for r in records
    ]
    return FeedDetails(
        period=period,
        group=group,
        filters=FeedFilters(feed_type=feed_type or None, unit=unit or None),
        pagination=Pagination(page=page, limit=limit),
        rows=rows,
    )


async def health_details(
    period: Optional[str],
    group: str,
    record_type: Optional[str] = None,
    page: Union[int, str, None] = None,
    limit: Union[int, str, None] = None,
) -> HealthDetails:
    start, end = period_to_date_range(period, group)
    page, limit = clamp_page(page), clamp_limit(limit)
    if record_type == "All":
        record_type = None

    query = HealthRecord.filter(date__gte=start, date__lte=end)
    if record_type:
        query = query.filter(type=record_type)
    records = (
        await query.order_by("-date", "-id")
        .offset((page - 1) * limit)
        .limit(limit)
        .prefetch_related("goat")
    )

    rows = [
        HealthDetailRow(
            public_id=r.public_id,
            date=r.date,
            goat=_goat_ref(r.goat),
            type=r.type,
            description=r.description,
            cost=r.cost,
            veterinarian=r.veterinarian,
            next_due_date=r.next_due_date,
        )
        for r in records
    ]
    return HealthDetails(
        period=period,
        group=group,
        filters=HealthDetailFilters(type=record_type or "All"),
        pagination=Pagination(page=page, limit=limit),
        rows=rows,
    )


async def breeding_details(
    period: Optional[str],
    group: str,
    detail_type: Optional[str] = None,
    page: Union[int, str, None] = None,
    limit: Union[int, str, None] = None,
) -> BreedingDetails:
    """
    Breeding records in the bucket for one activity type.

    ``matings`` (default) filters on the mating date, ``pregnancies`` on the
    confirmation date of confirmed pregnancies and ``kiddings`` on the
    kidding date; rows are sorted on that same date, newest first.
    """
    detail_type = normalize_breeding_type(detail_type, BREEDING_DETAIL_TYPES, default="matings")
    start, end = period_to_date_range(period, group)
    page, limit = clamp_page(page), clamp_limit(limit)

    date_field = BREEDING_DATE_FIELDS[detail_type]
    filters = {f"{date_field}__gte": start, f"{date_field}__lte": end}
    if detail_type == "pregnancies":
        filters["pregnancy_confirmed"] = True
    records = (
        await BreedingRecord.filter(**filters)
        .order_by(f"-{date_field}", "-id")
        .offset((page - 1) * limit)
        .limit(limit)
        .prefetch_related("doe", "buck")
    )

    rows = [
        BreedingDetailRow(
            public_id=r.public_id,
            doe=_goat_ref(r.doe),
            buck=_goat_ref(r.buck),
            mating_date=r.mating_date,
            confirmation_date=r.confirmation_date,
            kidding_date=r.kidding_date,
            kids_born=r.kids_born,
            kids_survived=r.kids_survived,
            status=r.status,
            breeding_method=r.breeding_method,
            breeding_cost=r.breeding_cost,
            veterinary_cost=r.veterinary_cost,
        )
        for r in records
    ]
    return BreedingDetails(
        period=period,
        group=group,
        type=detail_type,
        pagination=Pagination(page=page, limit=limit),
        rows=rows,
    )

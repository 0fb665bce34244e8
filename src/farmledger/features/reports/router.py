import logging
import time
from typing import Annotated, Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..auth.security import get_current_active_user
from ...common.dates import Clock, get_clock
from . import details as report_details
from . import service as report_service
from .csv_export import build_csv
from .exceptions import InvalidReportParameterError, ReportError, ReportFailedError
from .periods import normalize_group, resolve_date_range
from .schemas import (
    BREEDING_CSV_COLUMNS,
    FEED_CSV_COLUMNS,
    FINANCE_CSV_COLUMNS,
    HEALTH_CSV_COLUMNS,
    INVENTORY_CSV_COLUMNS,
    SALES_CSV_COLUMNS,
    BreedingDetails,
    BreedingReport,
    FeedDetails,
    FeedReport,
    FinanceReport,
    HealthDetails,
    HealthReport,
    InventoryReport,
    SalesDetails,
    SalesReport,
)

logger = logging.getLogger(__name__)

REPORT_FORMATS = ("json", "csv")

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(get_current_active_user)],
    responses={400: {"description": "Invalid report parameters"}},
)


def _normalize_format(report_format: Optional[str]) -> str:
    normalized = (report_format or "json").strip().lower()
    if normalized not in REPORT_FORMATS:
        raise InvalidReportParameterError(
            f"Unsupported format '{report_format}', expected one of: {', '.join(REPORT_FORMATS)}"
        )
    return normalized


async def _timed(name: str, build: Callable[[], Awaitable[Any]]) -> Any:
    """
    Runs a report builder, logging its duration and filling in ``elapsed_ms``.

    Parameter errors propagate unchanged (400); anything else is logged and
    surfaced as ReportFailedError (500).
    """
    started = time.perf_counter()
    try:
        result = await build()
    except ReportError:
        raise
    except Exception as e:
        logger.error(f"/reports/{name} failed: {e}", exc_info=True)
        raise ReportFailedError(f"Failed to generate {name} report") from e
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logger.info(f"/reports/{name} -> {elapsed_ms}ms")
    if hasattr(result, "elapsed_ms"):
        result.elapsed_ms = elapsed_ms
    return result


def _csv_response(rows: Iterable[Dict[str, Any]], headers: Sequence[str], filename: str) -> Response:
    return Response(
        content=build_csv(rows, headers),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _dump_rows(rows: Iterable[Any]) -> List[Dict[str, Any]]:
    return [row.model_dump(by_alias=True) for row in rows]


@router.get("/sales", response_model=SalesReport)
async def get_sales_report(
    clock: Annotated[Clock, Depends(get_clock)],
    start: Optional[str] = Query(None, description="ISO 8601 date or datetime"),
    end: Optional[str] = Query(None, description="ISO 8601 date or datetime"),
    group: Optional[str] = Query("day", description="day, week or month"),
    buyer: Optional[str] = Query(None, description="Buyer name contains (case-insensitive)"),
    report_format: Optional[str] = Query("json", alias="format"),
):
    report_format = _normalize_format(report_format)
    group = normalize_group(group)
    window = resolve_date_range(start, end, clock())
    report = await _timed("sales", lambda: report_service.sales_report(window, group, buyer=(buyer or "").strip()))
    if report_format == "csv":
        return _csv_response(_dump_rows(report.summary), SALES_CSV_COLUMNS, f"sales-report-{group}.csv")
    return report


@router.get("/finance", response_model=FinanceReport)
async def get_finance_report(
    clock: Annotated[Clock, Depends(get_clock)],
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    group: Optional[str] = Query("day"),
    report_format: Optional[str] = Query("json", alias="format"),
):
    report_format = _normalize_format(report_format)
    group = normalize_group(group)
    window = resolve_date_range(start, end, clock())
    report = await _timed("finance", lambda: report_service.finance_report(window, group))
    if report_format == "csv":
        return _csv_response(_dump_rows(report.summary), FINANCE_CSV_COLUMNS, f"finance-report-{group}.csv")
    return report


@router.get("/feed", response_model=FeedReport)
async def get_feed_report(
    clock: Annotated[Clock, Depends(get_clock)],
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    group: Optional[str] = Query("day"),
    feed_type: Optional[str] = Query(None, alias="feedType"),
    unit: Optional[str] = Query(None),
    report_format: Optional[str] = Query("json", alias="format"),
):
    report_format = _normalize_format(report_format)
    group = normalize_group(group)
    window = resolve_date_range(start, end, clock())
    feed_type = (feed_type or "").strip() or None
    unit = (unit or "").strip() or None
    report = await _timed(
        "feed", lambda: report_service.feed_report(window, group, feed_type=feed_type, unit=unit)
    )
    if report_format == "csv":
        return _csv_response(_dump_rows(report.summary), FEED_CSV_COLUMNS, f"feed-report-{group}.csv")
    return report


@router.get("/health", response_model=HealthReport)
async def get_health_report(
    clock: Annotated[Clock, Depends(get_clock)],
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    group: Optional[str] = Query("day"),
    record_type: Optional[str] = Query("All", alias="type", description="Health record type or All"),
    report_format: Optional[str] = Query("json", alias="format"),
):
    report_format = _normalize_format(report_format)
    group = normalize_group(group)
    now = clock()
    window = resolve_date_range(start, end, now)
    report = await _timed(
        "health", lambda: report_service.health_report(window, group, record_type, now)
    )
    if report_format == "csv":
        return _csv_response(_dump_rows(report.summary), HEALTH_CSV_COLUMNS, f"health-report-{group}.csv")
    return report


@router.get("/breeding", response_model=BreedingReport, response_model_exclude_none=True)
async def get_breeding_report(
    clock: Annotated[Clock, Depends(get_clock)],
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    group: Optional[str] = Query("day"),
    report_type: Optional[str] = Query("all", alias="type", description="matings, pregnancies, kiddings or all"),
    report_format: Optional[str] = Query("json", alias="format"),
):
    report_format = _normalize_format(report_format)
    group = normalize_group(group)
    report_type = report_service.normalize_breeding_type(report_type)
    window = resolve_date_range(start, end, clock())
    report = await _timed("breeding", lambda: report_service.breeding_report(window, group, report_type))
    if report_format == "csv":
        return _csv_response(
            _dump_rows(report.summary),
            BREEDING_CSV_COLUMNS[report_type],
            f"breeding-report-{group}-{report_type}.csv",
        )
    return report


@router.get("/inventory", response_model=InventoryReport)
async def get_inventory_report(
    clock: Annotated[Clock, Depends(get_clock)],
    breed: Optional[str] = Query(None),
    gender: Optional[str] = Query(None),
    report_format: Optional[str] = Query("json", alias="format"),
):
    report_format = _normalize_format(report_format)
    report = await _timed(
        "inventory", lambda: report_service.inventory_report(clock(), breed=breed, gender=gender)
    )
    if report_format == "csv":
        rows = [{"category": "status", "label": s.status, "count": s.count} for s in report.status_counts]
        rows += [{"category": "age_bucket", "label": a.bucket, "count": a.count} for a in report.age_buckets]
        return _csv_response(rows, INVENTORY_CSV_COLUMNS, "inventory-report.csv")
    return report


@router.get("/sales/details", response_model=SalesDetails)
async def get_sales_details(
    period: Optional[str] = Query(None, description="Bucket label, e.g. 2024-03-05, 2024-W9 or 2024-03"),
    group: Optional[str] = Query("day"),
    buyer: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="Rows per page, default 500, at most 1000"),
):
    group = normalize_group(group)
    return await _timed(
        "sales/details",
        lambda: report_details.sales_details(period, group, buyer=(buyer or "").strip(), page=page, limit=limit),
    )


@router.get("/feed/details", response_model=FeedDetails)
async def get_feed_details(
    period: Optional[str] = Query(None),
    group: Optional[str] = Query("day"),
    feed_type: Optional[str] = Query(None, alias="feedType"),
    unit: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    group = normalize_group(group)
    return await _timed(
        "feed/details",
        lambda: report_details.feed_details(
            period,
            group,
            feed_type=(feed_type or "").strip() or None,
            unit=(unit or "").strip() or None,
            page=page,
            limit=limit,
        ),
    )


@router.get("/health/details", response_model=HealthDetails)
async def get_health_details(
    period: Optional[str] = Query(None),
    group: Optional[str] = Query("day"),
    record_type: Optional[str] = Query(None, alias="type"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    group = normalize_group(group)
    return await _timed(
        "health/details",
        lambda: report_details.health_details(period, group, record_type=record_type, page=page, limit=limit),
    )


@router.get("/breeding/details", response_model=BreedingDetails)
async def get_breeding_details(
    period: Optional[str] = Query(None),
    group: Optional[str] = Query("day"),
    detail_type: Optional[str] = Query(None, alias="type", description="matings, pregnancies or kiddings"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    group = normalize_group(group)
    return await _timed(
        "breeding/details",
        lambda: report_details.breeding_details(period, group, detail_type=detail_type, page=page, limit=limit),
    )

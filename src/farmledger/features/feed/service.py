import datetime
import logging
from typing import Optional

from fastapi import HTTPException, status

from ...common.dates import as_naive_utc, utc_now
from ..auth.models import User as AuthUser
from ..herd.models import Goat
from ..herd.schemas import GoatSummary
from .models import FeedRecord
from .schemas import (
    FeedRecordCreate,
    FeedRecordUpdate,
    FeedRecordResponse,
    PaginatedFeedRecordResponse,
)

logger = logging.getLogger(__name__)


def _to_feed_response(record: FeedRecord) -> FeedRecordResponse:
    """Converts a FeedRecord to its response schema; `goat` must be fetched."""
    goat = record.goat if record.goat_id else None
    return FeedRecordResponse(
        public_id=record.public_id,
        goat=GoatSummary.model_validate(goat) if goat else None,
        pen=record.pen,
        date=record.date,
        feed_type=record.feed_type,
        quantity=record.quantity,
        unit=record.unit,
        cost=record.cost,
        supplier=record.supplier,
        notes=record.notes,
        feeding_time=record.feeding_time,
        consumed=record.consumed,
        waste=record.waste,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


async def _resolve_goat(goat_public_id: Optional[str]) -> Optional[Goat]:
    if not goat_public_id:
        return None
    goat = await Goat.get_or_none(public_id=goat_public_id)
    if not goat:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Goat {goat_public_id} not found",
        )
    return goat


async def get_feed_record_or_404(record_public_id: str) -> FeedRecord:
    record = await FeedRecord.get_or_none(public_id=record_public_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feed record not found")
    return record


async def create_feed_record(
    record_in: FeedRecordCreate, current_user: AuthUser, now: Optional[datetime.datetime] = None
) -> FeedRecordResponse:
    data = record_in.model_dump(exclude={"goat_public_id", "date"})
    goat = await _resolve_goat(record_in.goat_public_id)
    record = await FeedRecord.create(
        **data,
        goat=goat,
        date=as_naive_utc(record_in.date) or now or utc_now(),
        created_by=current_user,
    )
    await record.fetch_related("goat")
    logger.info(f"Recorded feed {record.public_id}: {record}")
    return _to_feed_response(record)


async def list_feed_records(
    page: int,
    size: int,
    goat_public_id: Optional[str] = None,
    feed_type: Optional[str] = None,
    start: Optional[datetime.datetime] = None,
    end: Optional[datetime.datetime] = None,
) -> PaginatedFeedRecordResponse:
    """
    Lists feed records, newest first.

    Args:
        page: The page number.
        size: The number of records per page.
        goat_public_id: Only records for this goat.
        feed_type: Only records of this feed type.
        start: Only records dated on or after this instant.
        end: Only records dated on or before this instant.

    Returns:
        A paginated list of feed records.
    """
    offset = (page - 1) * size
    query = FeedRecord.all()
    if goat_public_id:
        query = query.filter(goat__public_id=goat_public_id)
    if feed_type:
        query = query.filter(feed_type=feed_type)
    if start:
        query = query.filter(date__gte=as_naive_utc(start))
    if end:
        query = query.filter(date__lte=as_naive_utc(end))

    total = await query.count()
    records = await query.order_by("-date").offset(offset).limit(size).prefetch_related("goat")
    return PaginatedFeedRecordResponse(
        items=[_to_feed_response(r) for r in records], total=total, page=page, size=size
    )


async def get_feed_record(record_public_id: str) -> FeedRecordResponse:
    record = await get_feed_record_or_404(record_public_id)
    await record.fetch_related("goat")
    return _to_feed_response(record)


async def update_feed_record(record_public_id: str, record_in: FeedRecordUpdate) -> FeedRecordResponse:
    record = await get_feed_record_or_404(record_public_id)
    update_data = record_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields for update")

    if "goat_public_id" in update_data:
        record.goat = await _resolve_goat(update_data.pop("goat_public_id"))
    if "date" in update_data:
        update_data["date"] = as_naive_utc(update_data["date"]) or record.date
    for key, value in update_data.items():
        setattr(record, key, value)
    await record.save()
    await record.fetch_related("goat")
    return _to_feed_response(record)


async def delete_feed_record(record_public_id: str):
    record = await get_feed_record_or_404(record_public_id)
    await record.delete()
    logger.info(f"Deleted feed record {record_public_id}")
    return None

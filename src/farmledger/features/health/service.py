import datetime
import logging
from typing import Optional

from fastapi import HTTPException, status

from ...common.dates import as_naive_utc, utc_now
from ...core.config import DUE_SOON_DAYS
from ..auth.models import User as AuthUser
from ..herd.models import Goat
from ..herd.schemas import GoatSummary
from .models import HealthRecord
from .schemas import (
    DueHealthRecordsResponse,
    HealthRecordCreate,
    HealthRecordUpdate,
    HealthRecordResponse,
    PaginatedHealthRecordResponse,
)

logger = logging.getLogger(__name__)


def _to_health_response(record: HealthRecord) -> HealthRecordResponse:
    return HealthRecordResponse(
        public_id=record.public_id,
        goat=GoatSummary.model_validate(record.goat),
        date=record.date,
        type=record.type,
        description=record.description,
        veterinarian=record.veterinarian,
        cost=record.cost,
        next_due_date=record.next_due_date,
        notes=record.notes,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


async def _get_goat_or_404(goat_public_id: str) -> Goat:
    goat = await Goat.get_or_none(public_id=goat_public_id)
    if not goat:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Goat {goat_public_id} not found",
        )
    return goat


async def get_health_record_or_404(record_public_id: str) -> HealthRecord:
    record = await HealthRecord.get_or_none(public_id=record_public_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Health record not found")
    return record


async def create_health_record(
    record_in: HealthRecordCreate, current_user: AuthUser, now: Optional[datetime.datetime] = None
) -> HealthRecordResponse:
    goat = await _get_goat_or_404(record_in.goat_public_id)
    data = record_in.model_dump(exclude={"goat_public_id", "date", "next_due_date"})
    record = await HealthRecord.create(
        **data,
        goat=goat,
        date=as_naive_utc(record_in.date) or now or utc_now(),
        next_due_date=as_naive_utc(record_in.next_due_date),
        created_by=current_user,
    )
    await record.fetch_related("goat")
    logger.info(f"Recorded {record.type} for goat {goat.tag_number}")
    return _to_health_response(record)


async def list_health_records(
    page: int,
    size: int,
    goat_public_id: Optional[str] = None,
    record_type: Optional[str] = None,
    start: Optional[datetime.datetime] = None,
    end: Optional[datetime.datetime] = None,
) -> PaginatedHealthRecordResponse:
    offset = (page - 1) * size
    query = HealthRecord.all()
    if goat_public_id:
        query = query.filter(goat__public_id=goat_public_id)
    if record_type:
        query = query.filter(type=record_type)
    if start:
        query = query.filter(date__gte=as_naive_utc(start))
    if end:
        query = query.filter(date__lte=as_naive_utc(end))

    total = await query.count()
    records = await query.order_by("-date").offset(offset).limit(size).prefetch_related("goat")
    return PaginatedHealthRecordResponse(
        items=[_to_health_response(r) for r in records], total=total, page=page, size=size
    )


async def list_due_health_records(
    now: datetime.datetime, window_days: int = DUE_SOON_DAYS
) -> DueHealthRecordsResponse:
    """
    Health records whose follow-up is overdue or falls due within
    `window_days` of `now`, each list soonest first.
    """
    horizon = now + datetime.timedelta(days=window_days)
    overdue = (
        await HealthRecord.filter(next_due_date__lt=now)
        .order_by("next_due_date")
        .prefetch_related("goat")
    )
    upcoming = (
        await HealthRecord.filter(next_due_date__gte=now, next_due_date__lte=horizon)
        .order_by("next_due_date")
        .prefetch_related("goat")
    )
    return DueHealthRecordsResponse(
        overdue=[_to_health_response(r) for r in overdue],
        upcoming=[_to_health_response(r) for r in upcoming],
        window_days=window_days,
    )


async def get_health_record(record_public_id: str) -> HealthRecordResponse:
    record = await get_health_record_or_404(record_public_id)
    await record.fetch_related("goat")
    return _to_health_response(record)


async def update_health_record(
    record_public_id: str, record_in: HealthRecordUpdate
) -> HealthRecordResponse:
    record = await get_health_record_or_404(record_public_id)
    update_data = record_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields for update")

    goat_public_id = update_data.pop("goat_public_id", None)
    if goat_public_id:
        record.goat = await _get_goat_or_404(goat_public_id)
    if update_data.get("date") is not None:
        update_data["date"] = as_naive_utc(update_data["date"])
    else:
        update_data.pop("date", None)
    if "next_due_date" in update_data:
        update_data["next_due_date"] = as_naive_utc(update_data["next_due_date"])
    for key, value in update_data.items():
        setattr(record, key, value)
    await record.save()
    await record.fetch_related("goat")
    return _to_health_response(record)


async def delete_health_record(record_public_id: str):
    record = await get_health_record_or_404(record_public_id)
    await record.delete()
    logger.info(f"Deleted health record {record_public_id}")
    return None

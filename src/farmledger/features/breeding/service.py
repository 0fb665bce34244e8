"""
Breeding Service Module

Matings, pregnancy confirmation and kidding. The doe carries a denormalised
copy of her current pregnancy (is_pregnant, due_date, last_breeding, sire)
that is kept in step with her breeding records here.
"""

import datetime
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from tortoise.transactions import in_transaction

from ...common.dates import as_naive_utc
from ...core.config import GESTATION_DAYS
from ..auth.models import User as AuthUser
from ..herd.models import Goat
from ..herd.schemas import GoatSummary
from .models import BreedingRecord, PREGNANT_STATUSES
from .schemas import (
    BreedingRecordCreate,
    BreedingRecordUpdate,
    BreedingRecordResponse,
    PaginatedBreedingRecordResponse,
)

logger = logging.getLogger(__name__)

UPCOMING_KIDDINGS_LIMIT = 20


def expected_due_date(mating_date: datetime.datetime) -> datetime.datetime:
    return mating_date + datetime.timedelta(days=GESTATION_DAYS)


def _to_breeding_response(record: BreedingRecord) -> BreedingRecordResponse:
    """Expects `doe` and `buck` to be fetched."""
    return BreedingRecordResponse(
        public_id=record.public_id,
        doe=GoatSummary.model_validate(record.doe),
        buck=GoatSummary.model_validate(record.buck),
        mating_date=record.mating_date,
        expected_due_date=record.expected_due_date,
        pregnancy_confirmed=record.pregnancy_confirmed,
        confirmation_date=record.confirmation_date,
        kidding_date=record.kidding_date,
        kids_born=record.kids_born,
        kids_survived=record.kids_survived,
        breeding_method=record.breeding_method,
        breeding_cost=record.breeding_cost,
        veterinary_cost=record.veterinary_cost,
        status=record.status,
        notes=record.notes,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


async def get_breeding_record_or_404(record_public_id: str) -> BreedingRecord:
    record = await BreedingRecord.get_or_none(public_id=record_public_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Breeding record not found")
    return record


async def create_breeding_record(
    record_in: BreedingRecordCreate, current_user: AuthUser
) -> BreedingRecordResponse:
    """
    Records a mating and flags the doe as pregnant.

    Args:
        record_in: Doe, buck and mating details.
        current_user: The user recording the mating.

    Returns:
        The created breeding record.
    """
    doe = await Goat.get_or_none(public_id=record_in.doe_public_id)
    buck = await Goat.get_or_none(public_id=record_in.buck_public_id)
    if not doe or not buck:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doe or buck not found")
    if doe.gender != "Female":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Doe must be female")
    if buck.gender != "Male":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Buck must be male")

    mating_date = as_naive_utc(record_in.mating_date)
    due = expected_due_date(mating_date)
    data = record_in.model_dump(exclude={"doe_public_id", "buck_public_id", "mating_date", "confirmation_date"})

    async with in_transaction() as conn:
        record = await BreedingRecord.create(
            **data,
            doe=doe,
            buck=buck,
            mating_date=mating_date,
            expected_due_date=due,
            confirmation_date=as_naive_utc(record_in.confirmation_date),
            created_by=current_user,
            using_db=conn,
        )
        await Goat.filter(id=doe.id).using_db(conn).update(
            is_pregnant=True, due_date=due, last_breeding=mating_date, sire_id=buck.id
        )

    await record.fetch_related("doe", "buck")
    logger.info(f"Recorded mating of {doe.tag_number} x {buck.tag_number}, due {due:%Y-%m-%d}")
    return _to_breeding_response(record)


async def list_breeding_records(
    page: int,
    size: int,
    doe_public_id: Optional[str] = None,
    buck_public_id: Optional[str] = None,
    record_status: Optional[str] = None,
    start: Optional[datetime.datetime] = None,
    end: Optional[datetime.datetime] = None,
) -> PaginatedBreedingRecordResponse:
    offset = (page - 1) * size
    query = BreedingRecord.all()
    if doe_public_id:
        query = query.filter(doe__public_id=doe_public_id)
    if buck_public_id:
        query = query.filter(buck__public_id=buck_public_id)
    if record_status:
        query = query.filter(status=record_status)
    if start:
        query = query.filter(mating_date__gte=as_naive_utc(start))
    if end:
        query = query.filter(mating_date__lte=as_naive_utc(end))

    total = await query.count()
    records = (
        await query.order_by("-mating_date").offset(offset).limit(size).prefetch_related("doe", "buck")
    )
    return PaginatedBreedingRecordResponse(
        items=[_to_breeding_response(r) for r in records], total=total, page=page, size=size
    )


async def list_upcoming_kiddings(now: datetime.datetime) -> List[BreedingRecordResponse]:
    records = (
        await BreedingRecord.filter(status__in=PREGNANT_STATUSES, expected_due_date__gte=now)
        .order_by("expected_due_date")
        .limit(UPCOMING_KIDDINGS_LIMIT)
        .prefetch_related("doe", "buck")
    )
    return [_to_breeding_response(r) for r in records]


async def get_breeding_record(record_public_id: str) -> BreedingRecordResponse:
    record = await get_breeding_record_or_404(record_public_id)
    await record.fetch_related("doe", "buck")
    return _to_breeding_response(record)


async def update_breeding_record(
    record_public_id: str, record_in: BreedingRecordUpdate
) -> BreedingRecordResponse:
    record = await get_breeding_record_or_404(record_public_id)
    update_data = record_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields for update")

    for key in ("confirmation_date", "kidding_date"):
        if key in update_data:
            update_data[key] = as_naive_utc(update_data[key])

    async with in_transaction() as conn:
        for key, value in update_data.items():
            setattr(record, key, value)
        await record.save(using_db=conn)

        # Kidding closes the pregnancy
        if record.kidding_date is not None and record.status == "completed":
            await Goat.filter(id=record.doe_id).using_db(conn).update(is_pregnant=False, due_date=None)

    await record.fetch_related("doe", "buck")
    return _to_breeding_response(record)


async def delete_breeding_record(record_public_id: str):
    record = await get_breeding_record_or_404(record_public_id)
    async with in_transaction() as conn:
        await Goat.filter(id=record.doe_id).using_db(conn).update(
            is_pregnant=False, due_date=None, last_breeding=None, sire_id=None
        )
        await record.delete(using_db=conn)
    logger.info(f"Deleted breeding record {record_public_id}")
    return None

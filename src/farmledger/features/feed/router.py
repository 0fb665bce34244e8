"""API routes for feed records."""
from fastapi import APIRouter, Depends, Query, status
from typing import Annotated, Optional
import datetime

from ..auth.models import User as AuthUser
from ..auth.security import (
    get_current_active_user,
    get_current_editor_user,
    get_current_manager_user,
)
from ...common.dates import Clock, get_clock
from .schemas import (
    FeedRecordCreate,
    FeedRecordUpdate,
    FeedRecordResponse,
    PaginatedFeedRecordResponse,
    FeedType,
)
from . import service

router = APIRouter(
    prefix="/feed",
    tags=["Feed"],
    dependencies=[Depends(get_current_active_user)],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=FeedRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_feed_record(
    record_in: FeedRecordCreate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
    clock: Annotated[Clock, Depends(get_clock)],
):
    return await service.create_feed_record(record_in, current_user, now=clock())


@router.get("/", response_model=PaginatedFeedRecordResponse)
async def list_feed_records(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    goat: Optional[str] = Query(None, description="Goat public ID"),
    feed_type: Optional[FeedType] = Query(None, alias="feedType"),
    start: Optional[datetime.datetime] = Query(None),
    end: Optional[datetime.datetime] = Query(None),
):
    return await service.list_feed_records(
        page, size, goat_public_id=goat, feed_type=feed_type, start=start, end=end
    )


@router.get("/{record_public_id}", response_model=FeedRecordResponse)
async def get_feed_record(record_public_id: str):
    return await service.get_feed_record(record_public_id)


@router.put("/{record_public_id}", response_model=FeedRecordResponse)
async def update_feed_record(
    record_public_id: str,
    record_in: FeedRecordUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
):
    return await service.update_feed_record(record_public_id, record_in)


@router.delete("/{record_public_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feed_record(
    record_public_id: str,
    current_manager: Annotated[AuthUser, Depends(get_current_manager_user)],
):
    await service.delete_feed_record(record_public_id)
    return None

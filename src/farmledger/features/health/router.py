"""API routes for health records and follow-up treatments."""
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
    DueHealthRecordsResponse,
    HealthRecordCreate,
    HealthRecordUpdate,
    HealthRecordResponse,
    PaginatedHealthRecordResponse,
    HealthType,
)
from . import service

router = APIRouter(
    prefix="/health",
    tags=["Health"],
    dependencies=[Depends(get_current_active_user)],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=HealthRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_health_record(
    record_in: HealthRecordCreate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
    clock: Annotated[Clock, Depends(get_clock)],
):
    return await service.create_health_record(record_in, current_user, now=clock())


@router.get("/", response_model=PaginatedHealthRecordResponse)
async def list_health_records(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    goat: Optional[str] = Query(None, description="Goat public ID"),
    record_type: Optional[HealthType] = Query(None, alias="type"),
    start: Optional[datetime.datetime] = Query(None),
    end: Optional[datetime.datetime] = Query(None),
):
    return await service.list_health_records(
        page, size, goat_public_id=goat, record_type=record_type, start=start, end=end
    )


@router.get("/due", response_model=DueHealthRecordsResponse, summary="Overdue and upcoming treatments")
async def list_due_health_records(clock: Annotated[Clock, Depends(get_clock)]):
    return await service.list_due_health_records(clock())


@router.get("/{record_public_id}", response_model=HealthRecordResponse)
async def get_health_record(record_public_id: str):
    return await service.get_health_record(record_public_id)


@router.put("/{record_public_id}", response_model=HealthRecordResponse)
async def update_health_record(
    record_public_id: str,
    record_in: HealthRecordUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
):
    return await service.update_health_record(record_public_id, record_in)


@router.delete("/{record_public_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_health_record(
    record_public_id: str,
    current_manager: Annotated[AuthUser, Depends(get_current_manager_user)],
):
    await service.delete_health_record(record_public_id)
    return None

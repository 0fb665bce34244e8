"""API routes for breeding records."""
from fastapi import APIRouter, Depends, Query, status
from typing import Annotated, List, Optional
import datetime

from ..auth.models import User as AuthUser
from ..auth.security import (
    get_current_active_user,
    get_current_editor_user,
    get_current_manager_user,
)
from ...common.dates import Clock, get_clock
from .schemas import (
    BreedingRecordCreate,
    BreedingRecordUpdate,
    BreedingRecordResponse,
    PaginatedBreedingRecordResponse,
    BreedingStatus,
)
from . import service

router = APIRouter(
    prefix="/breeding",
    tags=["Breeding"],
    dependencies=[Depends(get_current_active_user)],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=BreedingRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_breeding_record(
    record_in: BreedingRecordCreate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
):
    return await service.create_breeding_record(record_in, current_user)


@router.get("/", response_model=PaginatedBreedingRecordResponse)
async def list_breeding_records(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    doe: Optional[str] = Query(None, description="Doe public ID"),
    buck: Optional[str] = Query(None, description="Buck public ID"),
    record_status: Optional[BreedingStatus] = Query(None, alias="status"),
    start: Optional[datetime.datetime] = Query(None, description="Mated on or after"),
    end: Optional[datetime.datetime] = Query(None, description="Mated on or before"),
):
    return await service.list_breeding_records(
        page, size, doe_public_id=doe, buck_public_id=buck, record_status=record_status, start=start, end=end
    )


@router.get("/upcoming", response_model=List[BreedingRecordResponse], summary="Upcoming kiddings")
async def list_upcoming_kiddings(clock: Annotated[Clock, Depends(get_clock)]):
    return await service.list_upcoming_kiddings(clock())


@router.get("/{record_public_id}", response_model=BreedingRecordResponse)
async def get_breeding_record(record_public_id: str):
    return await service.get_breeding_record(record_public_id)


@router.put("/{record_public_id}", response_model=BreedingRecordResponse)
async def update_breeding_record(
    record_public_id: str,
    record_in: BreedingRecordUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
):
    return await service.update_breeding_record(record_public_id, record_in)


@router.delete("/{record_public_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_breeding_record(
    record_public_id: str,
    current_manager: Annotated[AuthUser, Depends(get_current_manager_user)],
):
    await service.delete_breeding_record(record_public_id)
    return None

"""API routes for the goat herd register."""
from fastapi import APIRouter, status, Query, Depends
from typing import Optional, List, Annotated

from .schemas import (
    GoatCreate,
    GoatUpdate,
    GoatResponse,
    PaginatedGoatResponse,
    Breed,
    Gender,
    GoatStatus,
)
from . import service

from ..auth.models import User as AuthUser
from ..auth.security import (
    get_current_active_user,
    get_current_editor_user,
    get_current_manager_user,
)

router = APIRouter(
    prefix="/goats",
    tags=["Herd"],
    dependencies=[Depends(get_current_active_user)],
    responses={404: {"description": "Not found"}},
)


@router.get("/breeds", response_model=List[str], summary="List supported breeds")
async def list_breeds():
    return service.list_breeds()


@router.post(
    "/",
    response_model=GoatResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a goat",
)
async def create_goat(
    goat_in: GoatCreate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
):
    return await service.create_goat(goat_in)


@router.get("/", response_model=PaginatedGoatResponse, summary="List goats")
async def list_goats(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Number of goats per page"),
    breed: Optional[Breed] = Query(None),
    gender: Optional[Gender] = Query(None),
    goat_status: Optional[GoatStatus] = Query(None, alias="status"),
):
    return await service.list_goats(page, size, breed=breed, gender=gender, goat_status=goat_status)


@router.get("/{goat_public_id}", response_model=GoatResponse, summary="Get a goat")
async def get_goat(goat_public_id: str):
    return await service.get_goat(goat_public_id)


@router.put("/{goat_public_id}", response_model=GoatResponse, summary="Update a goat")
async def update_goat(
    goat_public_id: str,
    goat_in: GoatUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
):
    return await service.update_goat(goat_public_id, goat_in)


@router.delete(
    "/{goat_public_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a goat from the register",
)
async def delete_goat(
    goat_public_id: str,
    current_manager: Annotated[AuthUser, Depends(get_current_manager_user)],
):
    await service.delete_goat(goat_public_id)
    return None

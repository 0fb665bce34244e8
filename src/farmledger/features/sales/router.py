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
from .schemas import SaleCreate, SaleUpdate, SaleResponse, PaginatedSaleResponse
from . import service

router = APIRouter(
    prefix="/sales",
    tags=["Sales"],
    dependencies=[Depends(get_current_active_user)],
)


@router.post("/", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_in: SaleCreate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
    clock: Annotated[Clock, Depends(get_clock)],
):
    return await service.create_sale(sale_in, current_user, now=clock())


@router.get("/", response_model=PaginatedSaleResponse)
async def list_sales(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    start: Optional[datetime.datetime] = Query(None, description="Only sales on or after this instant"),
    end: Optional[datetime.datetime] = Query(None, description="Only sales on or before this instant"),
):
    return await service.list_sales(page, size, start=start, end=end)


@router.get("/{sale_public_id}", response_model=SaleResponse)
async def get_sale(sale_public_id: str):
    return await service.get_sale(sale_public_id)


@router.put("/{sale_public_id}", response_model=SaleResponse)
async def update_sale(
    sale_public_id: str,
    sale_in: SaleUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_editor_user)],
):
    return await service.update_sale(sale_public_id, sale_in)


@router.delete("/{sale_public_id}")
async def delete_sale(
    sale_public_id: str,
    current_manager: Annotated[AuthUser, Depends(get_current_manager_user)],
):
    return await service.delete_sale(sale_public_id)

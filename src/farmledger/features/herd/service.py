import logging
from typing import Optional, List, get_args
from fastapi import HTTPException, status
from tortoise.exceptions import IntegrityError
from .models import Goat
from .schemas import (
    Breed,
    GoatCreate,
    GoatUpdate,
    GoatResponse,
    PaginatedGoatResponse,
)

logger = logging.getLogger(__name__)


def _to_goat_response(goat: Goat) -> GoatResponse:
    """Converts a Goat model instance to a GoatResponse schema.

    The sire relation must be fetched beforehand.
    """
    sire = goat.sire if goat.sire_id else None
    return GoatResponse(
        public_id=goat.public_id,
        tag_number=goat.tag_number,
        name=goat.name,
        breed=goat.breed,
        gender=goat.gender,
        date_of_birth=goat.date_of_birth,
        color=goat.color,
        pen=goat.pen,
        notes=goat.notes,
        status=goat.status,
        sale_price=goat.sale_price,
        sale_date=goat.sale_date,
        is_pregnant=goat.is_pregnant,
        due_date=goat.due_date,
        last_breeding=goat.last_breeding,
        sire_public_id=sire.public_id if sire else None,
        created_at=goat.created_at,
        updated_at=goat.updated_at,
    )


async def get_goat_or_404(goat_public_id: str) -> Goat:
    goat = await Goat.get_or_none(public_id=goat_public_id)
    if not goat:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Goat {goat_public_id} not found",
        )
    return goat


async def create_goat(goat_in: GoatCreate) -> GoatResponse:
    """
    Registers a new goat in the herd.

    Args:
        goat_in: The data for the new goat.

    Returns:
        The created goat.
    """
    if await Goat.filter(tag_number=goat_in.tag_number).exists():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tag number '{goat_in.tag_number}' is already in use.",
        )
    try:
        goat = await Goat.create(**goat_in.model_dump())
    except IntegrityError as e:
        logger.error(f"Error creating goat: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tag number '{goat_in.tag_number}' is already in use.",
        )
    await goat.fetch_related("sire")
    logger.info(f"Registered goat {goat.tag_number} ({goat.public_id})")
    return _to_goat_response(goat)


async def list_goats(
    page: int,
    size: int,
    breed: Optional[str] = None,
    gender: Optional[str] = None,
    goat_status: Optional[str] = None,
) -> PaginatedGoatResponse:
    """
    Lists goats ordered by tag number, optionally filtered.

    Args:
        page: The page number.
        size: The number of goats per page.
        breed: Only goats of this breed.
        gender: Only goats of this gender.
        goat_status: Only goats with this status.

    Returns:
        A paginated list of goats.
    """
    offset = (page - 1) * size
    filters = {}
    if breed:
        filters["breed"] = breed
    if gender:
        filters["gender"] = gender
    if goat_status:
        filters["status"] = goat_status

    goats = (
        await Goat.filter(**filters)
        .prefetch_related("sire")
        .order_by("tag_number")
        .offset(offset)
        .limit(size)
    )
    total = await Goat.filter(**filters).count()
    return PaginatedGoatResponse(
        items=[_to_goat_response(g) for g in goats], total=total, page=page, size=size
    )


async def get_goat(goat_public_id: str) -> GoatResponse:
    goat = await get_goat_or_404(goat_public_id)
    await goat.fetch_related("sire")
    return _to_goat_response(goat)


async def update_goat(goat_public_id: str, goat_in: GoatUpdate) -> GoatResponse:
    """
    Updates a goat's details.

    Args:
        goat_public_id: The public ID of the goat to update.
        goat_in: The fields to change.

    Returns:
        The updated goat.
    """
    goat = await get_goat_or_404(goat_public_id)

    update_data = goat_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No fields for update"
        )
    new_tag = update_data.get("tag_number")
    if new_tag and new_tag != goat.tag_number:
        if await Goat.filter(tag_number=new_tag).exists():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Tag number '{new_tag}' is already in use.",
            )

    for key, value in update_data.items():
        setattr(goat, key, value)
    await goat.save()
    await goat.fetch_related("sire")
    return _to_goat_response(goat)


async def _history_kinds(goat: Goat) -> List[str]:
    """Names the kinds of records that still reference the goat."""
    kinds = []
    if await goat.sale_items.all().exists():
        kinds.append("sales")
    if await goat.health_records.all().exists():
        kinds.append("health records")
    if await goat.breedings_as_doe.all().exists() or await goat.breedings_as_buck.all().exists():
        kinds.append("breeding records")
    return kinds


async def delete_goat(goat_public_id: str):
    """
    Deletes a goat that has no history.

    Sales, health and breeding records keep their goat so past reports do not
    change; a goat referenced by any of them is refused with 409.
    """
    goat = await get_goat_or_404(goat_public_id)
    kinds = await _history_kinds(goat)
    if kinds:
        referenced_by = ", ".join(kinds)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Goat {goat.tag_number} is referenced by {referenced_by} and cannot be deleted.",
        )
    try:
        await goat.delete()
    except IntegrityError as e:
        logger.error(f"Error deleting goat {goat_public_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Goat {goat.tag_number} is still referenced and cannot be deleted.",
        )
    logger.info(f"Deleted goat {goat.tag_number} ({goat_public_id})")
    return None


def list_breeds() -> List[str]:
    return list(get_args(Breed))

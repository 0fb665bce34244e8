"""
Sales Service Module

Invoice creation and maintenance. A sale moves every goat it lists from
Active to Sold; deleting the sale, or dropping a goat from its items, puts
the goat back to Active.
"""

import datetime
import logging
from typing import Dict, List, Optional, Set

from fastapi import HTTPException, status
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from ...common.dates import as_naive_utc, utc_now
from ..auth.models import User as AuthUser
from ..herd.models import Goat
from ..herd.schemas import GoatSummary
from .models import Sale, SaleItem
from .schemas import (
    Buyer,
    PaginatedSaleResponse,
    SaleCreate,
    SaleItemCreate,
    SaleItemResponse,
    SaleResponse,
    SaleUpdate,
)

logger = logging.getLogger(__name__)

INVOICE_ATTEMPTS = 5


def compute_totals(item_totals: List[float], tax_rate: float) -> Dict[str, float]:
    sub_total = sum(item_totals)
    tax_amount = round(sub_total * (tax_rate or 0), 2)
    total_amount = round(sub_total + tax_amount, 2)
    return {"sub_total": sub_total, "tax_amount": tax_amount, "total_amount": total_amount}


async def _normalize_items(
    items: List[SaleItemCreate], sale_id: Optional[int] = None, using_db=None
) -> List[dict]:
    """
    Validates line items and resolves their goats.

    A goat can only be sold while Active, one head per line, and only once
    per sale. When editing an existing sale (`sale_id`), goats already sold
    on that same sale remain valid.
    """
    normalized = []
    seen_goats: Set[int] = set()
    for item in items:
        goat = None
        description = item.description
        if item.goat_public_id:
            goat = await Goat.get_or_none(public_id=item.goat_public_id, using_db=using_db)
            if not goat:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Goat with ID {item.goat_public_id} not found.",
                )
            already_on_this_sale = sale_id is not None and goat.sale_id == sale_id
            if goat.status != "Active" and not already_on_this_sale:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Goat {goat.tag_number} is not available for sale. Its status is {goat.status}.",
                )
            if item.quantity > 1:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Cannot sell {item.quantity} of goat {goat.tag_number}. Only 1 available in stock.",
                )
            if goat.id in seen_goats:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Goat {goat.tag_number} is listed more than once.",
                )
            seen_goats.add(goat.id)
            if not description:
                description = f"Goat {goat.name} #{goat.tag_number}".strip()

        total = item.total if item.total is not None else item.quantity * item.unit_price
        normalized.append({
            "goat": goat,
            "description": description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "weight_kg": item.weight_kg,
            "total": total,
        })
    return normalized


async def _mark_goats_sold(sale: Sale, items: List[dict], using_db) -> None:
    for item in items:
        goat = item["goat"]
        if goat is None:
            continue
        await Goat.filter(id=goat.id).using_db(using_db).update(
            status="Sold", sale_id=sale.id, sale_price=item["unit_price"], sale_date=sale.date
        )


async def _restore_goats(goat_ids: Set[int], using_db) -> None:
    if not goat_ids:
        return
    await Goat.filter(id__in=list(goat_ids)).using_db(using_db).update(
        status="Active", sale_id=None, sale_price=None, sale_date=None
    )


async def _create_items(sale: Sale, items: List[dict], using_db) -> None:
    for item in items:
        await SaleItem.create(
            sale=sale,
            goat=item["goat"],
            description=item["description"],
            quantity=item["quantity"],
            unit_price=item["unit_price"],
            weight_kg=item["weight_kg"],
            total=item["total"],
            using_db=using_db,
        )


async def _load_sale(sale_id: int) -> SaleResponse:
    sale = await Sale.get(id=sale_id).prefetch_related("items__goat")
    return _to_sale_response(sale)


async def get_sale_or_404(sale_public_id: str) -> Sale:
    sale = await Sale.get_or_none(public_id=sale_public_id)
    if not sale:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    return sale


async def create_sale(
    sale_in: SaleCreate, current_user: AuthUser, now: Optional[datetime.datetime] = None
) -> SaleResponse:
    """
    Records a sale and issues its invoice number.

    The invoice number is computed and inserted inside one transaction. If a
    concurrent request claims the same number first, the unique constraint
    rejects ours and the whole transaction is retried with a fresh number.

    Args:
        sale_in: Buyer, line items and tax rate.
        current_user: The user recording the sale.
        now: Creation time (naive UTC); decides the invoice day.

    Returns:
        The created sale with its line items.
    """
    now = now or utc_now()
    sale_date = as_naive_utc(sale_in.date) or now

    for attempt in range(1, INVOICE_ATTEMPTS + 1):
        try:
            async with in_transaction() as conn:
                items = await _normalize_items(sale_in.items, using_db=conn)
                totals = compute_totals([i["total"] for i in items], sale_in.tax_rate)
                invoice_number = await Sale.generate_next_invoice_number(now.date(), using_db=conn)
                sale = await Sale.create(
                    invoice_number=invoice_number,
                    date=sale_date,
                    buyer_name=sale_in.buyer.name,
                    buyer_phone=sale_in.buyer.phone,
                    buyer_address=sale_in.buyer.address,
                    tax_rate=sale_in.tax_rate,
                    notes=sale_in.notes,
                    created_by=current_user,
                    using_db=conn,
                    **totals,
                )
                await _create_items(sale, items, conn)
                await _mark_goats_sold(sale, items, conn)
        except IntegrityError as e:
            if "invoice_number" not in str(e):
                raise
            logger.warning(f"Invoice number collision on attempt {attempt}: {e}")
            continue
        logger.info(f"Created sale {sale.invoice_number} for {sale.buyer_name} ({sale.total_amount:.2f})")
        return await _load_sale(sale.id)

    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Could not allocate an invoice number, please retry.",
    )


async def list_sales(
    page: int,
    size: int,
    start: Optional[datetime.datetime] = None,
    end: Optional[datetime.datetime] = None,
) -> PaginatedSaleResponse:
    offset = (page - 1) * size
    query = Sale.all()
    if start:
        query = query.filter(date__gte=as_naive_utc(start))
    if end:
        query = query.filter(date__lte=as_naive_utc(end))

    total = await query.count()
    sales = await query.order_by("-date").offset(offset).limit(size).prefetch_related("items__goat")
    return PaginatedSaleResponse(
        items=[_to_sale_response(s) for s in sales], total=total, page=page, size=size
    )


async def get_sale(sale_public_id: str) -> SaleResponse:
    sale = await get_sale_or_404(sale_public_id)
    return await _load_sale(sale.id)


async def update_sale(sale_public_id: str, sale_in: SaleUpdate) -> SaleResponse:
    """
    Updates buyer details, notes, date, tax rate and optionally replaces the
    line items. Totals are recomputed whenever items or the tax rate change.
    """
    sale = await get_sale_or_404(sale_public_id)
    update_data = sale_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields for update")

    async with in_transaction() as conn:
        if sale_in.buyer is not None:
            sale.buyer_name = sale_in.buyer.name
            sale.buyer_phone = sale_in.buyer.phone
            sale.buyer_address = sale_in.buyer.address
        if "notes" in update_data:
            sale.notes = sale_in.notes
        if sale_in.date is not None:
            sale.date = as_naive_utc(sale_in.date)
        if sale_in.tax_rate is not None:
            sale.tax_rate = sale_in.tax_rate

        if sale_in.items is not None:
            old_goat_ids = set(
                await SaleItem.filter(sale_id=sale.id, goat_id__isnull=False)
                .using_db(conn)
                .values_list("goat_id", flat=True)
            )
            items = await _normalize_items(sale_in.items, sale_id=sale.id, using_db=conn)
            new_goat_ids = {i["goat"].id for i in items if i["goat"] is not None}

            await SaleItem.filter(sale_id=sale.id).using_db(conn).delete()
            await _create_items(sale, items, conn)
            await _restore_goats(old_goat_ids - new_goat_ids, conn)
            await _mark_goats_sold(sale, items, conn)
            item_totals = [i["total"] for i in items]
        else:
            item_totals = list(
                await SaleItem.filter(sale_id=sale.id).using_db(conn).values_list("total", flat=True)
            )

        for key, value in compute_totals(item_totals, sale.tax_rate).items():
            setattr(sale, key, value)
        await sale.save(using_db=conn)

    return await _load_sale(sale.id)


async def delete_sale(sale_public_id: str) -> dict:
    sale = await get_sale_or_404(sale_public_id)
    async with in_transaction() as conn:
        goat_ids = set(
            await SaleItem.filter(sale_id=sale.id, goat_id__isnull=False)
            .using_db(conn)
            .values_list("goat_id", flat=True)
        )
        await _restore_goats(goat_ids, conn)
        await SaleItem.filter(sale_id=sale.id).using_db(conn).delete()
        await sale.delete(using_db=conn)
    logger.info(f"Deleted sale {sale.invoice_number}, restored {len(goat_ids)} goat(s) to the herd")
    return {"message": "Sale deleted and inventory restored."}


def _to_sale_response(sale: Sale) -> SaleResponse:
    # Expects items__goat to be prefetched
    items_resp = []
    for item in sale.items:
        goat = item.goat if item.goat_id else None
        items_resp.append(SaleItemResponse(
            goat=GoatSummary.model_validate(goat) if goat else None,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            weight_kg=item.weight_kg,
            total=item.total,
        ))

    return SaleResponse(
        public_id=sale.public_id,
        invoice_number=sale.invoice_number,
        date=sale.date,
        buyer=Buyer(name=sale.buyer_name, phone=sale.buyer_phone, address=sale.buyer_address),
        items=items_resp,
        sub_total=sale.sub_total,
        tax_rate=sale.tax_rate,
        tax_amount=sale.tax_amount,
        total_amount=sale.total_amount,
        notes=sale.notes,
        created_at=sale.created_at,
        updated_at=sale.updated_at,
    )

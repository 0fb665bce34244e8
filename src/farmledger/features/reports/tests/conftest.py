"""Factories writing report source records straight to the database."""

import datetime

import pytest
import pytest_asyncio

from farmledger.features.breeding.models import BreedingRecord
from farmledger.features.breeding.service import expected_due_date
from farmledger.features.feed.models import FeedRecord
from farmledger.features.health.models import HealthRecord
from farmledger.features.sales.models import Sale, SaleItem


def at(day: str, hour: int = 10) -> datetime.datetime:
    return datetime.datetime.fromisoformat(day).replace(hour=hour)


@pytest.fixture
def make_sale():
    """Creates a sale with line items given as (goat or None, quantity, total)."""
    counter = {"n": 0}

    async def _make_sale(day: str, items, buyer: str = "Acme Meats", hour: int = 10) -> Sale:
        counter["n"] += 1
        sale = await Sale.create(
            invoice_number=f"INV-TEST-{counter['n']:04d}",
            date=at(day, hour),
            buyer_name=buyer,
            sub_total=sum(total for _, _, total in items),
            total_amount=sum(total for _, _, total in items),
        )
        for goat, quantity, total in items:
            await SaleItem.create(
                sale=sale,
                goat=goat,
                description=f"Goat #{goat.tag_number}" if goat else "Sundries",
                quantity=quantity,
                unit_price=total / quantity,
                total=total,
            )
        return sale

    return _make_sale


@pytest.fixture
def make_feed():
    async def _make_feed(day: str, cost=None, feed_type="Hay", unit="kg", quantity=10.0, **extra):
        return await FeedRecord.create(
            date=at(day), feed_type=feed_type, unit=unit, quantity=quantity, cost=cost, **extra
        )

    return _make_feed


@pytest.fixture
def make_health():
    async def _make_health(goat, day: str, cost=None, record_type="Vaccination", next_due=None):
        return await HealthRecord.create(
            goat=goat,
            date=at(day),
            type=record_type,
            description=f"{record_type} on {day}",
            cost=cost,
            next_due_date=at(next_due, 0) if next_due else None,
        )

    return _make_health


@pytest.fixture
def make_breeding():
    async def _make_breeding(doe, buck, mating_day: str, **fields):
        mating_date = at(mating_day)
        return await BreedingRecord.create(
            doe=doe, buck=buck, mating_date=mating_date, expected_due_date=expected_due_date(mating_date), **fields
        )

    return _make_breeding


@pytest_asyncio.fixture
async def breeding_pair(make_goat):
    doe = await make_goat("D-001")
    buck = await make_goat("B-001", gender="Male")
    return doe, buck

import datetime

import pytest

from farmledger.cli.main import build_report_csv
from farmledger.features.feed.models import FeedRecord
from farmledger.features.reports.exceptions import InvalidGroupError


@pytest.mark.asyncio
async def test_export_feed_report_as_csv():
    for day, cost in ((2, 10.0), (2, 5.0), (9, 7.25)):
        await FeedRecord.create(
            date=datetime.datetime(2024, 3, day, 8), feed_type="Hay", unit="kg", quantity=1, cost=cost
        )

    csv_text = await build_report_csv("feed", "2024-03-01", "2024-03-31T23:59:59", "week")
    assert csv_text == (
        "period,records,totalQuantity,totalCost\n"
        "2024-W9,2,2,15\n"
        "2024-W10,1,1,7.25\n"
    )


@pytest.mark.asyncio
async def test_export_empty_report_has_header():
    csv_text = await build_report_csv("breeding", "2024-03-01", "2024-03-31", "day")
    assert csv_text == "period,matings,pregnancies,kiddings,kidsBorn,kidsSurvived,avgLitterSize\n"


@pytest.mark.asyncio
async def test_export_rejects_unknown_kind_and_group():
    with pytest.raises(ValueError):
        await build_report_csv("weather", None, None, "day")
    with pytest.raises(InvalidGroupError):
        await build_report_csv("sales", None, None, "year")

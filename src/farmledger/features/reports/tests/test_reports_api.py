import csv
import datetime
import io

import pytest

MARCH = {"start": "2024-03-01T00:00:00", "end": "2024-03-31T23:59:59"}


def at(day, hour=10):
    return datetime.datetime.fromisoformat(day).replace(hour=hour)


@pytest.mark.asyncio
async def test_reports_require_authentication(client):
    response = await client.get("/api/v1/reports/sales")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_sales_report_buckets_by_day(viewer_client, frozen_now, make_goat, make_sale):
    first, second = await make_goat("G-001"), await make_goat("G-002")
    await make_sale("2024-03-05", [(first, 1, 100.0)])
    await make_sale("2024-03-05", [(second, 1, 50.0)], hour=15)
    await make_sale("2024-03-12", [(None, 4, 20.0)])

    response = await viewer_client.get("/api/v1/reports/sales", params={**MARCH, "group": "day"})
    assert response.status_code == 200, response.text
    data = response.json()

    assert data["group"] == "day"
    assert data["range"] == {"start": "2024-03-01T00:00:00", "end": "2024-03-31T23:59:59"}
    assert data["summary"] == [
        {"period": "2024-03-05", "invoicesCount": 2, "goatQuantity": 2, "revenue": 150.0},
        {"period": "2024-03-12", "invoicesCount": 1, "goatQuantity": 0, "revenue": 20.0},
    ]
    assert data["totals"] == {"invoicesCount": 3, "goatQuantity": 2, "revenue": 170.0}
    assert isinstance(data["elapsedMs"], int)


@pytest.mark.asyncio
async def test_sales_report_by_month_and_buyer(viewer_client, frozen_now, make_goat, make_sale):
    goat = await make_goat("G-001")
    await make_sale("2024-03-05", [(goat, 1, 100.0)], buyer="Acme Meats")
    await make_sale("2024-03-20", [(None, 1, 30.0)], buyer="Hillside Dairy")

    response = await viewer_client.get("/api/v1/reports/sales", params={**MARCH, "group": "Month"})
    assert response.json()["summary"] == [
        {"period": "2024-03", "invoicesCount": 2, "goatQuantity": 1, "revenue": 130.0}
    ]

    response = await viewer_client.get("/api/v1/reports/sales", params={**MARCH, "buyer": " acme "})
    assert response.json()["totals"]["revenue"] == 100.0


@pytest.mark.asyncio
async def test_sales_report_weeks_sort_chronologically(viewer_client, frozen_now, make_sale):
    await make_sale("2024-03-05", [(None, 1, 10.0)])
    await make_sale("2024-02-29", [(None, 1, 5.0)])

    response = await viewer_client.get(
        "/api/v1/reports/sales", params={"start": "2024-02-01", "end": "2024-03-31", "group": "week"}
    )
    assert [row["period"] for row in response.json()["summary"]] == ["2024-W9", "2024-W10"]


@pytest.mark.asyncio
async def test_default_window_is_last_thirty_days(viewer_client, frozen_now, make_sale):
    await make_sale("2024-02-10", [(None, 1, 999.0)])
    await make_sale("2024-02-15", [(None, 1, 10.0)], hour=0)
    await make_sale("2024-03-15", [(None, 1, 5.0)], hour=23)

    response = await viewer_client.get("/api/v1/reports/sales")
    data = response.json()
    assert data["range"]["start"] == "2024-02-15T00:00:00"
    assert data["range"]["end"].startswith("2024-03-15T23:59:59")
    assert [row["period"] for row in data["summary"]] == ["2024-02-15", "2024-03-15"]
    assert data["totals"]["revenue"] == 15.0


@pytest.mark.asyncio
async def test_empty_report_has_zero_totals(viewer_client, frozen_now):
    response = await viewer_client.get("/api/v1/reports/feed", params=MARCH)
    data = response.json()
    assert data["summary"] == []
    assert data["totals"] == {"records": 0, "totalQuantity": 0.0, "totalCost": 0.0}


@pytest.mark.asyncio
async def test_finance_report_merges_revenue_and_costs(
    viewer_client, frozen_now, make_goat, make_sale, make_feed, make_health, make_breeding, breeding_pair
):
    doe, buck = breeding_pair
    goat = await make_goat("G-001")
    await make_sale("2024-03-05", [(goat, 1, 100.0)])
    await make_health(goat, "2024-03-05", cost=15.0)
    await make_feed("2024-03-06", cost=30.0)
    await make_feed("2024-03-06", cost=None)
    await make_breeding(doe, buck, "2024-03-07", breeding_cost=40.0, veterinary_cost=10.0)

    response = await viewer_client.get("/api/v1/reports/finance", params=MARCH)
    assert response.status_code == 200, response.text
    data = response.json()

    assert data["summary"] == [
        {"period": "2024-03-05", "revenue": 100.0, "feedCost": 0.0, "healthCost": 15.0,
         "breedingCost": 0.0, "totalCost": 15.0, "net": 85.0},
        {"period": "2024-03-06", "revenue": 0.0, "feedCost": 30.0, "healthCost": 0.0,
         "breedingCost": 0.0, "totalCost": 30.0, "net": -30.0},
        {"period": "2024-03-07", "revenue": 0.0, "feedCost": 0.0, "healthCost": 0.0,
         "breedingCost": 50.0, "totalCost": 50.0, "net": -50.0},
    ]
    totals = data["totals"]
    assert totals["revenue"] == 100.0
    assert totals["totalCost"] == 95.0
    assert totals["net"] == totals["revenue"] - totals["totalCost"]


@pytest.mark.asyncio
async def test_past_figures_survive_an_attempt_to_delete_a_goat(
    viewer_client, manager_client, frozen_now, make_goat, make_sale, make_health
):
    goat = await make_goat("G-001")
    await make_sale("2024-03-05", [(goat, 1, 100.0)])
    await make_health(goat, "2024-03-08", cost=40.0)
    params = {**MARCH, "group": "month"}

    async def snapshot():
        sales = (await viewer_client.get("/api/v1/reports/sales", params=params)).json()
        finance = (await viewer_client.get("/api/v1/reports/finance", params=params)).json()
        return sales["summary"], finance["summary"]

    before = await snapshot()
    assert before[0][0]["goatQuantity"] == 1
    assert before[1][0]["healthCost"] == 40.0
    assert before[1][0]["net"] == 60.0

    response = await manager_client.delete(f"/api/v1/goats/{goat.public_id}")
    assert response.status_code == 409
    assert await snapshot() == before


@pytest.mark.asyncio
async def test_feed_report_filters(viewer_client, frozen_now, make_feed):
    await make_feed("2024-03-02", cost=20.0, quantity=5.0)
    await make_feed("2024-03-02", cost=10.0, quantity=2.5)
    await make_feed("2024-03-02", cost=99.0, feed_type="Grain")
    await make_feed("2024-03-03", cost=7.0, unit="bales")

    response = await viewer_client.get("/api/v1/reports/feed", params={**MARCH, "feedType": "Hay", "unit": "kg"})
    data = response.json()
    assert data["filters"] == {"feedType": "Hay", "unit": "kg"}
    assert data["summary"] == [
        {"period": "2024-03-02", "records": 2, "totalQuantity": 7.5, "totalCost": 30.0}
    ]

    response = await viewer_client.get("/api/v1/reports/feed", params=MARCH)
    data = response.json()
    assert data["filters"] == {"feedType": None, "unit": None}
    assert data["totals"]["records"] == 4


@pytest.mark.asyncio
async def test_health_report_counts_follow_ups(viewer_client, frozen_now, make_goat, make_health):
    goat = await make_goat("G-001")
    await make_health(goat, "2024-03-01", cost=10.0, next_due="2024-03-10")
    await make_health(goat, "2024-03-01", cost=5.0, record_type="Deworming", next_due="2024-04-01")
    # Outside the window, still counted for follow-ups
    await make_health(goat, "2023-12-01", cost=50.0, next_due="2024-01-01")

    response = await viewer_client.get("/api/v1/reports/health", params=MARCH)
    data = response.json()
    assert data["type"] == "All"
    assert data["summary"] == [{"period": "2024-03-01", "records": 2, "totalCost": 15.0}]
    assert data["overdueCount"] == 2
    assert data["upcomingCount"] == 1

    response = await viewer_client.get("/api/v1/reports/health", params={**MARCH, "type": "Deworming"})
    data = response.json()
    assert data["type"] == "Deworming"
    assert data["totals"] == {"records": 1, "totalCost": 5.0}
    assert data["overdueCount"] == 2


@pytest.mark.asyncio
async def test_breeding_report_averages_litter_size(viewer_client, frozen_now, make_breeding, breeding_pair):
    doe, buck = breeding_pair
    await make_breeding(
        doe, buck, "2023-10-01", pregnancy_confirmed=True, confirmation_date=at("2023-11-15"),
        kidding_date=at("2024-03-04"), kids_born=2, kids_survived=2, status="completed",
    )
    await make_breeding(
        doe, buck, "2023-10-05", kidding_date=at("2024-03-04", 18), kids_born=4, kids_survived=3, status="completed"
    )
    await make_breeding(doe, buck, "2024-03-10")

    response = await viewer_client.get("/api/v1/reports/breeding", params=MARCH)
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["type"] == "all"
    assert data["summary"] == [
        {"period": "2024-03-04", "matings": 0, "pregnancies": 0, "kiddings": 2,
         "kidsBorn": 6, "kidsSurvived": 5, "avgLitterSize": 3.0},
        {"period": "2024-03-10", "matings": 1, "pregnancies": 0, "kiddings": 0,
         "kidsBorn": 0, "kidsSurvived": 0, "avgLitterSize": 0.0},
    ]
    assert data["totals"]["avgLitterSize"] == 3.0
    assert data["totals"]["matings"] == 1


@pytest.mark.asyncio
async def test_breeding_report_single_type_only_has_its_columns(
    viewer_client, frozen_now, make_breeding, breeding_pair
):
    doe, buck = breeding_pair
    await make_breeding(doe, buck, "2024-03-10")

    response = await viewer_client.get("/api/v1/reports/breeding", params={**MARCH, "type": "Matings"})
    data = response.json()
    assert data["type"] == "matings"
    assert data["summary"] == [{"period": "2024-03-10", "matings": 1}]
    assert data["totals"] == {"matings": 1}


@pytest.mark.asyncio
async def test_breeding_report_rejects_unknown_type(viewer_client, frozen_now):
    response = await viewer_client.get("/api/v1/reports/breeding", params={"type": "twins"})
    assert response.status_code == 400
    assert "twins" in response.json()["message"]


@pytest.mark.asyncio
async def test_sales_report_as_csv(viewer_client, frozen_now, make_goat, make_sale):
    goat = await make_goat("G-001")
    await make_sale("2024-03-05", [(goat, 1, 100.0)])
    await make_sale("2024-03-05", [(None, 2, 50.5)])

    response = await viewer_client.get("/api/v1/reports/sales", params={**MARCH, "format": "CSV"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="sales-report-day.csv"'
    assert response.text == "period,invoicesCount,goatQuantity,revenue\n2024-03-05,2,1,150.5\n"


@pytest.mark.asyncio
async def test_breeding_csv_uses_type_columns(viewer_client, frozen_now, make_breeding, breeding_pair):
    doe, buck = breeding_pair
    await make_breeding(doe, buck, "2023-10-01", kidding_date=at("2024-03-04"), kids_born=3, kids_survived=3)

    response = await viewer_client.get(
        "/api/v1/reports/breeding", params={**MARCH, "type": "kiddings", "group": "month", "format": "csv"}
    )
    assert response.headers["content-disposition"] == 'attachment; filename="breeding-report-month-kiddings.csv"'
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows == [
        ["period", "kiddings", "kidsBorn", "kidsSurvived", "avgLitterSize"],
        ["2024-03", "1", "3", "3", "3"],
    ]


@pytest.mark.parametrize(
    "params",
    [
        {"format": "xml"},
        {"group": "year"},
        {"start": "2024-03-10", "end": "2024-03-01"},
        {"start": "yesterday"},
    ],
)
@pytest.mark.asyncio
async def test_invalid_parameters_return_message(viewer_client, frozen_now, params):
    response = await viewer_client.get("/api/v1/reports/finance", params=params)
    assert response.status_code == 400
    assert set(response.json()) == {"message"}


@pytest.mark.asyncio
async def test_unexpected_failure_is_reported_as_500(viewer_client, frozen_now, monkeypatch):
    from farmledger.features.reports import service as report_service

    async def broken(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(report_service, "feed_report", broken)
    response = await viewer_client.get("/api/v1/reports/feed")
    assert response.status_code == 500
    assert response.json() == {"message": "Failed to generate feed report"}


@pytest.mark.asyncio
async def test_inventory_report(viewer_client, frozen_now, make_goat):
    await make_goat("G-001", date_of_birth=at("2023-09-01").date())
    await make_goat("G-002", date_of_birth=at("2021-05-01").date(), breed="Nubian")
    await make_goat("G-003", date_of_birth=at("2015-01-01").date(), status="Sold")

    response = await viewer_client.get("/api/v1/reports/inventory")
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["totalGoats"] == 3
    assert data["filters"] == {"breed": None, "gender": None}
    assert data["statusCounts"] == [{"status": "Active", "count": 2}, {"status": "Sold", "count": 1}]
    assert data["ageBuckets"] == [
        {"bucket": "0-1 year", "count": 1},
        {"bucket": "1-3 years", "count": 1},
        {"bucket": "8+ years", "count": 1},
    ]

    response = await viewer_client.get("/api/v1/reports/inventory", params={"breed": "Nubian"})
    assert response.json()["totalGoats"] == 1

    response = await viewer_client.get("/api/v1/reports/inventory", params={"format": "csv"})
    assert response.headers["content-disposition"] == 'attachment; filename="inventory-report.csv"'
    assert response.text.splitlines() == [
        "category,label,count",
        "status,Active,2",
        "status,Sold,1",
        "age_bucket,0-1 year,1",
        "age_bucket,1-3 years,1",
        "age_bucket,8+ years,1",
    ]

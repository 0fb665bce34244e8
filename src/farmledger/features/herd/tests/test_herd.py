import pytest

from farmledger.features.herd.models import Goat

GOAT_PAYLOAD = {
    "tag_number": "G-001",
    "name": "Daisy",
    "breed": "Nubian",
    "gender": "Female",
    "date_of_birth": "2022-04-10",
    "pen": "North",
}


@pytest.mark.asyncio
async def test_create_goat(worker_client):
    response = await worker_client.post("/api/v1/goats/", json=GOAT_PAYLOAD)
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["public_id"]
    assert data["status"] == "Active"
    assert data["is_pregnant"] is False
    assert await Goat.filter(tag_number="G-001").exists()


@pytest.mark.asyncio
async def test_create_goat_duplicate_tag(worker_client, make_goat):
    await make_goat("G-001")
    response = await worker_client.post("/api/v1/goats/", json=GOAT_PAYLOAD)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_goat_unknown_breed(worker_client):
    response = await worker_client.post("/api/v1/goats/", json={**GOAT_PAYLOAD, "breed": "Unicorn"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_viewer_cannot_create_goat(viewer_client):
    response = await viewer_client.post("/api/v1/goats/", json=GOAT_PAYLOAD)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_goats_filters(viewer_client, make_goat):
    await make_goat("G-002", gender="Male")
    await make_goat("G-001")
    await make_goat("G-003", status="Sold")

    response = await viewer_client.get("/api/v1/goats/", params={"gender": "Female"})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [g["tag_number"] for g in data["items"]] == ["G-001", "G-003"]

    response = await viewer_client.get("/api/v1/goats/", params={"status": "Sold"})
    assert [g["tag_number"] for g in response.json()["items"]] == ["G-003"]


@pytest.mark.asyncio
async def test_list_goats_pagination(viewer_client, make_goat):
    for i in range(5):
        await make_goat(f"G-{i:03d}")
    response = await viewer_client.get("/api/v1/goats/", params={"page": 2, "size": 2})
    data = response.json()
    assert data["total"] == 5
    assert [g["tag_number"] for g in data["items"]] == ["G-002", "G-003"]


@pytest.mark.asyncio
async def test_update_goat(worker_client, make_goat):
    goat = await make_goat("G-001")
    response = await worker_client.put(f"/api/v1/goats/{goat.public_id}", json={"pen": "South"})
    assert response.status_code == 200
    assert response.json()["pen"] == "South"


@pytest.mark.asyncio
async def test_update_goat_requires_fields(worker_client, make_goat):
    goat = await make_goat("G-001")
    response = await worker_client.put(f"/api/v1/goats/{goat.public_id}", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_goat_tag_conflict(worker_client, make_goat):
    await make_goat("G-001")
    goat = await make_goat("G-002")
    response = await worker_client.put(f"/api/v1/goats/{goat.public_id}", json={"tag_number": "G-001"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_goat_requires_manager(worker_client, manager_client, make_goat):
    goat = await make_goat("G-001")
    response = await worker_client.delete(f"/api/v1/goats/{goat.public_id}")
    assert response.status_code == 403

    response = await manager_client.delete(f"/api/v1/goats/{goat.public_id}")
    assert response.status_code == 204
    assert not await Goat.filter(id=goat.id).exists()


@pytest.mark.asyncio
async def test_get_missing_goat(viewer_client):
    response = await viewer_client.get("/api/v1/goats/nope")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_breeds(viewer_client):
    response = await viewer_client.get("/api/v1/goats/breeds")
    assert response.status_code == 200
    assert "Boer" in response.json()
    assert "Other" in response.json()


@pytest.mark.asyncio
async def test_goat_with_breeding_history_cannot_be_deleted(manager_client, make_goat):
    doe = await make_goat("D-001")
    buck = await make_goat("B-001", gender="Male")
    await manager_client.post(
        "/api/v1/breeding/",
        json={"doe_public_id": doe.public_id, "buck_public_id": buck.public_id, "mating_date": "2024-03-01T08:00:00"},
    )

    for goat in (doe, buck):
        response = await manager_client.delete(f"/api/v1/goats/{goat.public_id}")
        assert response.status_code == 409
        assert "breeding records" in response.json()["detail"]
        assert await Goat.filter(id=goat.id).exists()

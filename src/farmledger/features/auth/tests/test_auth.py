import pytest
from jose import jwt

from farmledger.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from farmledger.features.auth.models import User
from farmledger.features.auth.security import get_password_hash, verify_password
from farmledger.features.auth import service as auth_service


# test password hashing and verification
def test_password_hashing():
    password = "test_password"
    hashed = get_password_hash(password)
    assert verify_password(password, hashed) is True
    assert verify_password("wrong_password", hashed) is False
    assert hashed != password


def test_password_hash_is_salted():
    hashed1 = get_password_hash("test_password")
    hashed2 = get_password_hash("test_password")
    assert hashed1 != hashed2, "Hashing the same password should yield different hashes"


def test_password_hash_special_characters():
    password = "!@#$%^&*()_+"
    hashed = get_password_hash(password)
    assert verify_password(password, hashed) is True
    assert verify_password("wrong_password", hashed) is False


@pytest.mark.asyncio
async def test_token_carries_username_and_role(client):
    response = await client.post(
        "/api/v1/auth/token", data={"username": "managerfixture", "password": "password123"}
    )
    assert response.status_code == 200, response.text
    payload = jwt.decode(response.json()["access_token"], SECRET_KEY, algorithms=[ALGORITHM])
    assert payload["sub"] == "managerfixture"
    assert payload["role"] == "manager"
    assert response.json()["role"] == "manager"
    assert response.json()["token_type"] == "bearer"
    assert response.json()["expires_in"] == ACCESS_TOKEN_EXPIRE_MINUTES * 60


@pytest.mark.asyncio
async def test_token_rejects_wrong_password(client):
    response = await client.post(
        "/api/v1/auth/token", data={"username": "workerfixture", "password": "nope-nope"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_creates_worker(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"username": "newhand", "email": "newhand@example.com", "password": "longenough1"},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["role"] == "worker"
    assert data["can_edit"] is True
    assert data["can_manage"] is False
    assert data["is_active"] is True
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_register_duplicate_username(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"username": "adminfixture", "email": "other@example.com", "password": "longenough1"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already registered"


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_returns_current_user(viewer_client):
    response = await viewer_client.get("/api/v1/auth/me")
    assert response.status_code == 200
    assert response.json()["username"] == "viewerfixture"
    assert response.json()["role"] == "viewer"
    assert response.json()["can_edit"] is False
    assert response.json()["can_manage"] is False


@pytest.mark.asyncio
async def test_inactive_user_is_rejected(worker_client):
    await User.filter(username="workerfixture").update(is_active=False)
    response = await worker_client.get("/api/v1/auth/me")
    assert response.status_code == 400
    assert response.json()["detail"] == "Inactive user"


@pytest.mark.asyncio
async def test_set_user_role():
    user = await auth_service.set_user_role("workerfixture", "viewer")
    assert user.role == "viewer"
    assert user.can_edit is False

    assert await auth_service.set_user_role("ghost", "viewer") is None
    with pytest.raises(ValueError):
        await auth_service.set_user_role("workerfixture", "owner")

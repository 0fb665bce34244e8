"""
Root conftest for the pytest test suite.

This file contains the main fixtures that are used across the entire test suite.

Each test runs against a fresh, isolated in-memory SQLite database that is
initialised here rather than by the application lifespan. HTTP requests go
through `httpx.AsyncClient` over `ASGITransport`, so handlers run on the same
event loop as the test and its Tortoise connection.

Key Fixtures:
- `initialize_test_db`: (autouse) Creates a fresh DB schema and seeds one user per role.
- `app_for_testing`: The FastAPI app with its production lifespan disabled.
- `frozen_now`: Pins the application clock; reports and defaults read "now" from it.
- `client`: A non-authenticated client.
- `make_goat`: Factory for goats, shared by every feature that references one.
- `admin_client`, `manager_client`, `worker_client`, `viewer_client`: Clients
  authenticated as the seeded user of that role.
"""

import datetime
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from tortoise import Tortoise

from farmledger.common.dates import get_clock
from farmledger.features.auth.models import User
from farmledger.features.auth.security import get_password_hash
from farmledger.features.herd.models import Goat
from farmledger.main import MODEL_MODULES, app as actual_app

TEST_PASSWORD = "password123"
SEEDED_ROLES = ("admin", "manager", "worker", "viewer")
FROZEN_NOW = datetime.datetime(2024, 3, 15, 12, 0, 0)

TEST_DB_CONFIG = {
    "connections": {"default": "sqlite://:memory:"},
    "apps": {
        "models": {
            "models": MODEL_MODULES + ["aerich.models"],
            "default_connection": "default",
        }
    },
    "use_tz": False,
    "timezone": "UTC",
}


def username_for(role: str) -> str:
    return f"{role}fixture"


async def add_user(role: str) -> User:
    return await User.create(
        username=username_for(role),
        email=f"{role}fixture@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=role,
    )


@pytest_asyncio.fixture(scope="function", autouse=True)
async def initialize_test_db() -> AsyncGenerator[None, None]:
    """
    Initializes the database for each test function.

    Creates a fresh in-memory database and schema for each test, seeds one
    user per role and tears everything down afterwards.
    """
    await Tortoise.init(config=TEST_DB_CONFIG)
    await Tortoise.generate_schemas()
    for role in SEEDED_ROLES:
        await add_user(role)

    yield

    await Tortoise.close_connections()


@pytest.fixture(scope="function")
def app_for_testing() -> Generator[FastAPI, Any, None]:
    """
    Provides the FastAPI application with its production lifespan manager
    disabled so the test DB fixture owns the database connection.
    """
    original_lifespan = actual_app.router.lifespan_context

    @asynccontextmanager
    async def dummy_lifespan(app: FastAPI):
        yield

    actual_app.router.lifespan_context = dummy_lifespan

    yield actual_app

    actual_app.router.lifespan_context = original_lifespan
    actual_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def frozen_now(app_for_testing: FastAPI) -> datetime.datetime:
    """Pins the clock used by handlers to FROZEN_NOW (naive UTC)."""
    app_for_testing.dependency_overrides[get_clock] = lambda: (lambda: FROZEN_NOW)
    return FROZEN_NOW


@asynccontextmanager
async def _client_for(app: FastAPI, role: str = None) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        if role is not None:
            username = username_for(role)
            response = await ac.post(
                "/api/v1/auth/token", data={"username": username, "password": TEST_PASSWORD}
            )
            if response.status_code != 200:
                raise Exception(f"Authentication failed for {username}: {response.text}")
            ac.headers["Authorization"] = f"Bearer {response.json()['access_token']}"
        yield ac


@pytest_asyncio.fixture(scope="function")
async def client(app_for_testing: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with _client_for(app_for_testing) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def admin_client(app_for_testing: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with _client_for(app_for_testing, "admin") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def manager_client(app_for_testing: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with _client_for(app_for_testing, "manager") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def worker_client(app_for_testing: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with _client_for(app_for_testing, "worker") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def viewer_client(app_for_testing: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with _client_for(app_for_testing, "viewer") as ac:
        yield ac


@pytest.fixture
def make_goat():
    """Factory creating goats directly in the database."""
    async def _make_goat(tag_number: str, **overrides) -> Goat:
        data = {
            "tag_number": tag_number,
            "name": f"Goat {tag_number}",
            "breed": "Boer",
            "gender": "Female",
            "date_of_birth": datetime.date(2021, 5, 1),
        }
        data.update(overrides)
        return await Goat.create(**data)

    return _make_goat

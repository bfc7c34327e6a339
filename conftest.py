"""
Root conftest for the pytest test suite.

Fixtures shared across features. Database-backed tests get a fresh
in-memory SQLite database per test through ``initialize_test_db``; tests of
the report logic itself use the in-memory store from the statistics
feature's conftest and need no database at all.

Key Fixtures:
- `initialize_test_db`: Creates a fresh DB schema for the test.
- `shop` / `other_shop`: Two shops, to check statistics never leak between tenants.
- `shop_owner`: An active shop owner linked to `shop`.
- `app_for_testing`: The FastAPI application, with dependency overrides reset afterwards.
- `client`: An httpx AsyncClient talking to the app in-process.
- `shop_owner_headers`: Bearer auth headers for `shop_owner`.
"""

from typing import Any, AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from tortoise import Tortoise

from shop_stats.features.auth.models import User
from shop_stats.features.auth.security import create_access_token, get_password_hash
from shop_stats.features.shops.models import Shop
from shop_stats.main import MODEL_MODULES, app as actual_app


SHOP_OWNER_PASSWORD = "ownerpassword123"


def get_auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(scope="function")
async def initialize_test_db() -> AsyncGenerator[None, None]:
    """
    Initializes a fresh in-memory database for one test function.
    """
    test_db_config = {
        "connections": {"default": "sqlite://:memory:"},
        "apps": {
            "models": {
                "models": MODEL_MODULES + ["aerich.models"],
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }
    await Tortoise.init(config=test_db_config)
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def shop(initialize_test_db) -> Shop:
    return await Shop.create(name="Atelier Fixture", avg_rating=4.5, count_rating=12)


@pytest_asyncio.fixture
async def other_shop(initialize_test_db) -> Shop:
    return await Shop.create(name="Competitor Fixture", avg_rating=3.0, count_rating=2)


@pytest_asyncio.fixture
async def shop_owner(shop: Shop) -> User:
    return await User.create(
        username="shopownerfixture",
        email="shopowner@example.com",
        hashed_password=get_password_hash(SHOP_OWNER_PASSWORD),
        role="shop",
        shop=shop,
    )


@pytest.fixture
def shop_owner_headers(shop_owner: User) -> dict:
    return get_auth_headers(create_access_token(data={"sub": shop_owner.username}))


@pytest.fixture(scope="function")
def app_for_testing() -> Generator[FastAPI, Any, None]:
    """
    Provides the FastAPI application. Tests may install dependency overrides;
    they are cleared afterwards.
    """
    yield actual_app
    actual_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app_for_testing: FastAPI) -> AsyncGenerator[httpx.AsyncClient, Any]:
    """
    Provides a non-authenticated client bound to the app through ASGI.

    The ASGI transport does not run the app lifespan, so the database stays
    the one set up by `initialize_test_db`.
    """
    transport = httpx.ASGITransport(app=app_for_testing)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

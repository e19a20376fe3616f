"""
Root conftest for the pytest test suite.

This file contains the fixtures shared across the suite.

Database-backed tests request `initialize_test_db`, which gives every test a
fresh, isolated in-memory SQLite database. API tests talk to the ASGI app
through an httpx `AsyncClient`; the transport does not run the app lifespan,
so the test database set up by `initialize_test_db` is the one the app sees.

Key Fixtures:
- `initialize_test_db`: Creates a fresh DB schema for a test.
- `test_app`: The FastAPI application, built with the in-memory DB config.
- `client`: A non-authenticated `AsyncClient`.
- `user_factory`: Creates users with a given role and a known password.
- `admin_headers` / `manager_headers` / `user_headers`: Bearer headers for a
  freshly created user of that role.
"""

from typing import AsyncGenerator, Awaitable, Callable, Dict

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from stockroom.core.database import build_tortoise_config
from stockroom.features.auth.models import User
from stockroom.features.auth.security import create_access_token, get_password_hash
from stockroom.main import create_app

TEST_DB_URL = "sqlite://:memory:"
TEST_PASSWORD = "password123"


@pytest_asyncio.fixture(scope="function")
async def initialize_test_db() -> AsyncGenerator[None, None]:
    """
    Initializes the database for a test function.

    Creates a fresh in-memory database and schema and tears it down
    afterwards.
    """
    await Tortoise.init(config=build_tortoise_config(TEST_DB_URL))
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


@pytest.fixture(scope="function")
def test_app() -> FastAPI:
    return create_app(build_tortoise_config(TEST_DB_URL))


@pytest_asyncio.fixture(scope="function")
async def client(test_app: FastAPI, initialize_test_db) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides a non-authenticated client bound to the test app.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def user_factory(initialize_test_db) -> Callable[..., Awaitable[User]]:
    """A factory to create users; every user's password is ``TEST_PASSWORD``."""
    counter = {"n": 0}

    async def _factory(
        role: str = "user",
        first_name: str = "Test",
        last_name: str = "User",
        email: str = None,
        is_active: bool = True,
    ) -> User:
        counter["n"] += 1
        return await User.create(
            email=email or f"{role}{counter['n']}@example.com",
            first_name=first_name,
            last_name=last_name,
            hashed_password=get_password_hash(TEST_PASSWORD),
            role=role,
            is_active=is_active,
        )

    return _factory


def bearer_headers(user: User) -> Dict[str, str]:
    token = create_access_token(data={"sub": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_headers(user_factory) -> Dict[str, str]:
    return bearer_headers(await user_factory(role="admin", first_name="Ada", last_name="Admin"))


@pytest_asyncio.fixture
async def manager_headers(user_factory) -> Dict[str, str]:
    return bearer_headers(await user_factory(role="manager", first_name="Mia", last_name="Manager"))


@pytest_asyncio.fixture
async def user_headers(user_factory) -> Dict[str, str]:
    return bearer_headers(await user_factory(role="user", first_name="Uma", last_name="User"))


@pytest.fixture
def headers_for() -> Callable[[User], Dict[str, str]]:
    """Builds bearer headers for an existing user."""
    return bearer_headers

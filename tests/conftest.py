"""Shared test fixtures.

Every test that touches the store gets a fresh SQLite database built from
the ORM metadata and seeded with the catalogues. Redis is never started, so
the rate limiter lets every request through.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from ecotrack.auth.jwt import create_access_token
from ecotrack.auth.service import register_user
from ecotrack.config import get_settings
from ecotrack.database import close_db, get_engine, get_session, init_db
from ecotrack.db.base import Base
from ecotrack.db.models import User
from ecotrack.db.schema import reset_schema_cache
from ecotrack.gamification.seed import seed_catalogue
from ecotrack.main import create_app

TEST_PASSWORD = "greenpass"


@pytest.fixture
def database_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    url = f"sqlite+aiosqlite:///{tmp_path / 'ecotrack_test.db'}"
    monkeypatch.setenv("ECO_DATABASE_URL", url)
    monkeypatch.setenv("ECO_LOG_FORMAT", "console")
    get_settings.cache_clear()
    return url


@pytest_asyncio.fixture
async def database(database_url: str) -> AsyncGenerator[None, None]:
    """Create the schema and seed the catalogues in a fresh database."""
    await init_db(database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    reset_schema_cache()

    async for session in get_session():
        await seed_catalogue(session)
        break

    yield

    await close_db()
    reset_schema_cache()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for service calls and assertions."""
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against a freshly built app."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Create users directly through the signup service."""
    counter = 0

    async def _make(username: str | None = None) -> User:
        nonlocal counter
        counter += 1
        username = username or f"user{counter}"
        return await register_user(
            db_session,
            email=f"{username}@example.com",
            username=username,
            name=username.title(),
            password=TEST_PASSWORD,
        )

    return _make


@pytest_asyncio.fixture
async def user(user_factory: Callable[..., Awaitable[User]]) -> User:
    return await user_factory("alex")


async def _signup(client: AsyncClient, username: str = "sam") -> dict:
    response = await client.post("/api/v1/auth/signup", json={
        "email": f"{username}@example.com",
        "username": username,
        "name": username.title(),
        "password": TEST_PASSWORD,
    })
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        "email": f"{username}@example.com",
        "password": TEST_PASSWORD,
        "user_id": data["user"]["id"],
        "token": data["token"],
    }


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    """Sign up through the API. Returns credentials and the access token."""
    return await _signup(client)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict) -> AsyncClient:
    client.headers["Authorization"] = f"Bearer {registered_user['token']}"
    return client


@pytest.fixture
def auth_header() -> Callable[[int], dict[str, str]]:
    """Build a bearer header for an arbitrary user id."""

    def _header(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _header

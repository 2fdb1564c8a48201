"""
Shared fixtures for the test suite.

Each test gets its own SQLite database file under `tmp_path`; the FastAPI
`get_app_db` dependency is overridden to hand out sessions bound to it, and
requests go through httpx's ASGI transport (no server, no lifespan).
"""

import os

# Must be set before any app module reads its configuration
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["TASKBOARD_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEFAULT_TIMEZONE"] = "UTC"

from collections.abc import AsyncGenerator  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402

from app.db import build_engine, build_sessionmaker, get_app_db, init_db  # noqa: E402

from .helpers import register  # noqa: E402


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine_ = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskboard_test.db'}")
    await init_db(engine_)
    yield engine_
    await engine_.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory) -> FastAPI:
    from main import create_app

    app_ = create_app()

    async def override_get_app_db() -> AsyncGenerator:
        async with session_factory() as session:
            yield session

    app_.dependency_overrides[get_app_db] = override_get_app_db
    return app_


@pytest_asyncio.fixture
async def client(app: FastAPI):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def ann(client) -> tuple[str, dict]:
    return await register(client, "Ann", "ann@x.com")


@pytest_asyncio.fixture
async def bob(client) -> tuple[str, dict]:
    return await register(client, "Bob", "bob@x.com")

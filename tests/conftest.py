"""Shared pytest fixtures for esports-arena-api tests."""
import os
import sys
from pathlib import Path
from typing import AsyncGenerator, Generator

# Settings are read at import time; pin the test environment before any
# esports_arena module is imported.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import sessionmaker

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tests.factories import make_game, make_tournament, make_user


@pytest.fixture(scope="function")
def mem_storage():
    """Fresh, empty in-memory store."""
    from esports_arena.storage import MemStorage

    return MemStorage(seed=False)


@pytest.fixture(scope="function")
def db_storage() -> Generator:
    """SQL store over an isolated in-memory SQLite database."""
    from esports_arena.core.database import build_engine, init_db
    from esports_arena.storage import DatabaseStorage

    engine = build_engine("sqlite://")
    init_db(engine)
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    yield DatabaseStorage(TestSessionLocal)

    engine.dispose()


@pytest.fixture(params=["memory", "database"])
def storage(request):
    """Every contract test runs against both backends."""
    if request.param == "memory":
        return request.getfixturevalue("mem_storage")
    return request.getfixturevalue("db_storage")


@pytest.fixture
def test_client(storage) -> Generator[TestClient, None, None]:
    """TestClient with the storage dependency pointed at the test store."""
    from esports_arena.main import app
    from esports_arena.storage import get_storage

    app.dependency_overrides[get_storage] = lambda: storage

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def async_client(storage) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing FastAPI endpoints."""
    from esports_arena.main import app
    from esports_arena.storage import get_storage

    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def player(storage):
    """A user with 100 in their wallet."""
    return make_user(storage, "ghostsniper", balance=100)


@pytest.fixture
def game(storage):
    return make_game(storage)


@pytest.fixture
def tournament(storage, game):
    return make_tournament(storage, game.id)

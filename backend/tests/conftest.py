"""Pytest configuration and fixtures."""

import os

# Tests run against the in-process store with rate limiting off
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import random
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from words_of_healing.main import app
from words_of_healing.config import Settings
from words_of_healing.core.progression import ProgressionTiming
from words_of_healing.core.puzzles import OrderedPuzzle
from words_of_healing.core.store import MemoryGameStore
from words_of_healing.db.database import Base
from words_of_healing.services.runtime import GameRuntime, get_runtime

# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    from words_of_healing import models  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def store() -> MemoryGameStore:
    return MemoryGameStore()


@pytest.fixture
def fast_timing() -> ProgressionTiming:
    """Millisecond-scale clocks. The countdown is frozen unless a test speeds it up."""
    return ProgressionTiming(
        tick_seconds=60.0,
        lock_check_interval=0.005,
        next_level_poll_interval=0.005,
        feedback_window=0.02,
        upsert_max_attempts=3,
        upsert_retry_backoff=0.001,
    )


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        store_backend="memory",
        rate_limit_enabled=False,
        tick_seconds=60.0,
        unlock_poll_interval_ms=10,
        lock_check_interval_ms=5,
        next_level_poll_interval_ms=5,
        feedback_window_ms=20,
        upsert_retry_backoff_ms=1,
        admin_password="jaago",
    )


@pytest_asyncio.fixture(scope="function")
async def runtime(store, test_settings) -> AsyncGenerator[GameRuntime, None]:
    """A started runtime on the memory store."""
    game_runtime = GameRuntime(store, test_settings, rng=random.Random(7))
    await game_runtime.start()
    yield game_runtime
    await game_runtime.stop()


@pytest_asyncio.fixture(scope="function")
async def client(runtime) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    app.dependency_overrides[get_runtime] = lambda: runtime

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def correct_selection(puzzle) -> list[str]:
    """Item ids that answer a puzzle correctly."""
    if isinstance(puzzle, OrderedPuzzle):
        return [fragment.id for fragment in puzzle.answer]
    return [puzzle.answer]


def wrong_selection(puzzle) -> list[str]:
    """Item ids that make a complete but incorrect answer."""
    if isinstance(puzzle, OrderedPuzzle):
        return list(reversed(correct_selection(puzzle)))
    return [next(option for option in puzzle.options if option != puzzle.answer)]

"""Shared fixtures: a fresh file-backed store per test and a fake clock."""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from pocket.config import Settings
from pocket.db import create_engine, create_session_factory, init_db
from pocket.services.article_store import ArticleStore


class FakeClock:
    """Returns strictly increasing times, one second apart."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'pocket.db'}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(engine, settings, clock) -> ArticleStore:
    return ArticleStore(create_session_factory(engine), settings=settings, clock=clock)

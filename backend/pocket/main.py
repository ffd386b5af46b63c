"""Store lifecycle: open the database once at startup, close it at shutdown."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pocket.config import Settings, get_settings
from pocket.db import create_engine, create_session_factory, init_db
from pocket.services.article_store import ArticleStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_store(settings: Settings | None = None) -> AsyncIterator[ArticleStore]:
    """Open the configured database, make sure its schema exists and yield a store."""
    settings = settings or get_settings()
    logger.info("Opening %s store at %s (%s)", settings.app_name, settings.database_url, settings.environment)

    engine = create_engine(settings)
    try:
        await init_db(engine)
        logger.info("Database schema initialized")
        yield ArticleStore(create_session_factory(engine), settings=settings)
    finally:
        await engine.dispose()
        logger.info("Store closed")

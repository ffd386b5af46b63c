"""SQLite database connection and session management."""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import pocket.models  # noqa: F401  registers tables on SQLModel.metadata
from pocket.config import Settings
from pocket.db.fts import CREATE_FTS_TABLE, FTS_EXISTS, FTS_TRIGGERS, REBUILD_FTS

logger = logging.getLogger(__name__)

# Execution option that makes the next transaction on a connection BEGIN IMMEDIATE
BEGIN_IMMEDIATE = "pocket_begin_immediate"


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database file."""
    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        connect_args={"timeout": settings.sqlite_busy_timeout},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        # Let SQLAlchemy emit BEGIN itself so every session.begin() is one real transaction
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        # Writers take the write lock up front so they wait on the busy timeout
        if conn.get_execution_options().get(BEGIN_IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory handed to the article store."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create tables, the full-text index and its triggers. Safe to re-run."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

        index_existed = (await conn.exec_driver_sql(FTS_EXISTS)).first() is not None
        await conn.exec_driver_sql(CREATE_FTS_TABLE)
        for trigger in FTS_TRIGGERS:
            await conn.exec_driver_sql(trigger)

        if not index_existed:
            # Rows saved before the index existed would otherwise be unsearchable
            await conn.exec_driver_sql(REBUILD_FTS)
            logger.info("Full-text index created")

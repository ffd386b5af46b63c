"""Database connections package."""

from pocket.db.sqlite import BEGIN_IMMEDIATE, create_engine, create_session_factory, init_db

__all__ = ["BEGIN_IMMEDIATE", "create_engine", "create_session_factory", "init_db"]

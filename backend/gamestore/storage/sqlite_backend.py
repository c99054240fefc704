"""SQLite storage backend for game state.

A single local file acts as the store. All operations go through one shared
connection (StaticPool) and are serialized with a lock, so concurrent writers
queue up instead of running in parallel.
"""
import logging
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from gamestore.storage.sql_backend import SqlBackend

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


def _sqlite_url(db_path: str) -> str:
    if db_path == MEMORY_PATH:
        return "sqlite+aiosqlite://"
    return f"sqlite+aiosqlite:///{db_path}"


class SqliteBackend(SqlBackend):
    """Embedded single-file backend."""

    def __init__(self, db_path: str, name: str = "sqlite"):
        self.db_path = db_path
        if db_path != MEMORY_PATH:
            # Containing folder must exist before the first connect
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(
            _sqlite_url(db_path),
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Wait for locks instead of failing, and use WAL for file stores."""
            cursor = dbapi_connection.cursor()
            if db_path != MEMORY_PATH:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

        super().__init__(engine, name=name, serialize=True)
        logger.info(f"Game store backend {name} configured: {db_path}")

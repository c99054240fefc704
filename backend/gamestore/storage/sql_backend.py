"""SQL implementation of the game store backend.

Both concrete backends (networked Postgres and the embedded SQLite file)
speak to the same single ``games`` table through SQLAlchemy Core with bound
parameters. They differ only in how their engine is built and in whether
operations are serialized through one handle.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, func, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from gamestore.core.exceptions import BackendUnavailableError, DuplicateKeyError

logger = logging.getLogger(__name__)

metadata = MetaData()

# Logical schema shared by every backend kind.
games_table = Table(
    "games",
    metadata,
    Column("game_id", String, primary_key=True),
    Column("game", Text),
    Column("created_time", DateTime, server_default=func.now()),
)

_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, OSError, asyncio.TimeoutError)


class SqlBackend:
    """Game store backend over an async SQLAlchemy engine.

    Args:
        engine: Engine bound to the target database.
        name: Backend label used in logs and errors.
        serialize: When True, every operation holds one asyncio lock so the
            single underlying connection is never used concurrently.
    """

    def __init__(self, engine: AsyncEngine, name: str, serialize: bool = False):
        self.engine = engine
        self.name = name
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()
        self._op_lock: Optional[asyncio.Lock] = asyncio.Lock() if serialize else None

    @asynccontextmanager
    async def _transaction(
        self, operation: str, game_id: Optional[str] = None
    ) -> AsyncIterator[AsyncConnection]:
        """Open a transaction, translating driver failures to store errors."""
        if self._op_lock is not None:
            await self._op_lock.acquire()
        try:
            async with self.engine.begin() as conn:
                yield conn
        except IntegrityError as e:
            if operation == "insert" and game_id is not None:
                raise DuplicateKeyError(game_id) from e
            raise
        except _UNAVAILABLE_ERRORS as e:
            logger.error(f"{self.name} {operation} failed for game {game_id}: {e}")
            raise BackendUnavailableError(self.name, operation, str(e)) from e
        finally:
            if self._op_lock is not None:
                self._op_lock.release()

    async def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            async with self._transaction("ensure_schema") as conn:
                await conn.run_sync(metadata.create_all)
            self._schema_ready = True
            logger.info(f"Games table ready on {self.name} backend")

    async def exists(self, game_id: str) -> bool:
        stmt = select(games_table.c.game_id).where(games_table.c.game_id == game_id)
        async with self._transaction("exists", game_id) as conn:
            result = await conn.execute(stmt)
            rows = result.all()
        return len(rows) == 1

    async def insert(self, game_id: str, payload: str) -> None:
        stmt = games_table.insert().values(game_id=game_id, game=payload)
        async with self._transaction("insert", game_id) as conn:
            await conn.execute(stmt)

    async def update(self, game_id: str, payload: str) -> None:
        stmt = (
            games_table.update()
            .where(games_table.c.game_id == game_id)
            .values(game=payload)
        )
        async with self._transaction("update", game_id) as conn:
            result = await conn.execute(stmt)
        if result.rowcount == 0:
            logger.debug(f"{self.name} update matched no rows for game {game_id}")

    async def fetch(self, game_id: str) -> Optional[str]:
        stmt = select(games_table.c.game).where(games_table.c.game_id == game_id)
        async with self._transaction("fetch", game_id) as conn:
            result = await conn.execute(stmt)
            row = result.first()
        if row is None:
            return None
        return row.game

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info(f"{self.name} backend connections closed")

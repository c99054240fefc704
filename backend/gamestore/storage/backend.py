"""Storage backend protocol for game state.

Defines the abstract interface that all storage backends must implement.
This enables routing between the networked relational store and the
embedded single-file store without changing the GameStore facade.
"""

from enum import Enum
from typing import Optional, Protocol


class BackendKind(str, Enum):
    """Storage engine families a game id can resolve to."""

    POSTGRES = "postgres"
    POSTGRES_LEGACY = "postgres-legacy"
    SQLITE = "sqlite"


class GameStoreBackend(Protocol):
    """Protocol defining the storage backend interface for game state.

    Implementations:
    - PostgresBackend: pooled connections to a remote relational engine
    - SqliteBackend: a single local file behind one connection handle

    Payloads are opaque strings; backends never interpret them.
    """

    async def ensure_schema(self) -> None:
        """Create the games table if absent. Idempotent."""
        ...

    async def exists(self, game_id: str) -> bool:
        """Check if exactly one record exists for the game."""
        ...

    async def insert(self, game_id: str, payload: str) -> None:
        """Insert a new record. Raises DuplicateKeyError if it already exists."""
        ...

    async def update(self, game_id: str, payload: str) -> None:
        """Overwrite the payload of an existing record."""
        ...

    async def fetch(self, game_id: str) -> Optional[str]:
        """Retrieve a payload by game id. Returns None if not found."""
        ...

    async def dispose(self) -> None:
        """Release connections held by the backend."""
        ...

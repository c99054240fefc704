"""Pytest configuration and fixtures for backend tests."""
import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

# Keep tests hermetic: no store endpoint leaks in from the environment
for _var in ("DATABASE_URL", "LEGACY_DATABASE_URL", "DB_PATH"):
    os.environ.pop(_var, None)
os.environ["DEBUG"] = "true"

from gamestore.core.config import StoreEndpointConfig
from gamestore.main import create_app
from gamestore.services.game_store import GameStore
from gamestore.storage import StoreRegistry
from gamestore.storage.backend import BackendKind
from gamestore.storage.sqlite_backend import SqliteBackend


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def sqlite_path(tmp_path) -> str:
    """Path of an embedded store file inside a folder that does not exist yet."""
    return str(tmp_path / "data" / "games.db")


@pytest_asyncio.fixture
async def sqlite_backend(sqlite_path) -> AsyncGenerator[SqliteBackend, None]:
    backend = SqliteBackend(sqlite_path)
    yield backend
    await backend.dispose()


@pytest_asyncio.fixture
async def sqlite_registry(sqlite_path) -> AsyncGenerator[StoreRegistry, None]:
    """Registry with only the embedded store configured."""
    registry = StoreRegistry(StoreEndpointConfig(sqlite_path=sqlite_path))
    yield registry
    await registry.dispose()


@pytest_asyncio.fixture
async def dual_registry(tmp_path) -> AsyncGenerator[StoreRegistry, None]:
    """Registry with every kind configured.

    The networked kinds are served by separate embedded files so both
    routing families can be exercised without a database server.
    """
    endpoints = StoreEndpointConfig(
        postgres_url=str(tmp_path / "current.db"),
        legacy_postgres_url=str(tmp_path / "legacy.db"),
        sqlite_path=str(tmp_path / "local.db"),
    )
    factories = {
        BackendKind.POSTGRES: lambda path: SqliteBackend(path, name="postgres"),
        BackendKind.POSTGRES_LEGACY: lambda path: SqliteBackend(path, name="postgres-legacy"),
    }
    registry = StoreRegistry(endpoints, factories=factories)
    yield registry
    await registry.dispose()


@pytest.fixture
def store(sqlite_registry) -> GameStore:
    return GameStore(sqlite_registry)


# ============================================================================
# Application Fixtures
# ============================================================================

@pytest.fixture
def test_app(store) -> FastAPI:
    """Application wired to the embedded-store GameStore fixture."""
    app = create_app(store.registry)
    app.state.game_store = store
    return app


@pytest_asyncio.fixture
async def async_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Async test client sharing the test's event loop with the store."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ============================================================================
# Helper Fixtures
# ============================================================================

@pytest.fixture
def make_game():
    """Build a game payload with the envelope fields the service reads."""

    def _make_game(
        state_id: int = 1,
        active_player_id: str = "p1",
        status: str = "PLAY_GAME",
    ) -> dict:
        return {
            "gameId": "v2:abc",
            "gameStateId": state_id,
            "activePlayerId": active_player_id,
            "gameStatus": status,
            "players": [
                {"playerId": "p1", "name": "Ann", "playerSecret": "secret-1"},
                {"playerId": "p2", "name": "Bo", "playerSecret": "secret-2"},
            ],
            "pendingInputs": {
                "p1": [{"inputType": "SELECT_CARDS"}],
            },
            "gameLog": [{"entry": "Ann played Farm"}],
        }

    return _make_game

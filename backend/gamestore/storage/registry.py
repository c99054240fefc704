"""Routing of game ids to storage backends.

A game id's scheme prefix decides which backend family it lives in:

    "v2:..."  -> current Postgres, else the SQLite file
    other ids -> legacy Postgres, else the SQLite file

New games land on the current backend while games created under the old id
scheme keep resolving to the store they were written to, so a provider
migration needs no data copy. A game id is pinned to its family for life.

Each backend kind is constructed at most once, on first need, and cached for
the lifetime of the registry.
"""
import logging
from typing import Callable, Optional

from gamestore.core.config import StoreEndpointConfig, settings
from gamestore.core.exceptions import NoBackendConfiguredError
from gamestore.storage.backend import BackendKind, GameStoreBackend

logger = logging.getLogger(__name__)

VERSIONED_PREFIX = "v2:"

BackendFactory = Callable[[str], GameStoreBackend]

_PREFERRED_ORDER = {
    "v2": (BackendKind.POSTGRES, BackendKind.SQLITE),
    "legacy": (BackendKind.POSTGRES_LEGACY, BackendKind.SQLITE),
}


def id_scheme(game_id: str) -> str:
    """Return the id scheme name ("v2" or "legacy") for a game id."""
    return "v2" if game_id.startswith(VERSIONED_PREFIX) else "legacy"


def preferred_kinds(game_id: str) -> tuple[BackendKind, ...]:
    """Backend kinds eligible for a game id, most preferred first."""
    return _PREFERRED_ORDER[id_scheme(game_id)]


def _make_postgres(url: str) -> GameStoreBackend:
    from gamestore.storage.postgres_backend import PostgresBackend
    return PostgresBackend(
        url,
        name=BackendKind.POSTGRES.value,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


def _make_legacy_postgres(url: str) -> GameStoreBackend:
    from gamestore.storage.postgres_backend import PostgresBackend
    return PostgresBackend(
        url,
        name=BackendKind.POSTGRES_LEGACY.value,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


def _make_sqlite(path: str) -> GameStoreBackend:
    from gamestore.storage.sqlite_backend import SqliteBackend
    return SqliteBackend(path, name=BackendKind.SQLITE.value)


DEFAULT_FACTORIES: dict[BackendKind, BackendFactory] = {
    BackendKind.POSTGRES: _make_postgres,
    BackendKind.POSTGRES_LEGACY: _make_legacy_postgres,
    BackendKind.SQLITE: _make_sqlite,
}


class StoreRegistry:
    """Lazily built, per-kind singleton backends for one process.

    Args:
        endpoints: Configured endpoint per backend kind. At least one must be set.
        factories: Optional override of how each kind is constructed from its endpoint.

    Raises:
        NoBackendConfiguredError: If no endpoint is configured at all.
    """

    def __init__(
        self,
        endpoints: StoreEndpointConfig,
        factories: Optional[dict[BackendKind, BackendFactory]] = None,
    ):
        if endpoints.is_empty():
            raise NoBackendConfiguredError()
        self._endpoints = endpoints
        self._factories = dict(DEFAULT_FACTORIES)
        if factories:
            self._factories.update(factories)
        self._instances: dict[BackendKind, GameStoreBackend] = {}

    def configured_kinds(self) -> list[BackendKind]:
        return self._endpoints.configured_kinds()

    def unroutable_schemes(self) -> list[str]:
        """Id schemes that no configured backend can serve."""
        return [
            scheme for scheme, order in _PREFERRED_ORDER.items()
            if not any(self._endpoints.endpoint_for(kind) for kind in order)
        ]

    def get_or_create(self, kind: BackendKind) -> GameStoreBackend:
        """Return the cached backend for a kind, constructing it on first use."""
        instance = self._instances.get(kind)
        if instance is not None:
            return instance

        endpoint = self._endpoints.endpoint_for(kind)
        if not endpoint:
            raise NoBackendConfiguredError(tried=[kind.value])
        instance = self._factories[kind](endpoint)
        self._instances[kind] = instance
        logger.info(f"Game store backend {kind.value} instantiated")
        return instance

    def backend_for(self, game_id: str) -> GameStoreBackend:
        """Select the backend a game id resolves to.

        Raises:
            NoBackendConfiguredError: If no kind in the id's preferred order is configured.
        """
        kind = self.kind_for(game_id)
        if kind is None:
            tried = [k.value for k in preferred_kinds(game_id)]
            raise NoBackendConfiguredError(game_id, tried=tried)
        return self.get_or_create(kind)

    def kind_for(self, game_id: str) -> Optional[BackendKind]:
        """Backend kind a game id resolves to, without instantiating anything."""
        for kind in preferred_kinds(game_id):
            if self._endpoints.endpoint_for(kind):
                return kind
        return None

    async def dispose(self) -> None:
        """Close every instantiated backend. Used at process shutdown only."""
        for kind, instance in list(self._instances.items()):
            try:
                await instance.dispose()
            except Exception as e:
                logger.warning(f"Failed to close {kind.value} backend: {e}")

"""Game state storage abstraction layer.

Routes each game id to one of the configured storage backends and keeps a
single lazily created instance per backend kind.

Configuration (at least one required):
    DATABASE_URL=postgresql://...        current networked store ("v2:" ids)
    LEGACY_DATABASE_URL=postgresql://... legacy networked store (older ids)
    DB_PATH=data/games.db                embedded single-file store (fallback)
"""

import logging
from typing import Optional

from gamestore.core.config import StoreEndpointConfig, settings
from gamestore.storage.backend import BackendKind, GameStoreBackend
from gamestore.storage.registry import StoreRegistry, VERSIONED_PREFIX, preferred_kinds

logger = logging.getLogger(__name__)

__all__ = [
    "BackendKind",
    "GameStoreBackend",
    "StoreRegistry",
    "VERSIONED_PREFIX",
    "create_registry",
    "preferred_kinds",
]


def create_registry(endpoints: Optional[StoreEndpointConfig] = None) -> StoreRegistry:
    """Create the store registry from environment configuration.

    Raises:
        NoBackendConfiguredError: If no store endpoint is configured.
    """
    if endpoints is None:
        endpoints = settings.store_endpoints()

    registry = StoreRegistry(endpoints)
    logger.info(
        "Game store backends configured: %s",
        ", ".join(kind.value for kind in registry.configured_kinds()),
    )
    for scheme in registry.unroutable_schemes():
        logger.warning(
            "No store backend can serve %s game ids; requests for them will fail", scheme
        )
    return registry

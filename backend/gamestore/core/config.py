"""Application configuration for the game state store.

Uses Pydantic BaseSettings for declarative environment variable binding.
Store endpoints are optional individually, but at least one must be set for
the service to start (enforced by the store registry at startup).
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from gamestore.storage.backend import BackendKind

logger = logging.getLogger(__name__)

__all__ = ["settings", "Settings", "StoreEndpointConfig"]


def _find_env_file() -> Optional[Path]:
    """Find .env file from multiple possible locations."""
    current_file = Path(__file__).resolve()
    possible_paths = [
        current_file.parent.parent.parent / '.env',
        current_file.parent.parent.parent.parent / '.env',
        Path.cwd() / '.env',
    ]

    for env_path in possible_paths:
        if env_path.exists():
            logger.info(f"Found .env at: {env_path}")
            return env_path

    logger.debug("No .env file found - using environment variables and defaults")
    return None


_env_path = _find_env_file()
if _env_path:
    load_dotenv(dotenv_path=_env_path, override=False)


def _derive_async_database_url(url: str) -> str:
    """Rewrite a postgres URL to the asyncpg driver form."""
    if "+asyncpg" in url:
        return url
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


@dataclass(frozen=True)
class StoreEndpointConfig:
    """Read-only mapping from backend kind to its connection endpoint."""

    postgres_url: Optional[str] = None
    legacy_postgres_url: Optional[str] = None
    sqlite_path: Optional[str] = None

    def endpoint_for(self, kind: "BackendKind") -> Optional[str]:
        from gamestore.storage.backend import BackendKind

        endpoint = {
            BackendKind.POSTGRES: self.postgres_url,
            BackendKind.POSTGRES_LEGACY: self.legacy_postgres_url,
            BackendKind.SQLITE: self.sqlite_path,
        }[kind]
        return endpoint or None

    def configured_kinds(self) -> list["BackendKind"]:
        from gamestore.storage.backend import BackendKind

        return [kind for kind in BackendKind if self.endpoint_for(kind)]

    def is_empty(self) -> bool:
        return not self.configured_kinds()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Application settings ---
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Store endpoints (at least one required) ---
    DATABASE_URL: Optional[str] = None  # current networked relational store
    LEGACY_DATABASE_URL: Optional[str] = None  # store being migrated away from
    DB_PATH: Optional[str] = None  # embedded single-file store

    # --- Networked pool sizing ---
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # --- Store behavior ---
    UPSERT_RETRY_ON_CONFLICT: bool = False

    # --- Client synchronizer defaults ---
    POLL_INTERVAL_SECONDS: float = 5.0

    @field_validator("DATABASE_URL", "LEGACY_DATABASE_URL", mode="after")
    @classmethod
    def _to_async_driver(cls, value: Optional[str]) -> Optional[str]:
        if not value or not value.strip():
            return None
        return _derive_async_database_url(value.strip())

    @field_validator("DB_PATH", mode="after")
    @classmethod
    def _blank_path_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if not value or not value.strip():
            return None
        return value.strip()

    @field_validator("POLL_INTERVAL_SECONDS")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("POLL_INTERVAL_SECONDS must be positive")
        return value

    def store_endpoints(self) -> StoreEndpointConfig:
        """Snapshot of the configured store endpoints."""
        return StoreEndpointConfig(
            postgres_url=self.DATABASE_URL,
            legacy_postgres_url=self.LEGACY_DATABASE_URL,
            sqlite_path=self.DB_PATH,
        )


settings = Settings()

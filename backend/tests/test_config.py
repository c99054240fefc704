"""Unit tests for store configuration."""
import dataclasses
import os
import pytest
from unittest.mock import patch

from pydantic import ValidationError

from gamestore.core import config
from gamestore.core.config import Settings, StoreEndpointConfig
from gamestore.storage.backend import BackendKind


class TestSettings:
    """Test environment binding of store endpoints."""

    @patch.dict(os.environ, {}, clear=True)
    def test_no_endpoints_by_default(self):
        settings = Settings()
        assert settings.DATABASE_URL is None
        assert settings.LEGACY_DATABASE_URL is None
        assert settings.DB_PATH is None
        assert settings.store_endpoints().is_empty()

    @patch.dict(os.environ, {
        "DATABASE_URL": "postgres://u:p@db.example.com:5432/games",
        "LEGACY_DATABASE_URL": "postgresql://u:p@old.example.com/games",
    }, clear=True)
    def test_postgres_urls_use_async_driver(self):
        settings = Settings()
        assert settings.DATABASE_URL == "postgresql+asyncpg://u:p@db.example.com:5432/games"
        assert settings.LEGACY_DATABASE_URL == "postgresql+asyncpg://u:p@old.example.com/games"

    @patch.dict(os.environ, {"DATABASE_URL": "postgresql+asyncpg://u@h/db"}, clear=True)
    def test_async_url_left_untouched(self):
        assert Settings().DATABASE_URL == "postgresql+asyncpg://u@h/db"

    @patch.dict(os.environ, {"DATABASE_URL": "  ", "DB_PATH": ""}, clear=True)
    def test_blank_values_are_absent(self):
        settings = Settings()
        assert settings.DATABASE_URL is None
        assert settings.DB_PATH is None
        assert settings.store_endpoints().is_empty()

    @patch.dict(os.environ, {"DB_PATH": "data/games.db"}, clear=True)
    def test_store_endpoints_snapshot(self):
        endpoints = Settings().store_endpoints()
        assert endpoints == StoreEndpointConfig(sqlite_path="data/games.db")
        assert endpoints.configured_kinds() == [BackendKind.SQLITE]

    @patch.dict(os.environ, {"POLL_INTERVAL_SECONDS": "0"}, clear=True)
    def test_poll_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings()

    @patch.dict(os.environ, {"UPSERT_RETRY_ON_CONFLICT": "true"}, clear=True)
    def test_retry_on_conflict_flag(self):
        assert Settings().UPSERT_RETRY_ON_CONFLICT is True


class TestStoreEndpointConfig:
    """Test the read-only endpoint mapping."""

    def test_endpoint_for_each_kind(self):
        endpoints = StoreEndpointConfig(
            postgres_url="pg-current",
            legacy_postgres_url="pg-legacy",
            sqlite_path="file.db",
        )
        assert endpoints.endpoint_for(BackendKind.POSTGRES) == "pg-current"
        assert endpoints.endpoint_for(BackendKind.POSTGRES_LEGACY) == "pg-legacy"
        assert endpoints.endpoint_for(BackendKind.SQLITE) == "file.db"

    def test_empty_string_counts_as_absent(self):
        endpoints = StoreEndpointConfig(postgres_url="", sqlite_path="file.db")
        assert endpoints.endpoint_for(BackendKind.POSTGRES) is None
        assert endpoints.configured_kinds() == [BackendKind.SQLITE]

    def test_is_frozen(self):
        endpoints = StoreEndpointConfig(sqlite_path="file.db")
        with pytest.raises(dataclasses.FrozenInstanceError):
            endpoints.sqlite_path = "other.db"


class TestModuleSurface:

    def test_exports_only_settings_types(self):
        assert sorted(config.__all__) == ["Settings", "StoreEndpointConfig", "settings"]
        assert not hasattr(config, "ENV_FILE_PATH")
        assert not hasattr(config, "ENV_FILE_LOADED")

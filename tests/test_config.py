"""
tests/test_config.py

Environment-driven database configuration.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

import db.config
from db.config import (
    DatabaseSettings,
    get_database_settings,
    normalize_postgres_url,
    resolve_database_url,
    resolve_migration_url,
)
from db.errors import DatabaseConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "DATABASE_URL",
        "CLOUD_DATABASE_URL",
        "LOCAL_DATABASE_URL",
        "ENVIRONMENT",
        "SQL_ECHO",
        "DB_POOL_SIZE",
        "DB_MAX_OVERFLOW",
        "DB_POOL_RECYCLE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(db.config, "load_env_files", lambda: None)
    get_database_settings.cache_clear()
    yield
    get_database_settings.cache_clear()


def test_normalize_postgres_url() -> None:
    assert normalize_postgres_url("postgres://u@h/d") == "postgresql+psycopg://u@h/d"
    assert normalize_postgres_url("postgresql://u@h/d") == "postgresql+psycopg://u@h/d"
    assert normalize_postgres_url("postgresql+psycopg://u@h/d") == "postgresql+psycopg://u@h/d"
    assert normalize_postgres_url("mysql://u@h/d") == "mysql://u@h/d"


def test_no_url_resolves_to_none() -> None:
    assert resolve_database_url() is None


def test_blank_url_counts_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "   ")
    assert resolve_database_url() is None


def test_database_url_takes_priority(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://primary/db")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://local/db")
    assert resolve_database_url() == "postgresql+psycopg://primary/db"


def test_cloud_url_only_in_cloud_environments(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://cloud/db")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://local/db")
    assert resolve_database_url() == "postgresql+psycopg://local/db"

    monkeypatch.setenv("ENVIRONMENT", "Production")
    assert resolve_database_url() == "postgresql+psycopg://cloud/db"


def test_settings_defaults() -> None:
    assert get_database_settings() == DatabaseSettings()


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SQL_ECHO", "yes")
    monkeypatch.setenv("DB_POOL_SIZE", "0")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "not-a-number")
    monkeypatch.setenv("DB_POOL_RECYCLE", "600")

    settings = get_database_settings()
    assert settings.echo is True
    assert settings.pool_size == 1
    assert settings.max_overflow == 10
    assert settings.pool_recycle == 600


def test_migration_url_prefers_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://runtime/db")
    assert resolve_migration_url(" postgres://override/db ") == "postgresql+psycopg://override/db"
    assert resolve_migration_url("") == "postgresql+psycopg://runtime/db"
    assert resolve_migration_url(None) == "postgresql+psycopg://runtime/db"


def test_migration_url_requires_configuration() -> None:
    with pytest.raises(DatabaseConfigurationError):
        resolve_migration_url()


def test_migration_url_requires_postgres() -> None:
    with pytest.raises(DatabaseConfigurationError):
        resolve_migration_url("sqlite:///tracker.db")

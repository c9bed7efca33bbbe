"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from db.errors import DatabaseConfigurationError


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's psycopg driver form.

    psycopg 3 serves both the sync and the asyncio engine, so the same URL
    works for Alembic and for the runtime handle.
    """

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def resolve_database_url() -> str | None:
    """
    Resolve database URL using environment variables and optional .env files.

    Priority:
    1) DATABASE_URL
    2) CLOUD_DATABASE_URL when ENVIRONMENT is cloud-like
    3) LOCAL_DATABASE_URL

    Returns None when nothing is configured; callers fall back to the
    in-memory database in that case.
    """

    load_env_files()

    direct_url = _optional_env("DATABASE_URL")
    if direct_url:
        return normalize_postgres_url(direct_url)

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    cloud_like_envs = {"prod", "production", "staging", "cloud"}

    cloud_url = _optional_env("CLOUD_DATABASE_URL")
    if environment in cloud_like_envs and cloud_url:
        return normalize_postgres_url(cloud_url)

    local_url = _optional_env("LOCAL_DATABASE_URL")
    if local_url:
        return normalize_postgres_url(local_url)

    return None


def resolve_migration_url(override: str | None = None) -> str:
    """
    Resolve the URL Alembic migrates against.

    An explicit override (`alembic -x db_url=...` or `sqlalchemy.url`) wins
    over the runtime chain. The in-memory fallback has nothing to migrate,
    so a missing URL is an error here.
    """

    if override and override.strip():
        url: str | None = normalize_postgres_url(override.strip())
    else:
        url = resolve_database_url()
    if not url:
        raise DatabaseConfigurationError(
            "No database URL configured. Set DATABASE_URL, or configure "
            "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
        )
    if not url.startswith("postgresql"):
        raise DatabaseConfigurationError("Alembic is configured for PostgreSQL URLs only.")
    return url


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection pool settings for the real database engine.
    """

    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    """
    Return cached engine settings from environment variables.
    """

    load_env_files()
    return DatabaseSettings(
        echo=_get_bool_env("SQL_ECHO", default=False),
        pool_size=max(1, _get_int_env("DB_POOL_SIZE", 5)),
        max_overflow=max(0, _get_int_env("DB_MAX_OVERFLOW", 10)),
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
    )

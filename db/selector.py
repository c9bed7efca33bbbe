"""
Backend selection: real PostgreSQL handle or the in-memory fallback.
"""

from __future__ import annotations

import logging

from db.backends.base import Database
from db.backends.sqlalchemy_backend import SQLAlchemyDatabase, create_async_db_engine
from db.config import DatabaseSettings, normalize_postgres_url
from db.fallback.engine import MemoryDatabase
from db.fallback.store import TableStore
from db.logging_utils import log_event

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = "DATABASE_URL not found - using mock database"


def create_database(
    database_url: str | None,
    *,
    settings: DatabaseSettings | None = None,
    store: TableStore | None = None,
) -> Database:
    """
    Build the handle for the given URL.

    A missing URL is a supported mode, not an error: the in-memory fallback
    is returned and an informational notice is logged.
    """

    url = (database_url or "").strip()
    if not url:
        log_event(
            logger,
            logging.INFO,
            "database_fallback_enabled",
            message=FALLBACK_NOTICE,
        )
        return MemoryDatabase(store)

    engine = create_async_db_engine(normalize_postgres_url(url), settings)
    log_event(
        logger,
        logging.INFO,
        "database_engine_created",
        backend=SQLAlchemyDatabase.backend_name,
        host=engine.url.host,
        database=engine.url.database,
    )
    return SQLAlchemyDatabase(engine)

"""
db/session.py

Process-wide database handle.
"""

from __future__ import annotations

from functools import lru_cache

from db.backends.base import Database
from db.config import resolve_database_url
from db.selector import create_database


@lru_cache(maxsize=1)
def get_database() -> Database:
    """Return the shared handle, creating it on first call."""
    return create_database(resolve_database_url())


def reset_database() -> None:
    """
    Forget the shared handle so the next call re-reads configuration.

    Does not dispose pooled connections; await `dispose()` on the old
    handle first when that matters.
    """

    get_database.cache_clear()


def __getattr__(name: str) -> object:
    # Provides lazy access to `database` for callers that import it directly
    # (e.g. `from db.session import database`). The handle is not created
    # until the attribute is first accessed.
    if name == "database":
        return get_database()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

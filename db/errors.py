"""
Database-layer exceptions.

The in-memory fallback never raises; these cover configuration and the
real PostgreSQL path only.
"""

from __future__ import annotations


class DatabaseError(Exception):
    """Base exception for database handle failures."""


class DatabaseConfigurationError(DatabaseError, RuntimeError):
    """Raised when a configured database URL cannot be used."""


class QueryExecutionError(DatabaseError):
    """Raised when the real backend fails to execute a statement."""


class UnknownTableError(DatabaseError, LookupError):
    """Raised when a table reference does not name a known table."""

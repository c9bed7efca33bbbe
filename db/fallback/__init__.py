"""
In-memory fallback used when no database URL is configured.
"""

from db.fallback.engine import MemoryDatabase
from db.fallback.entities import Entity, resolve_entity
from db.fallback.store import TableStore

__all__ = [
    "MemoryDatabase",
    "TableStore",
    "Entity",
    "resolve_entity",
]

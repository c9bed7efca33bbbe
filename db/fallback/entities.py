"""
Entity tags for the in-memory fallback.

Tables are identified by tag rather than by object identity, so a model
class, a SQLAlchemy `Table`, a tag, or a plain table name all resolve to
the same entity.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class Entity(str, Enum):
    COMPETITORS = "competitors"
    SOURCES = "sources"
    UPDATES = "updates"
    CLASSIFICATIONS = "classifications"
    DIGESTS = "digests"

    @property
    def has_active_flag(self) -> bool:
        return self in _ACTIVE_FLAG_ENTITIES


_ACTIVE_FLAG_ENTITIES = frozenset({Entity.COMPETITORS, Entity.SOURCES})


def resolve_entity(table: Any) -> Entity | None:
    """
    Map a table reference onto its entity tag, or None when unknown.
    """

    if isinstance(table, Entity):
        return table
    if isinstance(table, str):
        name = table
    else:
        # ORM models carry __tablename__; Core tables carry .name
        name = getattr(table, "__tablename__", None) or getattr(table, "name", None)
    if not isinstance(name, str):
        return None
    try:
        return Entity(name)
    except ValueError:
        return None

"""
In-memory table state for the fallback database.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from db.fallback.entities import Entity
from db.fallback.records import RECORD_MODELS, build_seed_rows


class TableStore:
    """
    Owns one ordered list of rows per entity.

    Readers always receive deep copies, so nothing handed out can change
    the stored rows. `append` is the only mutation path.
    """

    def __init__(self, tables: Mapping[Entity, Iterable[Mapping[str, Any]]] | None = None) -> None:
        self._tables: dict[Entity, list[dict[str, Any]]] = {entity: [] for entity in Entity}
        for entity, rows in (tables or {}).items():
            self.append(entity, rows)

    @classmethod
    def seeded(cls, now: datetime | None = None) -> TableStore:
        """Build a store holding the fixed demo rows."""
        return cls(build_seed_rows(now))

    def rows(self, entity: Entity, *, active_only: bool = False) -> list[dict[str, Any]]:
        rows = self._tables[entity]
        if active_only and entity.has_active_flag:
            rows = [row for row in rows if row.get("is_active")]
        return copy.deepcopy(rows)

    def length(self, entity: Entity) -> int:
        return len(self._tables[entity])

    def find_first(self, entity: Entity, **criteria: Any) -> dict[str, Any] | None:
        """
        Return a copy of the first row whose fields equal every criterion.
        """

        for row in self._tables[entity]:
            if all(row.get(key) == value for key, value in criteria.items()):
                return copy.deepcopy(row)
        return None

    def append(self, entity: Entity, rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """
        Validate and append rows; returns copies of what was stored.
        """

        model = RECORD_MODELS[entity]
        stored = [model.model_validate(dict(row)).model_dump() for row in rows]
        self._tables[entity].extend(stored)
        return copy.deepcopy(stored)

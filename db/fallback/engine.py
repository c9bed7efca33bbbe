"""
In-memory query engine that mimics the real handle's builder contract.

Reads honour joins and count projections. Filters, ordering, limits and
grouping are accepted and recorded but not applied. Writes are stubs:
insert computes ids without appending, update echoes the patch, delete
returns nothing. None of this touches the store, and nothing here raises.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from db.backends.base import (
    Database,
    DeleteQuery,
    InsertQuery,
    RawResult,
    Record,
    RecordInput,
    SelectQuery,
    SelectStart,
    UpdateQuery,
)
from db.fallback.entities import Entity, resolve_entity
from db.fallback.store import TableStore
from db.logging_utils import log_event

logger = logging.getLogger(__name__)

JoinExpander = Callable[[TableStore, list[Record]], list[Record]]


def _expand_sources(store: TableStore, rows: list[Record]) -> list[Record]:
    return [
        {
            "sources": row,
            "competitors": store.find_first(Entity.COMPETITORS, id=row.get("competitor_id")),
        }
        for row in rows
    ]


def _expand_updates(store: TableStore, rows: list[Record]) -> list[Record]:
    # At most one classification per update: the first match wins.
    return [
        {
            "updates": row,
            "competitors": store.find_first(Entity.COMPETITORS, id=row.get("competitor_id")),
            "sources": store.find_first(Entity.SOURCES, id=row.get("source_id")),
            "classifications": store.find_first(Entity.CLASSIFICATIONS, update_id=row.get("id")),
        }
        for row in rows
    ]


@dataclass(frozen=True)
class EntityBehavior:
    """
    Per-entity read behaviour of the fallback engine.
    """

    snapshot: Callable[[TableStore], list[Record]]
    expand_join: JoinExpander | None = None
    countable: bool = True


def _active_rows(entity: Entity) -> Callable[[TableStore], list[Record]]:
    return lambda store: store.rows(entity, active_only=True)


def _all_rows(entity: Entity) -> Callable[[TableStore], list[Record]]:
    return lambda store: store.rows(entity)


ENTITY_BEHAVIORS: dict[Entity, EntityBehavior] = {
    Entity.COMPETITORS: EntityBehavior(snapshot=_active_rows(Entity.COMPETITORS)),
    Entity.SOURCES: EntityBehavior(
        snapshot=_active_rows(Entity.SOURCES),
        expand_join=_expand_sources,
    ),
    Entity.UPDATES: EntityBehavior(
        snapshot=_all_rows(Entity.UPDATES),
        expand_join=_expand_updates,
    ),
    Entity.CLASSIFICATIONS: EntityBehavior(snapshot=_all_rows(Entity.CLASSIFICATIONS)),
    Entity.DIGESTS: EntityBehavior(snapshot=_all_rows(Entity.DIGESTS), countable=False),
}


def _requests_count(fields: Mapping[str, Any] | None) -> bool:
    # SQL expressions refuse bool(), so test presence explicitly.
    return isinstance(fields, Mapping) and fields.get("count") is not None


class MemorySelectQuery(SelectQuery):
    """
    Select over one in-memory table.

    The table snapshot is taken when the query is bound; resolution happens
    once, on the first `execute()`.
    """

    def __init__(
        self,
        store: TableStore,
        entity: Entity | None,
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        self._store = store
        self.entity = entity
        self._fields = fields
        self._behavior = ENTITY_BEHAVIORS.get(entity) if entity is not None else None
        self._snapshot: list[Record] = self._behavior.snapshot(store) if self._behavior else []
        self.has_joins = False
        self.directives: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self._result: list[Record] | None = None

    def _record(self, name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> MemorySelectQuery:
        self.directives.append((name, args, kwargs))
        return self

    def left_join(self, *args: Any, **kwargs: Any) -> MemorySelectQuery:
        self.has_joins = True
        return self._record("left_join", args, kwargs)

    def inner_join(self, *args: Any, **kwargs: Any) -> MemorySelectQuery:
        self.has_joins = True
        return self._record("inner_join", args, kwargs)

    def right_join(self, *args: Any, **kwargs: Any) -> MemorySelectQuery:
        self.has_joins = True
        return self._record("right_join", args, kwargs)

    def where(self, *args: Any, **kwargs: Any) -> MemorySelectQuery:
        return self._record("where", args, kwargs)

    def order_by(self, *args: Any, **kwargs: Any) -> MemorySelectQuery:
        return self._record("order_by", args, kwargs)

    def limit(self, *args: Any, **kwargs: Any) -> MemorySelectQuery:
        return self._record("limit", args, kwargs)

    def group_by(self, *args: Any, **kwargs: Any) -> MemorySelectQuery:
        return self._record("group_by", args, kwargs)

    def _resolve(self) -> list[Record]:
        if _requests_count(self._fields):
            countable = self._behavior is not None and self._behavior.countable
            return [{"count": len(self._snapshot) if countable else 0}]

        rows = copy.deepcopy(self._snapshot)
        if self.has_joins and self._behavior is not None and self._behavior.expand_join is not None:
            rows = self._behavior.expand_join(self._store, rows)
        return rows

    async def execute(self) -> list[Record]:
        if self._result is None:
            self._result = self._resolve()
            log_event(
                logger,
                logging.DEBUG,
                "fallback_query_resolved",
                table=self.entity.value if self.entity is not None else None,
                joins=self.has_joins,
                count=_requests_count(self._fields),
                ignored_directives=[
                    name for name, _, _ in self.directives if not name.endswith("_join")
                ],
                rows=len(self._result),
            )
        return copy.deepcopy(self._result)


class MemorySelect(SelectStart):
    def __init__(self, store: TableStore, fields: Mapping[str, Any] | None = None) -> None:
        self._store = store
        self._fields = fields

    def from_(self, table: Any) -> MemorySelectQuery:
        return MemorySelectQuery(self._store, resolve_entity(table), self._fields)


class MemoryInsert(InsertQuery):
    """
    Insert stub: assigns ids as `len(table) + position + 1` and echoes the
    records back without storing them.
    """

    def __init__(self, store: TableStore, entity: Entity | None) -> None:
        self._store = store
        self._entity = entity
        self._values: list[Mapping[str, Any]] = []
        self._returning = False

    def values(self, values: RecordInput) -> MemoryInsert:
        if isinstance(values, Mapping):
            self._values = [values]
        elif isinstance(values, Iterable) and not isinstance(values, (str, bytes)):
            self._values = [value for value in values if isinstance(value, Mapping)]
        else:
            self._values = []
        return self

    def returning(self, *columns: Any) -> MemoryInsert:
        self._returning = True
        return self

    async def execute(self) -> list[Record]:
        if not self._returning:
            return []
        base = self._store.length(self._entity) if self._entity is not None else 0
        return [
            {**copy.deepcopy(dict(value)), "id": base + position + 1}
            for position, value in enumerate(self._values)
        ]


class MemoryUpdate(UpdateQuery):
    """
    Update stub: resolves to the patch itself, whatever the criteria.
    """

    def __init__(self) -> None:
        self._patch: dict[str, Any] = {}
        self._returning = False

    def set(self, values: Mapping[str, Any]) -> MemoryUpdate:
        self._patch = dict(values) if isinstance(values, Mapping) else {}
        return self

    def where(self, *args: Any, **kwargs: Any) -> MemoryUpdate:
        return self

    def returning(self, *columns: Any) -> MemoryUpdate:
        self._returning = True
        return self

    async def execute(self) -> list[Record]:
        if not self._returning:
            return []
        return [copy.deepcopy(self._patch)]


class MemoryDelete(DeleteQuery):
    def where(self, *args: Any, **kwargs: Any) -> MemoryDelete:
        return self

    def returning(self, *columns: Any) -> MemoryDelete:
        return self

    async def execute(self) -> list[Record]:
        return []


class MemoryDatabase(Database):
    """
    Database handle backed by a `TableStore`.

    Read-only demo mode: the write builders never mutate the store. Whether
    that should become a real offline write path is an open decision; use
    `TableStore.append` directly when a test needs extra rows.
    """

    backend_name = "memory"

    def __init__(self, store: TableStore | None = None) -> None:
        self.store = store if store is not None else TableStore.seeded()

    def select(self, fields: Mapping[str, Any] | None = None) -> MemorySelect:
        return MemorySelect(self.store, fields)

    def insert(self, table: Any) -> MemoryInsert:
        return MemoryInsert(self.store, resolve_entity(table))

    def update(self, table: Any) -> MemoryUpdate:
        return MemoryUpdate()

    def delete(self, table: Any) -> MemoryDelete:
        return MemoryDelete()

    async def raw_query(
        self,
        statement: str,
        params: Mapping[str, Any] | None = None,
    ) -> RawResult:
        return RawResult(rows=[], row_count=0)

    async def dispose(self) -> None:
        return None

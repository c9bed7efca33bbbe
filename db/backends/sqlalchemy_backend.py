"""
PostgreSQL-backed handle built on SQLAlchemy Core and the asyncio engine.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from sqlalchemy import Table, delete, insert, join, select, text, update
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql.expression import Delete, Executable, FromClause, Insert, Select, Update

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
from db.base import Base
from db.config import DatabaseSettings, get_database_settings
from db.errors import DatabaseConfigurationError, QueryExecutionError, UnknownTableError
from db.logging_utils import log_event
import db.models  # noqa: F401  - imports register every table on Base.metadata

logger = logging.getLogger(__name__)


def create_async_db_engine(
    database_url: str,
    settings: DatabaseSettings | None = None,
) -> AsyncEngine:
    """
    Create a pooled asyncio engine for a PostgreSQL URL.
    """

    if not database_url.startswith("postgresql"):
        raise DatabaseConfigurationError("Only PostgreSQL URLs are supported.")

    settings = settings or get_database_settings()
    return create_async_engine(
        database_url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_recycle=settings.pool_recycle,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )


def as_table(table: Any) -> Table:
    """
    Resolve a model class, `Table`, entity tag, or table name to a `Table`.
    """

    if isinstance(table, Table):
        return table
    model_table = getattr(table, "__table__", None)
    if isinstance(model_table, Table):
        return model_table
    name = table.value if isinstance(table, Enum) else table
    if isinstance(name, str) and name in Base.metadata.tables:
        return Base.metadata.tables[name]
    raise UnknownTableError(f"Unknown table: {table!r}")


async def _run(engine: AsyncEngine, statement: Executable, *, write: bool) -> list[Row]:
    try:
        if write:
            async with engine.begin() as conn:
                result = await conn.execute(statement)
                return list(result.all()) if result.returns_rows else []
        async with engine.connect() as conn:
            result = await conn.execute(statement)
            return list(result.all())
    except SQLAlchemyError as exc:
        log_event(
            logger,
            logging.ERROR,
            "query_failed",
            statement=type(statement).__name__,
            error=str(exc),
        )
        raise QueryExecutionError(str(exc)) from exc


class SQLSelectQuery(SelectQuery):
    """
    Select builder composing a SQLAlchemy `Select` statement.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        table: Any,
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        self._engine = engine
        self._fields = fields
        self._base = as_table(table)
        self._from: FromClause = self._base
        self._tables: list[Table] = [self._base]
        self._where: list[Any] = []
        self._order_by: list[Any] = []
        self._group_by: list[Any] = []
        self._limit: int | None = None

    def left_join(self, target: Any, onclause: Any = None) -> SQLSelectQuery:
        joined = as_table(target)
        self._from = self._from.outerjoin(joined, onclause)
        self._tables.append(joined)
        return self

    def inner_join(self, target: Any, onclause: Any = None) -> SQLSelectQuery:
        joined = as_table(target)
        self._from = self._from.join(joined, onclause)
        self._tables.append(joined)
        return self

    def right_join(self, target: Any, onclause: Any = None) -> SQLSelectQuery:
        # RIGHT JOIN b == b LEFT JOIN (current from-clause)
        joined = as_table(target)
        self._from = join(joined, self._from, onclause, isouter=True)
        self._tables.append(joined)
        return self

    def where(self, *criteria: Any) -> SQLSelectQuery:
        self._where.extend(criteria)
        return self

    def order_by(self, *clauses: Any) -> SQLSelectQuery:
        self._order_by.extend(clauses)
        return self

    def limit(self, count: int) -> SQLSelectQuery:
        self._limit = count
        return self

    def group_by(self, *clauses: Any) -> SQLSelectQuery:
        self._group_by.extend(clauses)
        return self

    @property
    def statement(self) -> Select:
        if self._fields:
            stmt = select(*[expr.label(name) for name, expr in self._fields.items()])
        else:
            stmt = select(*self._tables)
        stmt = stmt.select_from(self._from)
        if self._where:
            stmt = stmt.where(*self._where)
        if self._group_by:
            stmt = stmt.group_by(*self._group_by)
        if self._order_by:
            stmt = stmt.order_by(*self._order_by)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        return stmt

    def shape_row(self, row: Row) -> Record:
        """
        Turn one result row into a plain or composite record.
        """

        mapping = row._mapping
        if self._fields:
            return dict(mapping)
        if len(self._tables) == 1:
            return {column.key: mapping[column] for column in self._base.c}

        composite: Record = {}
        for table in self._tables:
            values = {column.key: mapping[column] for column in table.c}
            # An unmatched outer-joined side comes back all NULL.
            composite[table.name] = None if all(v is None for v in values.values()) else values
        return composite

    async def execute(self) -> list[Record]:
        rows = await _run(self._engine, self.statement, write=False)
        return [self.shape_row(row) for row in rows]


class SQLSelect(SelectStart):
    def __init__(self, engine: AsyncEngine, fields: Mapping[str, Any] | None = None) -> None:
        self._engine = engine
        self._fields = fields

    def from_(self, table: Any) -> SQLSelectQuery:
        return SQLSelectQuery(self._engine, table, self._fields)


class SQLInsertQuery(InsertQuery):
    def __init__(self, engine: AsyncEngine, table: Any) -> None:
        self._engine = engine
        self._table = as_table(table)
        self._values: list[dict[str, Any]] = []
        self._returning: tuple[Any, ...] | None = None

    def values(self, values: RecordInput) -> SQLInsertQuery:
        if isinstance(values, Mapping):
            self._values = [dict(values)]
        else:
            self._values = [dict(value) for value in values]
        return self

    def returning(self, *columns: Any) -> SQLInsertQuery:
        self._returning = columns or tuple(self._table.c)
        return self

    @property
    def statement(self) -> Insert:
        stmt = insert(self._table).values(self._values)
        if self._returning is not None:
            stmt = stmt.returning(*self._returning)
        return stmt

    async def execute(self) -> list[Record]:
        if not self._values:
            return []
        rows = await _run(self._engine, self.statement, write=True)
        return [dict(row._mapping) for row in rows]


class SQLUpdateQuery(UpdateQuery):
    def __init__(self, engine: AsyncEngine, table: Any) -> None:
        self._engine = engine
        self._table = as_table(table)
        self._patch: dict[str, Any] = {}
        self._where: list[Any] = []
        self._returning: tuple[Any, ...] | None = None

    def set(self, values: Mapping[str, Any]) -> SQLUpdateQuery:
        self._patch = dict(values)
        return self

    def where(self, *criteria: Any) -> SQLUpdateQuery:
        self._where.extend(criteria)
        return self

    def returning(self, *columns: Any) -> SQLUpdateQuery:
        self._returning = columns or tuple(self._table.c)
        return self

    @property
    def statement(self) -> Update:
        stmt = update(self._table).values(**self._patch)
        if self._where:
            stmt = stmt.where(*self._where)
        if self._returning is not None:
            stmt = stmt.returning(*self._returning)
        return stmt

    async def execute(self) -> list[Record]:
        if not self._patch:
            return []
        rows = await _run(self._engine, self.statement, write=True)
        return [dict(row._mapping) for row in rows]


class SQLDeleteQuery(DeleteQuery):
    def __init__(self, engine: AsyncEngine, table: Any) -> None:
        self._engine = engine
        self._table = as_table(table)
        self._where: list[Any] = []
        self._returning: tuple[Any, ...] | None = None

    def where(self, *criteria: Any) -> SQLDeleteQuery:
        self._where.extend(criteria)
        return self

    def returning(self, *columns: Any) -> SQLDeleteQuery:
        self._returning = columns or tuple(self._table.c)
        return self

    @property
    def statement(self) -> Delete:
        stmt = delete(self._table)
        if self._where:
            stmt = stmt.where(*self._where)
        if self._returning is not None:
            stmt = stmt.returning(*self._returning)
        return stmt

    async def execute(self) -> list[Record]:
        rows = await _run(self._engine, self.statement, write=True)
        return [dict(row._mapping) for row in rows]


class SQLAlchemyDatabase(Database):
    """
    Database handle over a pooled asyncio engine.
    """

    backend_name = "postgresql"

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    def select(self, fields: Mapping[str, Any] | None = None) -> SQLSelect:
        return SQLSelect(self.engine, fields)

    def insert(self, table: Any) -> SQLInsertQuery:
        return SQLInsertQuery(self.engine, table)

    def update(self, table: Any) -> SQLUpdateQuery:
        return SQLUpdateQuery(self.engine, table)

    def delete(self, table: Any) -> SQLDeleteQuery:
        return SQLDeleteQuery(self.engine, table)

    async def raw_query(
        self,
        statement: str,
        params: Mapping[str, Any] | None = None,
    ) -> RawResult:
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(text(statement), dict(params or {}))
                rows = [dict(row._mapping) for row in result.all()] if result.returns_rows else []
                return RawResult(rows=rows, row_count=result.rowcount)
        except SQLAlchemyError as exc:
            log_event(logger, logging.ERROR, "raw_query_failed", error=str(exc))
            raise QueryExecutionError(str(exc)) from exc

    async def dispose(self) -> None:
        await self.engine.dispose()

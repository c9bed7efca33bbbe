"""
Backend-neutral query builder contract.

Both the PostgreSQL handle and the in-memory fallback expose exactly this
surface, so calling code cannot tell which one it received. Builders
accumulate directives and resolve once, when `execute()` is awaited.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

Record = dict[str, Any]
RecordInput = Mapping[str, Any] | Iterable[Mapping[str, Any]]


@dataclass(frozen=True)
class RawResult:
    """
    Result of a raw textual statement.
    """

    rows: list[Record] = field(default_factory=list)
    row_count: int = 0


class SelectQuery(ABC):
    """
    A select bound to one table, awaiting modifiers and execution.
    """

    @abstractmethod
    def left_join(self, *args: Any, **kwargs: Any) -> SelectQuery:
        """Add a LEFT OUTER JOIN."""

    @abstractmethod
    def inner_join(self, *args: Any, **kwargs: Any) -> SelectQuery:
        """Add an INNER JOIN."""

    @abstractmethod
    def right_join(self, *args: Any, **kwargs: Any) -> SelectQuery:
        """Add a RIGHT OUTER JOIN."""

    @abstractmethod
    def where(self, *args: Any, **kwargs: Any) -> SelectQuery:
        """Add filter criteria."""

    @abstractmethod
    def order_by(self, *args: Any, **kwargs: Any) -> SelectQuery:
        """Add ordering clauses."""

    @abstractmethod
    def limit(self, *args: Any, **kwargs: Any) -> SelectQuery:
        """Limit the number of rows."""

    @abstractmethod
    def group_by(self, *args: Any, **kwargs: Any) -> SelectQuery:
        """Add grouping clauses."""

    @abstractmethod
    async def execute(self) -> list[Record]:
        """
        Resolve the query into a list of records.

        Joined queries resolve to composite records keyed by table name.
        """


class SelectStart(ABC):
    """
    Result of `Database.select()` before a table is bound.
    """

    @abstractmethod
    def from_(self, table: Any) -> SelectQuery:
        """Bind the select to a table."""


class InsertQuery(ABC):
    @abstractmethod
    def values(self, values: RecordInput) -> InsertQuery:
        """Set one record or a sequence of records to insert."""

    @abstractmethod
    def returning(self, *columns: Any) -> InsertQuery:
        """Request the inserted rows back from `execute()`."""

    @abstractmethod
    async def execute(self) -> list[Record]:
        """Run the insert."""


class UpdateQuery(ABC):
    @abstractmethod
    def set(self, values: Mapping[str, Any]) -> UpdateQuery:
        """Set the patch applied to matching rows."""

    @abstractmethod
    def where(self, *args: Any, **kwargs: Any) -> UpdateQuery:
        """Restrict the rows to update."""

    @abstractmethod
    def returning(self, *columns: Any) -> UpdateQuery:
        """Request the updated rows back from `execute()`."""

    @abstractmethod
    async def execute(self) -> list[Record]:
        """Run the update."""


class DeleteQuery(ABC):
    @abstractmethod
    def where(self, *args: Any, **kwargs: Any) -> DeleteQuery:
        """Restrict the rows to delete."""

    @abstractmethod
    def returning(self, *columns: Any) -> DeleteQuery:
        """Request the deleted rows back from `execute()`."""

    @abstractmethod
    async def execute(self) -> list[Record]:
        """Run the delete."""


class Database(ABC):
    """
    Process-wide database handle.
    """

    backend_name: str = "abstract"

    @abstractmethod
    def select(self, fields: Mapping[str, Any] | None = None) -> SelectStart:
        """
        Start a select, optionally projecting named expressions
        (e.g. `{"count": func.count()}`).
        """

    @abstractmethod
    def insert(self, table: Any) -> InsertQuery:
        """Start an insert into `table`."""

    @abstractmethod
    def update(self, table: Any) -> UpdateQuery:
        """
        Start an update of `table`.

        An empty patch is not sent to PostgreSQL: the real handle resolves it
        to `[]`, while the in-memory handle echoes it back as `[{}]`.
        """

    @abstractmethod
    def delete(self, table: Any) -> DeleteQuery:
        """Start a delete from `table`."""

    @abstractmethod
    async def raw_query(
        self,
        statement: str,
        params: Mapping[str, Any] | None = None,
    ) -> RawResult:
        """Run a raw textual statement."""

    @abstractmethod
    async def dispose(self) -> None:
        """Release pooled connections, if any."""

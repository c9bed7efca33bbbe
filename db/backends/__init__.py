"""
Database backend exports.
"""

from db.backends.base import (
    Database,
    DeleteQuery,
    InsertQuery,
    RawResult,
    SelectQuery,
    SelectStart,
    UpdateQuery,
)
from db.backends.sqlalchemy_backend import SQLAlchemyDatabase, create_async_db_engine

__all__ = [
    "Database",
    "SelectStart",
    "SelectQuery",
    "InsertQuery",
    "UpdateQuery",
    "DeleteQuery",
    "RawResult",
    "SQLAlchemyDatabase",
    "create_async_db_engine",
]

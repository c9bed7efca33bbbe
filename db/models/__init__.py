"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.classification import Classification
from db.models.competitor import Competitor
from db.models.digest import Digest
from db.models.source import Source
from db.models.update import Update, UpdateSeverity

__all__ = [
    "Competitor",
    "Source",
    "Update",
    "UpdateSeverity",
    "Classification",
    "Digest",
]

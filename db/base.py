"""
db/base.py

Declarative base and shared mixins for all SQLAlchemy models.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    All models must inherit from this class.
    """

    type_annotation_map: dict[type, Any] = {}


class CreatedAtMixin:
    """
    Mixin that adds a server-populated created_at column.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

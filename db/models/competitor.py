"""
db/models/competitor.py

Competitor model - one tracked rival company.
Sources, updates, and classifications all point back to a competitor.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.source import Source
    from db.models.update import Update


class Competitor(Base):
    """
    Represents a competitor whose public channels are monitored.

    is_active soft-disables tracking without deleting history.
    """

    __tablename__ = "competitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Soft-disable a competitor without deletion",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    sources: Mapped[list["Source"]] = relationship(
        "Source",
        back_populates="competitor",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    updates: Mapped[list["Update"]] = relationship(
        "Update",
        back_populates="competitor",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (Index("ix_competitors_is_active", "is_active"),)

    def __repr__(self) -> str:
        return f"<Competitor id={self.id} name={self.name!r} active={self.is_active}>"

"""
db/models/update.py

Update model - one change detected on a competitor source.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.classification import Classification
    from db.models.competitor import Competitor
    from db.models.source import Source


class UpdateSeverity:
    """Severity labels assigned to detected updates."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Update(Base):
    """
    Represents a scraped item that differs from what was seen before.
    """

    __tablename__ = "updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    source_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sources.id", ondelete="CASCADE"),
        nullable=False,
    )

    competitor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("competitors.id", ondelete="CASCADE"),
        nullable=False,
    )

    scraped_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    severity: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UpdateSeverity.MEDIUM,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    competitor: Mapped["Competitor"] = relationship("Competitor", back_populates="updates")

    source: Mapped["Source"] = relationship("Source")

    classifications: Mapped[list["Classification"]] = relationship(
        "Classification",
        back_populates="update",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_updates_competitor_id", "competitor_id"),
        Index("ix_updates_source_id", "source_id"),
        Index("ix_updates_scraped_at", "scraped_at"),
    )

    def __repr__(self) -> str:
        return f"<Update id={self.id} source_id={self.source_id} severity={self.severity!r}>"

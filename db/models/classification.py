"""
db/models/classification.py

Classification model - the category and impact assigned to an update.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.update import Update


class Classification(Base):
    """
    Represents one classifier verdict for an update.

    confidence is the classifier score in the closed range 0.0 to 1.0.
    """

    __tablename__ = "classifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    update_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("updates.id", ondelete="CASCADE"),
        nullable=False,
    )

    competitor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("competitors.id", ondelete="CASCADE"),
        nullable=False,
    )

    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="feature, pricing, hiring, partnership, ...",
    )

    impact: Mapped[str] = mapped_column(String(20), nullable=False)

    confidence: Mapped[float] = mapped_column(Float, nullable=False)

    # ── Relationships ──────────────────────────────────────────────────────────

    update: Mapped["Update"] = relationship("Update", back_populates="classifications")

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        CheckConstraint(
            "confidence >= 0.0 AND confidence <= 1.0",
            name="ck_classifications_confidence_range",
        ),
        Index("ix_classifications_update_id", "update_id"),
        Index("ix_classifications_competitor_id", "competitor_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Classification id={self.id} update_id={self.update_id} "
            f"category={self.category!r} confidence={self.confidence}>"
        )

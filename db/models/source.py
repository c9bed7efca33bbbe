"""
db/models/source.py

Source model - one scraped page or feed belonging to a competitor.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from db.models.competitor import Competitor


class Source(Base, CreatedAtMixin):
    """
    Represents a monitored URL for one competitor.

    item_selector is the CSS selector used to split the page into items.
    last_status records the outcome of the most recent scrape.
    """

    __tablename__ = "sources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    competitor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("competitors.id", ondelete="CASCADE"),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    last_status: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Outcome of the latest scrape: success | failed",
    )

    item_selector: Mapped[str | None] = mapped_column(String(255), nullable=True)

    url: Mapped[str] = mapped_column(String(2048), nullable=False)

    # ── Relationships ──────────────────────────────────────────────────────────

    competitor: Mapped["Competitor"] = relationship(
        "Competitor",
        back_populates="sources",
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_sources_competitor_id", "competitor_id"),
        Index("ix_sources_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Source id={self.id} name={self.name!r} competitor_id={self.competitor_id}>"

"""
db/models/digest.py

Digest model - a periodic summary over classified updates.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class Digest(Base, CreatedAtMixin):
    """
    Represents a generated digest.

    classified_updates holds update ids rather than a join table; the digest
    is a snapshot and is never re-linked.
    """

    __tablename__ = "digests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    classified_updates: Mapped[list[int]] = mapped_column(
        ARRAY(Integer),
        nullable=False,
        default=list,
    )

    def __repr__(self) -> str:
        return f"<Digest id={self.id} title={self.title!r}>"

"""
Record schemas and seed rows for the in-memory fallback tables.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from db.fallback.entities import Entity


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int = Field(..., gt=0)


class CompetitorRecord(_Record):
    name: str
    is_active: bool = True


class SourceRecord(_Record):
    name: str
    competitor_id: int = Field(..., gt=0)
    is_active: bool = True
    last_status: str | None = None
    item_selector: str | None = None
    url: str
    created_at: datetime


class UpdateRecord(_Record):
    content: str
    source_id: int = Field(..., gt=0)
    competitor_id: int = Field(..., gt=0)
    scraped_at: datetime
    severity: str


class ClassificationRecord(_Record):
    update_id: int = Field(..., gt=0)
    competitor_id: int = Field(..., gt=0)
    category: str
    impact: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class DigestRecord(_Record):
    title: str
    content: str
    classified_updates: list[int] = Field(default_factory=list)
    created_at: datetime


RECORD_MODELS: dict[Entity, type[_Record]] = {
    Entity.COMPETITORS: CompetitorRecord,
    Entity.SOURCES: SourceRecord,
    Entity.UPDATES: UpdateRecord,
    Entity.CLASSIFICATIONS: ClassificationRecord,
    Entity.DIGESTS: DigestRecord,
}


def build_seed_rows(now: datetime | None = None) -> dict[Entity, list[dict[str, Any]]]:
    """
    Return the fixed demo rows, one list per entity.

    Every foreign key points at a row defined here.
    """

    now = now or datetime.now(timezone.utc)
    seed: dict[Entity, list[_Record]] = {
        Entity.COMPETITORS: [
            CompetitorRecord(id=1, name="Competitor 1", is_active=True),
            CompetitorRecord(id=2, name="Competitor 2", is_active=True),
        ],
        Entity.SOURCES: [
            SourceRecord(
                id=1,
                name="Source 1",
                competitor_id=1,
                is_active=True,
                last_status="success",
                item_selector=".post",
                url="https://example.com/competitor1",
                created_at=now,
            ),
            SourceRecord(
                id=2,
                name="Source 2",
                competitor_id=2,
                is_active=True,
                last_status="success",
                item_selector=".blog",
                url="https://example.com/competitor2",
                created_at=now,
            ),
        ],
        Entity.UPDATES: [
            UpdateRecord(
                id=1,
                content="Competitor 1 launched new feature X",
                source_id=1,
                competitor_id=1,
                scraped_at=now,
                severity="medium",
            ),
            UpdateRecord(
                id=2,
                content="Competitor 2 updated pricing strategy",
                source_id=2,
                competitor_id=2,
                scraped_at=now,
                severity="high",
            ),
        ],
        Entity.CLASSIFICATIONS: [
            ClassificationRecord(
                id=1,
                update_id=1,
                competitor_id=1,
                category="feature",
                impact="medium",
                confidence=0.85,
            ),
            ClassificationRecord(
                id=2,
                update_id=2,
                competitor_id=2,
                category="pricing",
                impact="high",
                confidence=0.75,
            ),
        ],
        Entity.DIGESTS: [
            DigestRecord(
                id=1,
                title="Weekly Digest",
                content="Summary of competitor updates...",
                classified_updates=[1, 2],
                created_at=now,
            ),
        ],
    }
    return {entity: [record.model_dump() for record in rows] for entity, rows in seed.items()}

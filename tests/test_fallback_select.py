"""
tests/test_fallback_select.py

Read path of the in-memory fallback database.

Pure Python: the fallback never touches a database, and every query is
resolved from the seeded TableStore.
"""

from __future__ import annotations

import json
import logging

import pytest
from sqlalchemy import func

from db.fallback import Entity, MemoryDatabase, TableStore
from db.models import Classification, Competitor, Digest, Source, Update

ALL_TABLES = [Competitor, Source, Update, Classification, Digest]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def db() -> MemoryDatabase:
    """Fresh handle over freshly seeded tables."""
    return MemoryDatabase(TableStore.seeded())


@pytest.fixture()
def db_with_inactive() -> MemoryDatabase:
    store = TableStore.seeded()
    store.append(Entity.COMPETITORS, [{"id": 3, "name": "Dormant Co", "is_active": False}])
    store.append(
        Entity.SOURCES,
        [
            {
                "id": 3,
                "name": "Source 3",
                "competitor_id": 3,
                "is_active": False,
                "last_status": "failed",
                "item_selector": ".news",
                "url": "https://example.com/competitor3",
                "created_at": "2026-01-01T00:00:00+00:00",
            }
        ],
    )
    store.append(
        Entity.UPDATES,
        [
            {
                "id": 3,
                "content": "Dormant Co posted a job listing",
                "source_id": 3,
                "competitor_id": 3,
                "scraped_at": "2026-01-02T00:00:00+00:00",
                "severity": "low",
            }
        ],
    )
    return MemoryDatabase(store)


# ---------------------------------------------------------------------------
# Plain selects
# ---------------------------------------------------------------------------


class TestPlainSelect:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("table", ALL_TABLES)
    async def test_every_table_resolves(self, db: MemoryDatabase, table: type) -> None:
        rows = await db.select().from_(table).execute()
        assert isinstance(rows, list)
        assert rows

    @pytest.mark.asyncio
    async def test_seed_row_counts(self, db: MemoryDatabase) -> None:
        assert len(await db.select().from_(Competitor).execute()) == 2
        assert len(await db.select().from_(Source).execute()) == 2
        assert len(await db.select().from_(Update).execute()) == 2
        assert len(await db.select().from_(Classification).execute()) == 2
        assert len(await db.select().from_(Digest).execute()) == 1

    @pytest.mark.asyncio
    async def test_active_filter_applies_to_competitors_and_sources_only(
        self, db_with_inactive: MemoryDatabase
    ) -> None:
        competitors = await db_with_inactive.select().from_(Competitor).execute()
        sources = await db_with_inactive.select().from_(Source).execute()
        updates = await db_with_inactive.select().from_(Update).execute()

        assert [row["id"] for row in competitors] == [1, 2]
        assert [row["id"] for row in sources] == [1, 2]
        assert [row["id"] for row in updates] == [1, 2, 3]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("table", ["competitors", Entity.COMPETITORS, Competitor.__table__])
    async def test_table_can_be_named_several_ways(self, db: MemoryDatabase, table: object) -> None:
        rows = await db.select().from_(table).execute()
        assert [row["name"] for row in rows] == ["Competitor 1", "Competitor 2"]

    @pytest.mark.asyncio
    async def test_unknown_table_resolves_to_empty(self, db: MemoryDatabase) -> None:
        assert await db.select().from_("pricing_pages").execute() == []
        assert await db.select().from_(object()).execute() == []

    @pytest.mark.asyncio
    async def test_filters_ordering_and_limits_are_ignored(self, db: MemoryDatabase) -> None:
        query = (
            db.select()
            .from_(Update)
            .where(Update.severity == "high")
            .order_by(Update.scraped_at.desc())
            .limit(1)
            .group_by(Update.competitor_id)
        )
        rows = await query.execute()
        assert [row["id"] for row in rows] == [1, 2]
        assert [name for name, _, _ in query.directives] == ["where", "order_by", "limit", "group_by"]

    @pytest.mark.asyncio
    async def test_modifiers_accept_arbitrary_arguments(self, db: MemoryDatabase) -> None:
        rows = await (
            db.select()
            .from_(Digest)
            .where(None, "nonsense", flag=True)
            .limit("ten")
            .order_by()
            .execute()
        )
        assert rows[0]["classified_updates"] == [1, 2]


# ---------------------------------------------------------------------------
# Count projections
# ---------------------------------------------------------------------------


class TestCount:
    @pytest.mark.asyncio
    async def test_count_sources(self, db: MemoryDatabase) -> None:
        assert await db.select({"count": func.count()}).from_(Source).execute() == [{"count": 2}]

    @pytest.mark.asyncio
    async def test_count_uses_active_rows_for_flagged_tables(
        self, db_with_inactive: MemoryDatabase
    ) -> None:
        counts = {
            table.__tablename__: (await db_with_inactive.select({"count": func.count()}).from_(table).execute())[0]["count"]
            for table in (Competitor, Source, Update, Classification)
        }
        assert counts == {"competitors": 2, "sources": 2, "updates": 3, "classifications": 2}

    @pytest.mark.asyncio
    async def test_count_bypasses_join_expansion(self, db: MemoryDatabase) -> None:
        rows = await (
            db.select({"count": func.count()})
            .from_(Update)
            .left_join(Source, Update.source_id == Source.id)
            .execute()
        )
        assert rows == [{"count": 2}]

    @pytest.mark.asyncio
    async def test_count_of_digests_and_unknown_tables_is_zero(self, db: MemoryDatabase) -> None:
        assert await db.select({"count": func.count()}).from_(Digest).execute() == [{"count": 0}]
        assert await db.select({"count": func.count()}).from_("nope").execute() == [{"count": 0}]

    @pytest.mark.asyncio
    async def test_projection_without_count_returns_rows(self, db: MemoryDatabase) -> None:
        rows = await db.select({"name": Competitor.name}).from_(Competitor).execute()
        assert len(rows) == 2
        assert rows[0]["id"] == 1


# ---------------------------------------------------------------------------
# Join expansion
# ---------------------------------------------------------------------------


class TestJoins:
    @pytest.mark.asyncio
    async def test_sources_join_attaches_competitor(self, db: MemoryDatabase) -> None:
        rows = await (
            db.select()
            .from_(Source)
            .left_join(Competitor, Source.competitor_id == Competitor.id)
            .execute()
        )
        assert len(rows) == 2
        for row in rows:
            assert set(row) == {"sources", "competitors"}
            assert row["competitors"]["id"] == row["sources"]["competitor_id"]

    @pytest.mark.asyncio
    async def test_updates_join_attaches_related_rows(self, db: MemoryDatabase) -> None:
        rows = await (
            db.select()
            .from_(Update)
            .left_join(Competitor, Update.competitor_id == Competitor.id)
            .left_join(Source, Update.source_id == Source.id)
            .left_join(Classification, Classification.update_id == Update.id)
            .execute()
        )
        by_id = {row["updates"]["id"]: row for row in rows}

        first = by_id[1]
        assert first["classifications"]["category"] == "feature"
        assert first["competitors"]["id"] == first["updates"]["competitor_id"]
        assert first["sources"]["id"] == first["updates"]["source_id"]
        assert by_id[2]["classifications"]["category"] == "pricing"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("join_name", ["left_join", "inner_join", "right_join"])
    async def test_join_direction_is_not_distinguished(self, db: MemoryDatabase, join_name: str) -> None:
        query = db.select().from_(Source)
        rows = await getattr(query, join_name)(Competitor).execute()
        assert all("competitors" in row for row in rows)

    @pytest.mark.asyncio
    async def test_update_without_classification_yields_none(
        self, db_with_inactive: MemoryDatabase
    ) -> None:
        rows = await db_with_inactive.select().from_(Update).inner_join(Classification).execute()
        orphan = next(row for row in rows if row["updates"]["id"] == 3)
        assert orphan["classifications"] is None
        # the owning competitor is inactive but still attached
        assert orphan["competitors"]["name"] == "Dormant Co"

    @pytest.mark.asyncio
    async def test_only_first_classification_is_attached(self) -> None:
        store = TableStore.seeded()
        store.append(
            Entity.CLASSIFICATIONS,
            [
                {
                    "id": 3,
                    "update_id": 1,
                    "competitor_id": 1,
                    "category": "hiring",
                    "impact": "low",
                    "confidence": 0.4,
                }
            ],
        )
        rows = await MemoryDatabase(store).select().from_(Update).left_join(Classification).execute()
        assert len(rows) == 2
        assert rows[0]["classifications"]["id"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("table", [Competitor, Classification, Digest])
    async def test_tables_without_join_mapping_are_unchanged(self, db: MemoryDatabase, table: type) -> None:
        plain = await db.select().from_(table).execute()
        joined = await db.select().from_(table).left_join(Update).execute()
        assert joined == plain


# ---------------------------------------------------------------------------
# Resolution logging
# ---------------------------------------------------------------------------


class TestResolutionLogging:
    @pytest.mark.asyncio
    async def test_resolution_is_logged_at_debug(
        self, db: MemoryDatabase, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="db.fallback.engine")
        await db.select().from_(Update).left_join(Source).where(Update.id == 1).limit(5).execute()

        records = [r for r in caplog.records if "fallback_query_resolved" in r.getMessage()]
        assert len(records) == 1
        assert records[0].levelno == logging.DEBUG
        payload = json.loads(records[0].getMessage())
        assert payload["table"] == "updates"
        assert payload["joins"] is True
        assert payload["ignored_directives"] == ["where", "limit"]
        assert payload["rows"] == 2

    @pytest.mark.asyncio
    async def test_repeat_execute_logs_once(
        self, db: MemoryDatabase, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="db.fallback.engine")
        query = db.select().from_(Competitor)
        await query.execute()
        await query.execute()
        assert caplog.text.count("fallback_query_resolved") == 1

    @pytest.mark.asyncio
    async def test_silent_above_debug(self, db: MemoryDatabase, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="db.fallback.engine")
        await db.select().from_(Competitor).execute()
        assert "fallback_query_resolved" not in caplog.text


# ---------------------------------------------------------------------------
# Resolution semantics
# ---------------------------------------------------------------------------


class TestResolution:
    @pytest.mark.asyncio
    async def test_repeat_execute_returns_equal_result(self, db: MemoryDatabase) -> None:
        query = db.select().from_(Source).left_join(Competitor)
        assert await query.execute() == await query.execute()

    @pytest.mark.asyncio
    async def test_results_are_isolated_from_store(self, db: MemoryDatabase) -> None:
        rows = await db.select().from_(Competitor).execute()
        rows[0]["name"] = "Renamed"
        rows.clear()

        again = await db.select().from_(Competitor).execute()
        assert again[0]["name"] == "Competitor 1"

    @pytest.mark.asyncio
    async def test_snapshot_taken_when_table_is_bound(self, db: MemoryDatabase) -> None:
        query = db.select().from_(Competitor)
        db.store.append(Entity.COMPETITORS, [{"id": 3, "name": "Late Co", "is_active": True}])

        assert len(await query.execute()) == 2
        assert len(await db.select().from_(Competitor).execute()) == 3

"""Tests for the SQLite storage layer and the SQLite signal source."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from conftest import DEFINITION_ROWS, NOW
from livingscore.data.adapters.sqlite_source import SqliteSignalSource
from livingscore.data.fixtures import seed_from_file, seed_from_mapping
from livingscore.engine.catalog import SignalCatalog
from livingscore.engine.models import Medal
from livingscore.engine.service import SignalService
from livingscore.exceptions import FetchError
from livingscore.storage.database import Database
from livingscore.storage.migrations import apply_migrations, discover_migrations, ensure_schema
from livingscore.storage.queries import (
    get_event_taps,
    get_legacy_place_signals,
    get_place_taps,
    get_place_taps_batch,
    insert_event_review,
    insert_legacy_signal,
    insert_place_review,
    list_signal_definitions,
    upsert_signal_definition,
)


def _load_definitions(db: Database) -> None:
    for row in DEFINITION_ROWS:
        upsert_signal_definition(
            db, row["id"], slug=row["slug"], label=row["label"],
            signal_type=row["signal_type"], icon=row["icon_emoji"], color=row["color"],
            prefix=row["prefix"], display_order=row["display_order"],
        )


class TestDatabase:
    """Test Database connection and basic operations."""

    def test_connect_creates_file(self, tmp_path):
        db_path = tmp_path / "nested" / "test.db"
        assert not db_path.exists()
        db = Database(db_path)
        db.connect()
        assert db_path.exists()
        db.close()

    def test_memory_database(self):
        with Database(":memory:") as db:
            assert db.in_memory
            assert db.fetchone("SELECT 1 AS one")["one"] == 1

    def test_context_manager_closes(self, tmp_path):
        with Database(tmp_path / "test.db") as db:
            db.execute("SELECT 1")
        assert db._conn is None

    def test_schema_version_empty(self, tmp_path):
        db = Database(tmp_path / "test.db")
        assert db.schema_version() == 0
        db.close()

    def test_transaction_rolls_back(self, test_db):
        with pytest.raises(sqlite3.IntegrityError):
            with test_db.transaction() as cur:
                cur.execute(
                    "INSERT INTO place_reviews (id, place_id, created_at) VALUES ('r1', 'p1', ?)",
                    (NOW.isoformat(),),
                )
                cur.execute(
                    "INSERT INTO place_review_signal_taps (review_id, place_id, signal_id, intensity) "
                    "VALUES ('r1', 'p1', 'good_food', 9)",
                )
        assert test_db.fetchone("SELECT COUNT(*) AS n FROM place_reviews")["n"] == 0


class TestMigrations:
    """Test migration system."""

    def test_initial_migration(self, test_db):
        assert test_db.schema_version() >= 1

    def test_tables_exist(self, test_db):
        tables = test_db.fetchall(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        table_names = {r["name"] for r in tables}
        expected = {
            "_schema_version", "review_items", "place_reviews",
            "place_review_signal_taps", "place_signals",
            "event_reviews", "event_review_signal_taps",
        }
        assert expected.issubset(table_names)

    def test_idempotent(self, test_db):
        version = test_db.schema_version()
        assert ensure_schema(test_db) == version

    def test_discover_sorted(self):
        versions = [v for v, _, _ in discover_migrations()]
        assert versions == sorted(versions)
        assert versions[0] == 1

    def test_missing_directory(self, tmp_path):
        assert discover_migrations(tmp_path / "nope") == []

    def test_broken_migration_raises(self, tmp_path):
        (tmp_path / "001_broken.sql").write_text("CREATE TABLE (;")
        with Database(":memory:") as db:
            with pytest.raises(RuntimeError, match="001_broken.sql"):
                apply_migrations(db, tmp_path)


class TestQueries:
    def test_definitions_round_trip(self, memory_db):
        _load_definitions(memory_db)
        rows = list_signal_definitions(memory_db)
        assert len(rows) == len(DEFINITION_ROWS)
        good_food = next(r for r in rows if r["id"] == "good_food")
        assert good_food["signal_type"] == "best_for"
        assert good_food["icon_emoji"] == "🍽️"

    def test_definitions_upsert_updates(self, memory_db):
        upsert_signal_definition(memory_db, "cozy", slug="r_cozy", label="Cozy", signal_type="vibe")
        upsert_signal_definition(memory_db, "cozy", slug="r_cozy", label="Snug", signal_type="vibe")
        rows = list_signal_definitions(memory_db)
        assert [r["label"] for r in rows] == ["Snug"]

    def test_inactive_hidden(self, memory_db):
        upsert_signal_definition(
            memory_db, "old", slug="r_old", label="Old", signal_type="vibe", is_active=False,
        )
        assert list_signal_definitions(memory_db) == []
        assert len(list_signal_definitions(memory_db, active_only=False)) == 1

    def test_slug_prefix(self, memory_db):
        _load_definitions(memory_db)
        rows = list_signal_definitions(memory_db, slug_prefix="event_")
        assert {r["id"] for r in rows} == {"event_great_sound", "event_long_lines"}

    def test_place_review_taps_share_timestamp(self, memory_db):
        created = NOW - timedelta(days=3)
        insert_place_review(memory_db, "p1", [("good_food", 3), ("loud", 1)], created_at=created)
        rows = get_place_taps(memory_db, "p1")
        assert [(r["signal_id"], r["intensity"]) for r in rows] == [("good_food", 3), ("loud", 1)]
        assert {r["created_at"] for r in rows} == {created.isoformat()}

    def test_naive_timestamp_stored_as_utc(self, memory_db):
        insert_place_review(memory_db, "p1", [("cozy", 1)], created_at=datetime(2026, 5, 1, 8, 0))
        assert get_place_taps(memory_db, "p1")[0]["created_at"] == "2026-05-01T08:00:00+00:00"

    def test_intensity_check_constraint(self, memory_db):
        with pytest.raises(sqlite3.IntegrityError):
            insert_place_review(memory_db, "p1", [("cozy", 4)])
        assert get_place_taps(memory_db, "p1") == []
        assert memory_db.fetchone("SELECT COUNT(*) AS n FROM place_reviews")["n"] == 0

    def test_batch(self, memory_db):
        insert_place_review(memory_db, "p1", [("good_food", 1)], created_at=NOW)
        insert_place_review(memory_db, "p2", [("loud", 2)], created_at=NOW)
        insert_place_review(memory_db, "p3", [("cozy", 2)], created_at=NOW)
        rows = get_place_taps_batch(memory_db, ["p1", "p2"])
        assert {(r["place_id"], r["signal_id"]) for r in rows} == {("p1", "good_food"), ("p2", "loud")}
        assert get_place_taps_batch(memory_db, []) == []

    def test_legacy_signals(self, memory_db):
        insert_legacy_signal(memory_db, "p1", "good_food", signal_name="Good Food", created_at=NOW)
        rows = get_legacy_place_signals(memory_db, "p1")
        assert rows == [{"signal_id": "good_food", "signal_name": "Good Food",
                         "created_at": NOW.isoformat()}]

    def test_event_taps(self, memory_db):
        insert_event_review(memory_db, "e1", [("event_great_sound", 2)], created_at=NOW)
        rows = get_event_taps(memory_db, "e1")
        assert [(r["signal_id"], r["intensity"]) for r in rows] == [("event_great_sound", 2)]
        assert get_event_taps(memory_db, "e2") == []


class TestSqliteSignalSource:
    def test_errors_become_fetch_errors(self):
        """Reading before migrations fails with FetchError, not sqlite3.Error."""
        with Database(":memory:") as db:
            with pytest.raises(FetchError):
                SqliteSignalSource(db).fetch_place_taps("p1")

    def test_service_over_sqlite(self, memory_db):
        _load_definitions(memory_db)
        for _ in range(3):
            insert_place_review(memory_db, "p1", [("good_food", 3)], created_at=NOW)
        insert_place_review(memory_db, "p1", [("cozy", 3)], created_at=NOW - timedelta(days=1))
        insert_place_review(memory_db, "p1", [("loud", 1)], created_at=NOW - timedelta(days=90))

        service = SignalService(
            SqliteSignalSource(memory_db),
            catalog=SignalCatalog(),
            event_catalog=SignalCatalog(slug_prefix="event_"),
        )
        result = service.fetch_place_signals("p1", now=NOW)
        assert result.best_for[0].current_score == 9.0
        assert result.best_for[0].review_count == 3
        assert result.heads_up[0].is_ghost
        assert Medal.VIBE_CHECK in result.medals

    def test_legacy_fallback_over_sqlite(self, memory_db):
        _load_definitions(memory_db)
        for days in (1, 2, 3):
            insert_legacy_signal(memory_db, "p9", "families", created_at=NOW - timedelta(days=days))
        service = SignalService(
            SqliteSignalSource(memory_db),
            catalog=SignalCatalog(),
            event_catalog=SignalCatalog(slug_prefix="event_"),
        )
        result = service.fetch_place_signals("p9", now=NOW)
        assert result.best_for[0].tap_total == 3
        assert result.best_for[0].review_count == 3

    def test_thermometer_batch_over_sqlite(self, memory_db):
        _load_definitions(memory_db)
        insert_place_review(memory_db, "p1", [("good_food", 2), ("loud", 1)], created_at=NOW)
        service = SignalService(
            SqliteSignalSource(memory_db),
            catalog=SignalCatalog(),
            event_catalog=SignalCatalog(slug_prefix="event_"),
        )
        readings = service.fetch_places_thermometer(["p1", "p2"], now=NOW)
        assert readings["p1"] == {"positive_taps": 2, "negative_taps": 1}
        assert readings["p2"] == {"positive_taps": 0, "negative_taps": 0}


class TestFixtures:
    def test_seed_from_mapping(self, memory_db):
        data = {
            "signals": [
                {"id": "good_food", "slug": "r_good_food", "label": "Good Food",
                 "category": "best_for", "prefix": "r_"},
                {"id": "loud", "label": "Loud", "category": "heads_up"},
            ],
            "reviews": [
                {"place_id": "p1", "days_ago": 10, "taps": {"good_food": 3, "loud": 1}},
                {"place_id": "p1", "created_at": "2026-05-01T10:00:00Z", "taps": {"good_food": 1}},
            ],
            "legacy_signals": [{"place_id": "p2", "signal_id": "good_food", "days_ago": 40}],
            "event_reviews": [{"event_id": "e1", "days_ago": 1, "taps": {"event_great_sound": 2}}],
        }
        counts = seed_from_mapping(memory_db, data, now=NOW)
        assert counts == {"signals": 2, "reviews": 2, "legacy_signals": 1, "event_reviews": 1}

        assert list_signal_definitions(memory_db, slug_prefix="loud")[0]["slug"] == "loud"
        taps = get_place_taps(memory_db, "p1")
        assert len(taps) == 3
        assert (NOW - timedelta(days=10)).isoformat() in {t["created_at"] for t in taps}
        assert len(get_legacy_place_signals(memory_db, "p2")) == 1
        assert len(get_event_taps(memory_db, "e1")) == 1

    def test_seed_from_file(self, memory_db, tmp_path):
        fixture = tmp_path / "fixture.yaml"
        fixture.write_text(
            "signals:\n"
            "  - {id: cozy, slug: r_cozy, label: Cozy, category: vibe}\n"
            "reviews:\n"
            "  - {place_id: p1, days_ago: 0, taps: {cozy: 2}}\n"
        )
        counts = seed_from_file(memory_db, fixture, now=NOW)
        assert counts["signals"] == 1
        assert get_place_taps(memory_db, "p1")[0]["intensity"] == 2

    def test_empty_fixture(self, memory_db):
        assert seed_from_mapping(memory_db, {}) == {
            "signals": 0, "reviews": 0, "legacy_signals": 0, "event_reviews": 0,
        }


class TestUtcStorage:
    def test_offset_timestamps_normalized(self, memory_db):
        plus_two = timezone(timedelta(hours=2))
        insert_event_review(
            memory_db, "e1", [("event_long_lines", 1)],
            created_at=datetime(2026, 5, 1, 12, 0, tzinfo=plus_two),
        )
        assert get_event_taps(memory_db, "e1")[0]["created_at"] == "2026-05-01T10:00:00+00:00"

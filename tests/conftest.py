"""Shared test fixtures for Living Score.

Provides a fixed clock, a signal definition set, an in-memory backend,
loaded catalogs and SQLite databases across all test modules.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from livingscore.engine.catalog import SignalCatalog
from livingscore.engine.models import TapEvent
from livingscore.engine.service import SignalService
from livingscore.exceptions import FetchError
from livingscore.storage.database import Database
from livingscore.storage.migrations import MIGRATION_DIR, ensure_schema

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Signal definitions (backend row shape)
# ---------------------------------------------------------------------------

DEFINITION_ROWS: list[dict[str, Any]] = [
    {"id": "good_food", "slug": "r_good_food", "label": "Good Food", "icon_emoji": "🍽️",
     "signal_type": "best_for", "color": "#0A84FF", "prefix": "r_", "display_order": 1},
    {"id": "families", "slug": "r_families", "label": "Good for Families", "icon_emoji": "👨‍👩‍👧",
     "signal_type": "best_for", "color": "#0A84FF", "prefix": "r_", "display_order": 2},
    {"id": "fast_service", "slug": "r_fast_service", "label": "Fast Service", "icon_emoji": "⚡",
     "signal_type": "best_for", "color": "#0A84FF", "prefix": "r_", "display_order": 3},
    {"id": "cozy", "slug": "r_cozy", "label": "Cozy", "icon_emoji": "🛋️",
     "signal_type": "vibe", "color": "#8B5CF6", "prefix": "r_", "display_order": 1},
    {"id": "slow_service", "slug": "r_slow_service", "label": "Slow Service", "icon_emoji": "🐢",
     "signal_type": "heads_up", "color": "#FF9500", "prefix": "r_", "display_order": 1},
    {"id": "loud", "slug": "r_loud", "label": "Loud", "icon_emoji": "📢",
     "signal_type": "heads_up", "color": "#FF9500", "prefix": "r_", "display_order": 2},
    {"id": "great_coffee", "slug": "c_great_coffee", "label": "Great Coffee", "icon_emoji": "☕",
     "signal_type": "best_for", "color": "#0A84FF", "prefix": "c_", "display_order": 1},
    {"id": "pro_pick", "slug": "pro_pick", "label": "Pro Pick", "icon_emoji": "🏅",
     "signal_type": "pro_endorsement", "color": "", "prefix": "r_", "display_order": 9},
    {"id": "event_great_sound", "slug": "event_great_sound", "label": "Great Sound",
     "icon_emoji": "🔊", "signal_type": "best_for", "color": "#0A84FF", "prefix": "",
     "display_order": 1},
    {"id": "event_long_lines", "slug": "event_long_lines", "label": "Long Lines",
     "icon_emoji": "⏳", "signal_type": "heads_up", "color": "#FF9500", "prefix": "",
     "display_order": 1},
]


def tap_row(signal_id: str, intensity: int, days_ago: float, now: datetime = NOW) -> dict[str, Any]:
    """Primary-feed row with the review timestamp embedded PostgREST-style."""
    created = now - timedelta(days=days_ago)
    return {
        "signal_id": signal_id,
        "intensity": intensity,
        "place_reviews": {"created_at": created.isoformat()},
    }


def tap(signal_id: str, intensity: int, days_ago: float, now: datetime = NOW) -> TapEvent:
    return TapEvent(signal_id, intensity, now - timedelta(days=days_ago))


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------

class FakeSource:
    """Dict-backed SignalSource. ``fail`` names operations that raise."""

    def __init__(
        self,
        definitions: list[dict[str, Any]] | None = None,
        place_taps: dict[str, list[dict[str, Any]]] | None = None,
        legacy: dict[str, list[dict[str, Any]]] | None = None,
        event_taps: dict[str, list[dict[str, Any]]] | None = None,
        fail: tuple[str, ...] = (),
    ) -> None:
        self.definitions = DEFINITION_ROWS if definitions is None else definitions
        self.place_taps = place_taps or {}
        self.legacy = legacy or {}
        self.event_taps = event_taps or {}
        self.fail = set(fail)
        self.calls: list[str] = []

    def _call(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail:
            raise FetchError(operation, "backend unavailable")

    def fetch_signal_definitions(self, slug_prefix=None):
        self._call("definitions")
        return [
            d for d in self.definitions
            if not slug_prefix or str(d.get("slug", "")).startswith(slug_prefix)
        ]

    def fetch_place_taps(self, place_id):
        self._call("place_taps")
        return list(self.place_taps.get(place_id, []))

    def fetch_legacy_place_taps(self, place_id):
        self._call("legacy")
        return list(self.legacy.get(place_id, []))

    def fetch_place_taps_batch(self, place_ids):
        self._call("batch")
        return [
            {**row, "place_id": pid}
            for pid in place_ids
            for row in self.place_taps.get(pid, [])
        ]

    def fetch_event_taps(self, event_id):
        self._call("event_taps")
        return list(self.event_taps.get(event_id, []))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def now() -> datetime:
    """Fixed reference time for decay calculations."""
    return NOW


@pytest.fixture
def make_source():
    """Factory for FakeSource backends."""
    return FakeSource


@pytest.fixture
def catalog() -> SignalCatalog:
    """Place catalog loaded from DEFINITION_ROWS."""
    cat = SignalCatalog()
    assert cat.load(FakeSource())
    return cat


@pytest.fixture
def make_service():
    """Build a SignalService with fresh (not process-wide) catalogs."""
    def _make(source: FakeSource, config=None) -> SignalService:
        return SignalService(
            source,
            config=config,
            catalog=SignalCatalog(),
            event_catalog=SignalCatalog(slug_prefix="event_"),
        )
    return _make


@pytest.fixture
def test_db(tmp_path: Path) -> Database:
    """File database with schema applied."""
    db = Database(tmp_path / "test.db")
    ensure_schema(db)
    yield db
    db.close()


@pytest.fixture
def memory_db() -> Database:
    """In-memory database with the initial migration applied directly."""
    db = Database(":memory:")
    db.executescript((MIGRATION_DIR / "001_initial.sql").read_text())
    yield db
    db.close()

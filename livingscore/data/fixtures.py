"""Seed the local SQLite store from a YAML fixture.

Fixture layout::

    signals:
      - {id: r_good_food, slug: r_good_food, label: Good Food,
         category: best_for, icon: "🍽️", prefix: r_}
    reviews:
      - {place_id: p1, days_ago: 12, taps: {r_good_food: 3}}
      - {place_id: p1, created_at: "2026-01-05T10:00:00Z", taps: {r_slow: 1}}
    legacy_signals:
      - {place_id: p2, signal_id: r_good_food, days_ago: 40}
    event_reviews:
      - {event_id: e1, days_ago: 1, taps: {event_loud: 2}}

``days_ago`` is relative to the seeding time; ``created_at`` wins when
both are given.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, TypedDict

import yaml

from livingscore.storage import queries
from livingscore.storage.database import Database

logger = logging.getLogger(__name__)


class SeedCounts(TypedDict):
    signals: int
    reviews: int
    legacy_signals: int
    event_reviews: int


def _timestamp(entry: dict[str, Any], now: datetime) -> datetime | str:
    if entry.get("created_at"):
        value = entry["created_at"]
        return value if isinstance(value, (str, datetime)) else str(value)
    return now - timedelta(days=float(entry.get("days_ago", 0)))


def _taps(entry: dict[str, Any]) -> list[tuple[str, int]]:
    return [(str(signal_id), int(intensity)) for signal_id, intensity in (entry.get("taps") or {}).items()]


def seed_from_mapping(
    db: Database,
    data: dict[str, Any],
    now: datetime | None = None,
) -> SeedCounts:
    """Insert every section of a fixture mapping. Returns row counts."""
    now = now or datetime.now(timezone.utc)
    counts = SeedCounts(signals=0, reviews=0, legacy_signals=0, event_reviews=0)

    for item in data.get("signals") or []:
        queries.upsert_signal_definition(
            db,
            str(item["id"]),
            slug=str(item.get("slug") or item["id"]),
            label=str(item["label"]),
            signal_type=str(item.get("category") or item.get("signal_type")),
            icon=str(item.get("icon", "")),
            color=str(item.get("color", "")),
            prefix=str(item.get("prefix", "")),
            display_order=int(item.get("display_order", 0)),
            is_active=bool(item.get("is_active", True)),
        )
        counts["signals"] += 1

    for review in data.get("reviews") or []:
        queries.insert_place_review(
            db, str(review["place_id"]), _taps(review),
            created_at=_timestamp(review, now), user_id=review.get("user_id"),
        )
        counts["reviews"] += 1

    for row in data.get("legacy_signals") or []:
        queries.insert_legacy_signal(
            db, str(row["place_id"]), str(row["signal_id"]),
            signal_name=row.get("signal_name"), created_at=_timestamp(row, now),
        )
        counts["legacy_signals"] += 1

    for review in data.get("event_reviews") or []:
        queries.insert_event_review(
            db, str(review["event_id"]), _taps(review),
            created_at=_timestamp(review, now), user_id=review.get("user_id"),
        )
        counts["event_reviews"] += 1

    logger.info(
        "Seeded %d signals, %d reviews, %d legacy signals, %d event reviews",
        counts["signals"], counts["reviews"], counts["legacy_signals"], counts["event_reviews"],
    )
    return counts


def seed_from_file(db: Database, path: str | Path, now: datetime | None = None) -> SeedCounts:
    """Load a YAML fixture file into the database."""
    with open(Path(path).expanduser()) as f:
        data = yaml.safe_load(f) or {}
    return seed_from_mapping(db, data, now=now)

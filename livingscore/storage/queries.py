"""Named query functions for the local signal store."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from livingscore.storage.database import Database


def _iso(ts: datetime | str | None) -> str:
    if ts is None:
        ts = datetime.now(timezone.utc)
    if isinstance(ts, datetime):
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(timezone.utc).isoformat()
    return ts


# ---------------------------------------------------------------------------
# Signal definitions
# ---------------------------------------------------------------------------

def upsert_signal_definition(
    db: Database,
    id: str,
    *,
    slug: str,
    label: str,
    signal_type: str,
    icon: str = "",
    color: str = "",
    prefix: str = "",
    display_order: int = 0,
    is_active: bool = True,
) -> None:
    """Insert or update one row of review_items."""
    db.execute(
        """INSERT INTO review_items (
            id, slug, label, icon_emoji, signal_type, color, prefix,
            display_order, is_active
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            slug=excluded.slug, label=excluded.label,
            icon_emoji=excluded.icon_emoji, signal_type=excluded.signal_type,
            color=excluded.color, prefix=excluded.prefix,
            display_order=excluded.display_order, is_active=excluded.is_active
        """,
        (id, slug, label, icon, signal_type, color, prefix, display_order, int(is_active)),
    )
    db.conn.commit()


def list_signal_definitions(
    db: Database,
    *,
    active_only: bool = True,
    slug_prefix: str | None = None,
) -> list[dict[str, Any]]:
    """Signal definitions in display order."""
    sql = "SELECT * FROM review_items WHERE 1 = 1"
    params: list[Any] = []
    if active_only:
        sql += " AND is_active = 1"
    if slug_prefix:
        sql += " AND slug LIKE ?"
        params.append(f"{slug_prefix}%")
    sql += " ORDER BY display_order, id"
    return [dict(r) for r in db.fetchall(sql, tuple(params))]


# ---------------------------------------------------------------------------
# Place reviews and taps
# ---------------------------------------------------------------------------

def insert_place_review(
    db: Database,
    place_id: str,
    taps: list[tuple[str, int]],
    *,
    created_at: datetime | str | None = None,
    user_id: str | None = None,
    review_id: str | None = None,
) -> str:
    """Insert a review and its (signal_id, intensity) taps. Returns review id."""
    review_id = review_id or str(uuid.uuid4())
    with db.transaction() as cur:
        cur.execute(
            """INSERT INTO place_reviews (id, place_id, user_id, created_at)
            VALUES (?, ?, ?, ?)""",
            (review_id, place_id, user_id, _iso(created_at)),
        )
        cur.executemany(
            """INSERT INTO place_review_signal_taps (review_id, place_id, signal_id, intensity)
            VALUES (?, ?, ?, ?)""",
            [(review_id, place_id, signal_id, intensity) for signal_id, intensity in taps],
        )
    return review_id


def insert_legacy_signal(
    db: Database,
    place_id: str,
    signal_id: str,
    *,
    signal_name: str | None = None,
    created_at: datetime | str | None = None,
) -> None:
    """Insert one row into the legacy place_signals table."""
    db.execute(
        """INSERT INTO place_signals (place_id, signal_id, signal_name, created_at)
        VALUES (?, ?, ?, ?)""",
        (place_id, signal_id, signal_name, _iso(created_at)),
    )
    db.conn.commit()


def get_place_taps(db: Database, place_id: str) -> list[dict[str, Any]]:
    """Taps for one place joined to their review timestamp."""
    rows = db.fetchall(
        """SELECT t.signal_id, t.intensity, r.created_at
        FROM place_review_signal_taps t
        JOIN place_reviews r ON r.id = t.review_id
        WHERE t.place_id = ?
        ORDER BY r.created_at, t.id""",
        (place_id,),
    )
    return [dict(r) for r in rows]


def get_place_taps_batch(db: Database, place_ids: list[str]) -> list[dict[str, Any]]:
    """Taps for several places, each row carrying its place_id."""
    if not place_ids:
        return []
    placeholders = ", ".join("?" for _ in place_ids)
    rows = db.fetchall(
        f"""SELECT t.place_id, t.signal_id, t.intensity, r.created_at
        FROM place_review_signal_taps t
        JOIN place_reviews r ON r.id = t.review_id
        WHERE t.place_id IN ({placeholders})
        ORDER BY r.created_at, t.id""",
        tuple(place_ids),
    )
    return [dict(r) for r in rows]


def get_legacy_place_signals(db: Database, place_id: str) -> list[dict[str, Any]]:
    rows = db.fetchall(
        """SELECT signal_id, signal_name, created_at
        FROM place_signals WHERE place_id = ?
        ORDER BY created_at, id""",
        (place_id,),
    )
    return [dict(r) for r in rows]


# ---------------------------------------------------------------------------
# Event reviews and taps
# ---------------------------------------------------------------------------

def insert_event_review(
    db: Database,
    event_id: str,
    taps: list[tuple[str, int]],
    *,
    created_at: datetime | str | None = None,
    user_id: str | None = None,
    review_id: str | None = None,
) -> str:
    """Insert an event review and its taps. Returns review id."""
    review_id = review_id or str(uuid.uuid4())
    with db.transaction() as cur:
        cur.execute(
            """INSERT INTO event_reviews (id, event_id, user_id, created_at)
            VALUES (?, ?, ?, ?)""",
            (review_id, event_id, user_id, _iso(created_at)),
        )
        cur.executemany(
            """INSERT INTO event_review_signal_taps (review_id, event_id, signal_id, intensity)
            VALUES (?, ?, ?, ?)""",
            [(review_id, event_id, signal_id, intensity) for signal_id, intensity in taps],
        )
    return review_id


def get_event_taps(db: Database, event_id: str) -> list[dict[str, Any]]:
    rows = db.fetchall(
        """SELECT t.signal_id, t.intensity, r.created_at
        FROM event_review_signal_taps t
        JOIN event_reviews r ON r.id = t.review_id
        WHERE t.event_id = ?
        ORDER BY r.created_at, t.id""",
        (event_id,),
    )
    return [dict(r) for r in rows]

"""Adapters from upstream tap row shapes to the canonical ``TapEvent``.

Two backend feeds carry taps for a place:

  - primary: ``{signal_id, intensity, <review>: {created_at}}`` where the
    timestamp lives on the joined parent review (PostgREST embeds it as a
    nested object; SQLite queries flatten it to ``created_at``)
  - legacy: ``{signal_id, signal_name, created_at}`` with no intensity

The aggregation core only ever sees ``TapEvent``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from livingscore.config.defaults import LEGACY_INTENSITY, MAX_INTENSITY, MIN_INTENSITY
from livingscore.engine.models import TapEvent

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime.

    Returns None for empty or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable timestamp: %r", value)
            return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def clamp_intensity(value: Any) -> int:
    """Coerce a stored intensity into the 1-3 range."""
    try:
        intensity = int(value)
    except (TypeError, ValueError):
        return MIN_INTENSITY
    return min(max(intensity, MIN_INTENSITY), MAX_INTENSITY)


def _review_created_at(row: Mapping[str, Any]) -> Any:
    """Timestamp of the embedded parent review, else the row's own."""
    for review in row.values():
        if isinstance(review, Mapping) and review.get("created_at"):
            return review["created_at"]
        # PostgREST returns a list for one-to-many embeds
        if isinstance(review, list) and review and isinstance(review[0], Mapping):
            return review[0].get("created_at")
    return row.get("created_at")


def taps_from_primary_rows(
    rows: Iterable[Mapping[str, Any]],
    now: datetime | None = None,
    skip_undated: bool = False,
) -> list[TapEvent]:
    """Convert primary-feed rows.

    A missing review timestamp counts as now, unless ``skip_undated`` is
    set, in which case the row is dropped (the thermometer only counts
    taps it can place in its window).
    """
    fallback = now or datetime.now(timezone.utc)
    taps: list[TapEvent] = []
    for row in rows:
        signal_id = row.get("signal_id")
        if not signal_id:
            continue
        created_at = parse_timestamp(_review_created_at(row))
        if created_at is None:
            if skip_undated:
                continue
            created_at = fallback
        taps.append(TapEvent(
            signal_id=str(signal_id),
            intensity=clamp_intensity(row.get("intensity")),
            created_at=created_at,
        ))
    return taps


def taps_from_legacy_rows(
    rows: Iterable[Mapping[str, Any]],
    now: datetime | None = None,
) -> list[TapEvent]:
    """Convert legacy-feed rows; every row is a single tap."""
    fallback = now or datetime.now(timezone.utc)
    taps: list[TapEvent] = []
    for row in rows:
        signal_id = row.get("signal_id")
        if not signal_id:
            continue
        taps.append(TapEvent(
            signal_id=str(signal_id),
            intensity=LEGACY_INTENSITY,
            created_at=parse_timestamp(row.get("created_at")) or fallback,
        ))
    return taps


def select_taps(
    primary_rows: list[Mapping[str, Any]],
    legacy_rows: list[Mapping[str, Any]] | None,
    now: datetime | None = None,
) -> list[TapEvent]:
    """Use the primary feed when it has rows, otherwise the legacy feed."""
    if primary_rows:
        return taps_from_primary_rows(primary_rows, now=now)
    if legacy_rows:
        logger.debug("Primary tap feed empty, using %d legacy rows", len(legacy_rows))
        return taps_from_legacy_rows(legacy_rows, now=now)
    return []

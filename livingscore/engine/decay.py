"""Linear time decay for tap intensity.

A tap loses an equal share of its weight every day until it is
``MAX_AGE_DAYS`` old, at which point it contributes exactly zero:

    age_days     = ceil(|now - created_at| / 1 day)
    decay_factor = 1 - age_days / MAX_AGE_DAYS
    score        = intensity * decay_factor     (0 once age_days >= MAX_AGE_DAYS)

The age uses the absolute difference, so a
future-dated tap is aged the same as one equally far in the past.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from livingscore.config.defaults import MAX_AGE_DAYS

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86_400


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(ts: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def age_in_days(created_at: datetime, now: datetime | None = None) -> int:
    """Whole days between ``created_at`` and ``now``, rounded up.

    Uses the absolute difference: a timestamp 3 days in the future is
    3 days old.
    """
    now = _as_aware(now) if now is not None else _utcnow()
    created_at = _as_aware(created_at)
    delta = (now - created_at).total_seconds()
    if delta < 0:
        logger.debug("Future-dated tap (%s ahead of now)", now - created_at)
    return math.ceil(abs(delta) / _SECONDS_PER_DAY)


def decayed_score(
    intensity: int,
    created_at: datetime,
    now: datetime | None = None,
    max_age_days: int = MAX_AGE_DAYS,
) -> float:
    """Present-day weight of a tap.

    Parameters
    ----------
    intensity : int
        Raw tap intensity (1-3).
    created_at : datetime
        Timestamp of the review the tap belongs to.
    now : datetime, optional
        Reference time; defaults to the current UTC time.
    max_age_days : int
        Window after which a tap is dead.

    Returns
    -------
    float
        ``intensity`` at age 0, falling linearly to exactly ``0.0`` at
        ``max_age_days``.
    """
    age_days = age_in_days(created_at, now)
    if age_days >= max_age_days:
        return 0.0
    decay_factor = 1 - (age_days / max_age_days)
    return intensity * decay_factor


def fade_percent(
    created_at: datetime,
    now: datetime | None = None,
    max_age_days: int = MAX_AGE_DAYS,
) -> float:
    """How far a tap has faded, as a percentage (0 = fresh, 100 = dead)."""
    age_days = age_in_days(created_at, now)
    return min(age_days / max_age_days, 1.0) * 100.0

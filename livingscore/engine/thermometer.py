"""Activity thermometer -- recent positive vs. negative tap volume.

Unlike the Living Score there is no decay: every tap inside the window
counts its full intensity.  The window is ``months * 30`` days and uses
the same rounded-up absolute day arithmetic as the decay function.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TypedDict

from livingscore.config.defaults import DAYS_PER_MONTH, THERMOMETER_MONTHS
from livingscore.engine.catalog import SignalCatalog
from livingscore.engine.decay import age_in_days
from livingscore.engine.models import TapEvent


class Thermometer(TypedDict):
    positive_taps: int   # best_for + vibe intensity
    negative_taps: int   # heads_up intensity


def empty_thermometer() -> Thermometer:
    return Thermometer(positive_taps=0, negative_taps=0)


def within_days(created_at: datetime, days: int, now: datetime | None = None) -> bool:
    return age_in_days(created_at, now) <= days


def measure(
    taps: Iterable[TapEvent],
    catalog: SignalCatalog,
    months: int = THERMOMETER_MONTHS,
    now: datetime | None = None,
) -> Thermometer:
    """Sum tap intensity per side over the last ``months`` months.

    Taps for signals the catalog does not know are ignored.
    """
    now = now or datetime.now(timezone.utc)
    days = months * DAYS_PER_MONTH
    result = empty_thermometer()
    for tap in taps:
        if not within_days(tap.created_at, days, now):
            continue
        category = catalog.get_category_for_signal(tap.signal_id)
        if category is None:
            continue
        if category.is_positive:
            result["positive_taps"] += tap.intensity
        else:
            result["negative_taps"] += tap.intensity
    return result

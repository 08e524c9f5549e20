"""Public entry points -- fetch, aggregate, degrade.

``SignalService`` ties a backend ``SignalSource`` to the process-wide
catalogs and the aggregator.  Two flavours of each read:

  - ``try_*`` methods raise ``FetchError`` when the backend fails
  - the plain methods log the failure and return an empty result

Living Score is a supplementary display feature, so UI callers use the
plain methods; a backend outage shows "no signals" instead of an error.

Module-level functions (``fetch_place_signals`` etc.) delegate to a
default service built lazily from the loaded configuration.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime

from livingscore.config.schema import LivingScoreConfig
from livingscore.data.source import SignalSource, build_source
from livingscore.engine.aggregator import LivingScoreAggregator, top_signals
from livingscore.engine.catalog import SignalCatalog, get_catalog, get_event_catalog
from livingscore.engine.models import Category, PlaceSignals, SignalAggregate, SignalDefinition
from livingscore.engine.taps import select_taps, taps_from_primary_rows
from livingscore.engine.thermometer import Thermometer, empty_thermometer, measure
from livingscore.exceptions import FetchError

logger = logging.getLogger(__name__)


class SignalService:
    """Living Score reads for places and events.

    Parameters:
        source: Backend collaborator.
        config: Scoring and medal settings (defaults when None).
        catalog: Place signal catalog (process-wide one when None).
        event_catalog: Event signal catalog (process-wide one when None).
    """

    def __init__(
        self,
        source: SignalSource,
        config: LivingScoreConfig | None = None,
        catalog: SignalCatalog | None = None,
        event_catalog: SignalCatalog | None = None,
    ) -> None:
        self.source = source
        self.config = config or LivingScoreConfig()
        self.catalog = catalog if catalog is not None else get_catalog()
        self.event_catalog = event_catalog if event_catalog is not None else get_event_catalog()
        self.aggregator = LivingScoreAggregator.from_config(self.config)

    # ------------------------------------------------------------------
    # Places
    # ------------------------------------------------------------------

    def try_fetch_place_signals(
        self, place_id: str, now: datetime | None = None,
    ) -> PlaceSignals:
        """Living Score buckets and medals for a place; raises FetchError."""
        self.catalog.load(self.source)

        primary = self.source.fetch_place_taps(place_id)
        legacy = None if primary else self.source.fetch_legacy_place_taps(place_id)
        taps = select_taps(primary, legacy, now=now)
        if not taps:
            return PlaceSignals.empty()

        result = self.aggregator.aggregate(taps, self.catalog, now=now)
        logger.debug("Place %s: %r from %d taps", place_id, result, len(taps))
        return result

    def fetch_place_signals(
        self, place_id: str, now: datetime | None = None,
    ) -> PlaceSignals:
        """Like ``try_fetch_place_signals`` but empty on backend failure."""
        try:
            return self.try_fetch_place_signals(place_id, now=now)
        except FetchError as e:
            logger.warning("Could not fetch signals for place %s: %s", place_id, e)
            return PlaceSignals.empty()

    def get_top_signals(
        self,
        place_id: str,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[SignalAggregate]:
        """Highest-scoring signals across all categories."""
        if limit is None:
            limit = self.config.scoring.top_signals_limit
        return top_signals(self.fetch_place_signals(place_id, now=now), limit)

    def fetch_available_signals(
        self,
        place_category: str | None,
        subcategory: str | None = None,
    ) -> dict[Category, list[SignalDefinition]]:
        """Signals a reviewer can tap for this type of place."""
        self.catalog.load(self.source)
        return self.catalog.available_signals(place_category, subcategory)

    # ------------------------------------------------------------------
    # Thermometer
    # ------------------------------------------------------------------

    def fetch_place_thermometer(
        self,
        place_id: str,
        months: int | None = None,
        now: datetime | None = None,
    ) -> Thermometer:
        """Recent positive/negative tap volume; zeros on backend failure."""
        if months is None:
            months = self.config.scoring.thermometer_months
        self.catalog.load(self.source)
        try:
            rows = self.source.fetch_place_taps(place_id)
        except FetchError as e:
            logger.warning("Could not fetch thermometer for place %s: %s", place_id, e)
            return empty_thermometer()
        taps = taps_from_primary_rows(rows, now=now, skip_undated=True)
        return measure(taps, self.catalog, months=months, now=now)

    def fetch_places_thermometer(
        self,
        place_ids: list[str],
        months: int | None = None,
        now: datetime | None = None,
    ) -> dict[str, Thermometer]:
        """Thermometer for several places in one backend call.

        Every requested place gets an entry.  On backend failure the
        result is empty.
        """
        if not place_ids:
            return {}
        if months is None:
            months = self.config.scoring.thermometer_months
        self.catalog.load(self.source)
        try:
            rows = self.source.fetch_place_taps_batch(place_ids)
        except FetchError as e:
            logger.warning("Could not fetch thermometer for %d places: %s", len(place_ids), e)
            return {}

        by_place: dict[str, list] = defaultdict(list)
        for row in rows:
            by_place[str(row.get("place_id"))].append(row)

        return {
            place_id: measure(
                taps_from_primary_rows(by_place.get(place_id, []), now=now, skip_undated=True),
                self.catalog, months=months, now=now,
            )
            for place_id in place_ids
        }

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def try_fetch_event_signals(
        self, event_id: str, now: datetime | None = None,
    ) -> PlaceSignals:
        """Event signal buckets (no decay, no medals); raises FetchError.

        ``event_id`` is the backend's internal event id, the key the event
        tap rows carry.  Callers holding a listing's external id resolve it
        first; no lookup happens here.
        """
        self.event_catalog.load(self.source)
        taps = taps_from_primary_rows(self.source.fetch_event_taps(event_id), now=now)
        if not taps:
            return PlaceSignals.empty()
        return self.aggregator.aggregate(
            taps, self.event_catalog, now=now, decay=False, with_medals=False,
        )

    def fetch_event_signals(
        self, event_id: str, now: datetime | None = None,
    ) -> PlaceSignals:
        try:
            return self.try_fetch_event_signals(event_id, now=now)
        except FetchError as e:
            logger.warning("Could not fetch signals for event %s: %s", event_id, e)
            return PlaceSignals.empty()

    def fetch_event_signal_choices(self) -> dict[Category, list[SignalDefinition]]:
        """Every event signal grouped by category."""
        self.event_catalog.load(self.source)
        return self.event_catalog.by_category()


# ---------------------------------------------------------------------------
# Default service
# ---------------------------------------------------------------------------

_default_service: SignalService | None = None


def get_service() -> SignalService:
    """The process-wide service, built from ``load_config()`` on first use."""
    global _default_service
    if _default_service is None:
        from livingscore.config.loader import load_config

        config = load_config()
        _default_service = SignalService(build_source(config), config=config)
    return _default_service


def set_service(service: SignalService | None) -> None:
    """Replace (or clear, with None) the process-wide service."""
    global _default_service
    _default_service = service


def fetch_place_signals(place_id: str) -> PlaceSignals:
    """Living Score buckets and medals for a place; empty on failure."""
    return get_service().fetch_place_signals(place_id)


def get_top_signals(place_id: str, limit: int = 3) -> list[SignalAggregate]:
    """Top ``limit`` signals for a place across all categories."""
    return get_service().get_top_signals(place_id, limit=limit)


def fetch_event_signals(event_id: str) -> PlaceSignals:
    return get_service().fetch_event_signals(event_id)


def fetch_place_thermometer(place_id: str, months: int = 3) -> Thermometer:
    return get_service().fetch_place_thermometer(place_id, months=months)


def fetch_places_thermometer(place_ids: list[str], months: int = 3) -> dict[str, Thermometer]:
    return get_service().fetch_places_thermometer(place_ids, months=months)

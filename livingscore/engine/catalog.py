"""Signal catalog -- process-wide lookup of signal definitions.

Definitions are fetched once from the backend and published as an
immutable snapshot (two read-only maps: by id and by slug).  The first
load is guarded by a lock so concurrent first callers populate it at
most once; readers never see a partially built map.

A failed fetch leaves the catalog empty and unloaded.  Lookups then
return None and the aggregation engine drops the unknown signals, so a
backend outage degrades to "no signals" rather than an error.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, NamedTuple, Protocol

from livingscore.config.defaults import (
    CATEGORY_PREFIX_MAP,
    EVENT_SLUG_PREFIX,
    SUBCATEGORY_PREFIX_OVERRIDES,
)
from livingscore.engine.models import Category, SignalDefinition
from livingscore.exceptions import FetchError

logger = logging.getLogger(__name__)


class DefinitionSource(Protocol):
    """The slice of ``SignalSource`` the catalog needs."""

    def fetch_signal_definitions(
        self, slug_prefix: str | None = None,
    ) -> list[dict[str, Any]]: ...


class _Snapshot(NamedTuple):
    by_id: Mapping[str, SignalDefinition]
    by_slug: Mapping[str, SignalDefinition]


_EMPTY = _Snapshot(MappingProxyType({}), MappingProxyType({}))


def definition_from_row(row: Mapping[str, Any]) -> SignalDefinition | None:
    """Build a SignalDefinition from a backend row.

    Returns None when the row's category is not one of the three fixed
    categories (e.g. ``pro_endorsement``) or the row has no id.
    """
    category = Category.parse(row.get("category", row.get("signal_type")))
    if category is None or not row.get("id"):
        return None
    return SignalDefinition(
        id=str(row["id"]),
        slug=str(row.get("slug") or ""),
        label=str(row.get("label") or ""),
        icon=str(row.get("icon", row.get("icon_emoji")) or ""),
        category=category,
        color=str(row.get("color") or ""),
        prefix=str(row.get("prefix") or ""),
        display_order=_display_order(row.get("display_order")),
    )


def _display_order(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        logger.debug("Bad display_order %r, using 0", value)
        return 0


def get_signal_prefix(category: str | None, subcategory: str | None = None) -> str:
    """Signal set prefix for a place type; subcategory overrides win."""
    if subcategory and subcategory in SUBCATEGORY_PREFIX_OVERRIDES:
        return SUBCATEGORY_PREFIX_OVERRIDES[subcategory]
    return CATEGORY_PREFIX_MAP.get(category or "", CATEGORY_PREFIX_MAP["default"])


def fallback_label(signal_id: str) -> str:
    """Readable label for a signal the catalog does not know."""
    return " ".join(word[:1].upper() + word[1:] for word in signal_id.split("_"))


class SignalCatalog:
    """Load-once cache of signal definitions.

    Parameters:
        slug_prefix: Only cache definitions whose slug starts with this
            prefix (the event catalog uses ``"event_"``).  None caches all.
    """

    def __init__(self, slug_prefix: str | None = None) -> None:
        self.slug_prefix = slug_prefix
        self._snapshot: _Snapshot = _EMPTY
        self._loaded = False
        self._lock = threading.Lock()

    # -- loading --

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, source: DefinitionSource) -> bool:
        """Populate the catalog on first call; later calls are no-ops.

        Returns True if the catalog is loaded after the call.  Fetch
        failures are logged and leave the catalog empty (and retryable).
        """
        if self._loaded:
            return True
        with self._lock:
            if self._loaded:
                return True
            try:
                rows = source.fetch_signal_definitions(slug_prefix=self.slug_prefix)
            except FetchError as e:
                logger.warning("Could not load signal catalog: %s", e)
                return False
            self._snapshot = self._build(rows)
            self._loaded = True
        logger.info(
            "Signal catalog loaded: %d definitions (prefix=%s)",
            len(self._snapshot.by_id), self.slug_prefix,
        )
        return True

    def _build(self, rows: list[dict[str, Any]]) -> _Snapshot:
        by_id: dict[str, SignalDefinition] = {}
        by_slug: dict[str, SignalDefinition] = {}
        dropped = 0
        for row in rows:
            definition = definition_from_row(row)
            if definition is None:
                dropped += 1
                continue
            if self.slug_prefix and not definition.slug.startswith(self.slug_prefix):
                continue
            by_id[definition.id] = definition
            if definition.slug:
                by_slug[definition.slug] = definition
        if dropped:
            logger.debug("Skipped %d definitions outside the signal categories", dropped)
        return _Snapshot(MappingProxyType(by_id), MappingProxyType(by_slug))

    def reset(self) -> None:
        """Swap in an empty snapshot so the next ``load()`` refetches."""
        with self._lock:
            self._snapshot = _EMPTY
            self._loaded = False

    # -- lookups --

    def get_by_id(self, signal_id: str) -> SignalDefinition | None:
        return self._snapshot.by_id.get(signal_id)

    def get_by_slug(self, slug: str) -> SignalDefinition | None:
        return self._snapshot.by_slug.get(slug)

    def get_category_for_signal(self, signal_id: str) -> Category | None:
        definition = self._snapshot.by_id.get(signal_id)
        return definition.category if definition else None

    def get_label(self, signal_id: str) -> str:
        """Catalog label, or a title-cased rendering of the id."""
        definition = self._snapshot.by_id.get(signal_id)
        if definition:
            return definition.label
        return fallback_label(signal_id)

    def definitions(self) -> list[SignalDefinition]:
        return list(self._snapshot.by_id.values())

    def by_category(self, prefix: str | None = None) -> dict[Category, list[SignalDefinition]]:
        """Group definitions per category, ordered by ``display_order``.

        With ``prefix``, only definitions of that signal set are included.
        """
        grouped: dict[Category, list[SignalDefinition]] = {c: [] for c in Category}
        for definition in self._snapshot.by_id.values():
            if prefix is not None and definition.prefix != prefix:
                continue
            grouped[definition.category].append(definition)
        for items in grouped.values():
            items.sort(key=lambda d: d.display_order)
        return grouped

    def available_signals(
        self,
        place_category: str | None,
        subcategory: str | None = None,
    ) -> dict[Category, list[SignalDefinition]]:
        """Signals a reviewer can tap for a place of the given type."""
        return self.by_category(prefix=get_signal_prefix(place_category, subcategory))

    def __len__(self) -> int:
        return len(self._snapshot.by_id)

    def __contains__(self, signal_id: object) -> bool:
        return signal_id in self._snapshot.by_id

    def __repr__(self) -> str:
        return f"SignalCatalog({len(self)} signals, loaded={self._loaded})"


# ---------------------------------------------------------------------------
# Process-wide instances
# ---------------------------------------------------------------------------

_place_catalog = SignalCatalog()
_event_catalog = SignalCatalog(slug_prefix=EVENT_SLUG_PREFIX)


def get_catalog() -> SignalCatalog:
    """The process-wide catalog used for place signals."""
    return _place_catalog


def get_event_catalog() -> SignalCatalog:
    """The process-wide catalog of ``event_*`` signals."""
    return _event_catalog

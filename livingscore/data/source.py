"""Backend collaborator interface for signal definitions and tap events.

Every method raises ``FetchError`` when the backend call fails; callers
in ``engine.service`` decide how to degrade.
"""

from __future__ import annotations

from typing import Any, Protocol

from livingscore.config.schema import LivingScoreConfig


class SignalSource(Protocol):
    """Where the engine reads its raw data from."""

    def fetch_signal_definitions(
        self, slug_prefix: str | None = None,
    ) -> list[dict[str, Any]]:
        """Active signal definitions: id, slug, label, icon, category, color."""
        ...

    def fetch_place_taps(self, place_id: str) -> list[dict[str, Any]]:
        """Primary feed rows: signal_id, intensity, review created_at."""
        ...

    def fetch_legacy_place_taps(self, place_id: str) -> list[dict[str, Any]]:
        """Legacy feed rows: signal_id, signal_name, created_at."""
        ...

    def fetch_place_taps_batch(self, place_ids: list[str]) -> list[dict[str, Any]]:
        """Primary feed rows for several places, each carrying place_id."""
        ...

    def fetch_event_taps(self, event_id: str) -> list[dict[str, Any]]:
        """Event feed rows for an internal event id: signal_id, intensity,
        review created_at."""
        ...


def build_source(config: LivingScoreConfig) -> SignalSource:
    """Construct the backend selected by ``config.backend.kind``."""
    if config.backend.kind == "rest":
        from livingscore.data.adapters.rest_source import RestSignalSource

        return RestSignalSource.from_config(config)

    from livingscore.config.loader import resolve_path
    from livingscore.data.adapters.sqlite_source import SqliteSignalSource
    from livingscore.storage.database import Database

    db = Database(resolve_path(config.backend.database.path))
    return SqliteSignalSource(db)

"""Local SQLite backend for signal definitions and taps.

Backs the CLI's offline mode and the test fixtures.  Schema lives in
livingscore/migrations/; run ``livingscore init`` (or ``ensure_schema``)
before reading.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from livingscore.exceptions import FetchError
from livingscore.storage import queries
from livingscore.storage.database import Database

logger = logging.getLogger(__name__)


class SqliteSignalSource:
    """Reads signal data from a local ``Database``."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _run(self, operation: str, fn, *args: Any) -> list[dict[str, Any]]:
        try:
            return fn(self.db, *args)
        except sqlite3.Error as e:
            raise FetchError(operation, str(e)) from e

    def fetch_signal_definitions(
        self, slug_prefix: str | None = None,
    ) -> list[dict[str, Any]]:
        return self._run(
            "list signal definitions",
            lambda db: queries.list_signal_definitions(db, slug_prefix=slug_prefix),
        )

    def fetch_place_taps(self, place_id: str) -> list[dict[str, Any]]:
        return self._run("fetch place taps", queries.get_place_taps, place_id)

    def fetch_legacy_place_taps(self, place_id: str) -> list[dict[str, Any]]:
        return self._run("fetch legacy place signals", queries.get_legacy_place_signals, place_id)

    def fetch_place_taps_batch(self, place_ids: list[str]) -> list[dict[str, Any]]:
        return self._run("fetch place taps (batch)", queries.get_place_taps_batch, place_ids)

    def fetch_event_taps(self, event_id: str) -> list[dict[str, Any]]:
        return self._run("fetch event taps", queries.get_event_taps, event_id)

    def __repr__(self) -> str:
        return f"SqliteSignalSource({self.db.path})"

"""PostgREST (Supabase REST) backend for signal definitions and taps.

Queries follow PostgREST conventions: ``select`` with embedded parent
resources, ``column=eq.value`` filters and ``column=in.(a,b)`` lists.
Authentication is the project API key sent both as ``apikey`` and as a
bearer token.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from livingscore.config.schema import LivingScoreConfig, TablesConfig
from livingscore.exceptions import FetchError

logger = logging.getLogger(__name__)

_DEFINITION_COLUMNS = "id,slug,label,icon_emoji,signal_type,color,prefix,display_order"


class RestSignalSource:
    """Reads signal data over HTTP from a PostgREST endpoint.

    Parameters:
        base_url: Project URL (``https://<project>.supabase.co``).
        api_key: Anon or service key.
        tables: Table names for each feed.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        tables: TablesConfig | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.tables = tables or TablesConfig()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: LivingScoreConfig) -> RestSignalSource:
        rest = config.backend.rest
        return cls(
            base_url=rest.url,
            api_key=rest.api_key,
            tables=config.backend.tables,
            timeout=rest.timeout,
        )

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        """GET a table and return its rows, raising FetchError on failure."""
        url = f"{self.base_url}/rest/v1/{table}"
        operation = f"GET {table}"
        try:
            resp = requests.get(url, params=params, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(operation, str(e)) from e

        if resp.status_code != 200:
            logger.debug("%s returned %d: %s", operation, resp.status_code, resp.text[:200])
            raise FetchError(operation, f"HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise FetchError(operation, "response is not JSON") from e
        if not isinstance(data, list):
            raise FetchError(operation, "expected a JSON array")
        return data

    # -- SignalSource --

    def fetch_signal_definitions(
        self, slug_prefix: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": _DEFINITION_COLUMNS, "is_active": "eq.true"}
        if slug_prefix:
            params["slug"] = f"like.{slug_prefix}*"
        return self._get(self.tables.signal_definitions, params)

    def fetch_place_taps(self, place_id: str) -> list[dict[str, Any]]:
        params = {
            "select": f"signal_id,intensity,{self.tables.place_reviews}(created_at)",
            "place_id": f"eq.{place_id}",
        }
        return self._get(self.tables.place_taps, params)

    def fetch_legacy_place_taps(self, place_id: str) -> list[dict[str, Any]]:
        params = {
            "select": "signal_id,signal_name,created_at",
            "place_id": f"eq.{place_id}",
        }
        return self._get(self.tables.legacy_place_signals, params)

    def fetch_place_taps_batch(self, place_ids: list[str]) -> list[dict[str, Any]]:
        if not place_ids:
            return []
        params = {
            "select": f"place_id,signal_id,intensity,{self.tables.place_reviews}(created_at)",
            "place_id": f"in.({','.join(place_ids)})",
        }
        return self._get(self.tables.place_taps, params)

    def fetch_event_taps(self, event_id: str) -> list[dict[str, Any]]:
        params = {
            "select": f"signal_id,intensity,{self.tables.event_reviews}(created_at)",
            "event_id": f"eq.{event_id}",
        }
        return self._get(self.tables.event_taps, params)

    def __repr__(self) -> str:
        return f"RestSignalSource({self.base_url})"

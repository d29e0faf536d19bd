from __future__ import annotations

from typing import Any, Dict, List, Optional

import aiohttp

from trip_planner.config import Settings, get_settings
from trip_planner.logging import get_logger

logger = get_logger(__name__)

# Fixed search area around the traveller (meters).
SEARCH_RADIUS_M = 20_000

# Category names are passed to the provider's `type` parameter as-is.
POI_CATEGORIES: tuple[str, ...] = ("restaurant", "hospital", "gas_station", "lodging")

STATUS_OK = "OK"


class PlaceLookupClient:
    """Nearby-search client for the places provider.

    Best effort: every failure (missing key, non-OK status, transport or
    decode error) is logged and turned into an empty result.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._settings = settings or get_settings()
        # Shared session is owned by the caller; without one each lookup opens its own.
        self._session = session

    def _params(self, lat: float, lng: float, category: str) -> Dict[str, Any]:
        return {
            "location": f"{lat},{lng}",
            "radius": SEARCH_RADIUS_M,
            "type": category,
            "key": self._settings.google_places_api_key,
        }

    async def fetch_nearby(self, lat: float, lng: float, category: str) -> List[Dict[str, Any]]:
        """Return provider place objects of ``category`` around (lat, lng), or []."""
        if not self._settings.google_places_api_key:
            logger.error("places_api_key_missing", category=category)
            return []

        # Request URLs carry the API key, so errors are logged without their text or traceback.
        try:
            if self._session is not None:
                data = await self._get(self._session, lat, lng, category)
            else:
                async with aiohttp.ClientSession() as session:
                    data = await self._get(session, lat, lng, category)
        except aiohttp.ClientResponseError as exc:
            logger.error("places_lookup_http_error", category=category, http_status=exc.status)
            return []
        except Exception as exc:
            logger.error("places_lookup_error", category=category, error=type(exc).__name__)
            return []

        status = data.get("status") if isinstance(data, dict) else None
        if status != STATUS_OK:
            logger.warning("places_lookup_status", category=category, status=status)
            return []

        results = data.get("results") or []
        if not isinstance(results, list):
            logger.warning("places_results_malformed", category=category)
            return []
        return [r for r in results if isinstance(r, dict)]

    async def _get(
        self, session: aiohttp.ClientSession, lat: float, lng: float, category: str
    ) -> Any:
        timeout = aiohttp.ClientTimeout(total=self._settings.http_timeout_s)
        async with session.get(
            str(self._settings.places_base_url),
            params=self._params(lat, lng, category),
            timeout=timeout,
        ) as resp:
            resp.raise_for_status()
            return await resp.json()

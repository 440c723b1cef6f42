"""
Lightweight geocoding helper.

Uses OpenStreetMap Nominatim to resolve venue names/addresses to a label
and lat/lng. Results are cached in memory per normalized query.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

import httpx

from . import settings
from .logging_utils import get_logger
from .models import LocationAddress, LocationPosition, LocationResult


DEFAULT_MIN_DELAY_SECONDS = 1.1


def _normalize_query(query: str) -> str:
    return " ".join(query.lower().split())


def _to_location_result(item: dict[str, Any]) -> LocationResult:
    address = item.get("address") or {}
    return LocationResult(
        title=item.get("name") or item.get("display_name", ""),
        id=str(item.get("place_id", "")),
        result_type=item.get("type", ""),
        address=LocationAddress(
            label=item.get("display_name", ""),
            city=address.get("city") or address.get("town") or address.get("village"),
            postal_code=address.get("postcode"),
        ),
        position=LocationPosition(lat=float(item["lat"]), lng=float(item["lon"])),
    )


class Geocoder:
    """
    Async location search against Nominatim.

    Nominatim allows about one request per second, so calls are serialized
    and spaced by `min_delay_seconds`.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        min_delay_seconds: float = DEFAULT_MIN_DELAY_SECONDS,
        limit: int = 5,
    ):
        self.base_url = base_url or settings.geocoding_base_url()
        self.user_agent = user_agent or settings.geocoding_user_agent()
        self.timeout_seconds = timeout_seconds or settings.geocoding_timeout_seconds()
        self.min_delay_seconds = min_delay_seconds
        self.limit = limit
        self.logger = get_logger(__name__)
        self._cache: dict[str, list[LocationResult]] = {}
        self._lock = asyncio.Lock()
        self._last_request_ts: Optional[float] = None
        self._client = client or httpx.AsyncClient(
            timeout=self.timeout_seconds,
            headers={"User-Agent": self.user_agent},
        )

    async def _respect_rate_limit(self) -> None:
        if self._last_request_ts is None:
            return
        elapsed = time.monotonic() - self._last_request_ts
        if elapsed < self.min_delay_seconds:
            await asyncio.sleep(self.min_delay_seconds - elapsed)

    async def search_locations(self, query: str) -> list[LocationResult]:
        """
        Search for a place.

        Returns:
            Matches ordered by relevance; [] if nothing was found.

        Raises:
            httpx.HTTPError: Request failed or returned an error status.
        """
        cache_key = _normalize_query(query)
        if not cache_key:
            return []
        if cache_key in self._cache:
            return list(self._cache[cache_key])

        async with self._lock:
            await self._respect_rate_limit()
            try:
                response = await self._client.get(
                    self.base_url,
                    params={
                        "format": "json",
                        "limit": self.limit,
                        "q": query,
                        "addressdetails": 1,
                    },
                    headers={"User-Agent": self.user_agent},
                )
                response.raise_for_status()
            finally:
                self._last_request_ts = time.monotonic()

        data = response.json()
        results = [_to_location_result(item) for item in data if "lat" in item and "lon" in item]
        self.logger.debug("Geocoded %r -> %s results", query, len(results))
        self._cache[cache_key] = results
        return list(results)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "Geocoder":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

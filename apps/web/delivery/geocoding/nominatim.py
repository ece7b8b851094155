"""Nominatim geocoder - address search via OpenStreetMap."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError
from storefront_schemas import Coordinate, GeocodedAddress

from apps.web.delivery.exceptions import GeocodingError

logger = logging.getLogger(__name__)


class NominatimGeocoder:
    """
    Geocoder backed by the public Nominatim API.

    Nominatim requires an identifying User-Agent and allows roughly one
    request per second; callers debounce keystrokes before searching.

    API Reference: https://nominatim.org/release-docs/latest/api/Overview/
    """

    BASE_URL = "https://nominatim.openstreetmap.org"
    SEARCH_URL = f"{BASE_URL}/search"
    REVERSE_URL = f"{BASE_URL}/reverse"

    def __init__(
        self,
        user_agent: str = "StorefrontApp/1.0",
        country_codes: str = "nl",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the Nominatim geocoder.

        Args:
            user_agent: Identifying User-Agent required by the usage policy.
            country_codes: Comma-separated ISO 3166-1 codes to restrict results.
            http_client: Optional HTTP client for dependency injection (testing).
        """
        self.user_agent = user_agent
        self.country_codes = country_codes
        self._client = http_client or httpx.AsyncClient(timeout=10.0)
        self._owns_client = http_client is None

    @property
    def name(self) -> str:
        return "nominatim"

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, url: str, params: dict[str, Any]) -> Any:
        try:
            response = await self._client.get(
                url,
                params=params,
                headers={"User-Agent": self.user_agent},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise GeocodingError(
                f"Nominatim request failed: {e.response.status_code}",
                provider=self.name,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise GeocodingError(
                f"Nominatim request failed: {e}",
                provider=self.name,
            ) from e
        except ValueError as e:
            raise GeocodingError(
                "Nominatim returned invalid JSON",
                provider=self.name,
            ) from e

    def _parse_place(self, place: dict[str, Any]) -> GeocodedAddress | None:
        """Convert a Nominatim place into a GeocodedAddress (None if unusable)."""
        try:
            return GeocodedAddress(
                text=place["display_name"],
                coordinate=Coordinate(
                    latitude=float(place["lat"]),
                    longitude=float(place["lon"]),
                ),
            )
        except (KeyError, TypeError, ValueError, ValidationError):
            logger.debug("Skipping unparseable Nominatim place: %s", place)
            return None

    async def search(self, query: str, limit: int = 10) -> list[GeocodedAddress]:
        """Search addresses matching free text."""
        if not query.strip():
            return []

        data = await self._get(
            self.SEARCH_URL,
            {
                "q": query,
                "countrycodes": self.country_codes,
                "format": "json",
                "limit": limit,
            },
        )
        if not isinstance(data, list):
            return []

        results = [self._parse_place(place) for place in data if isinstance(place, dict)]
        return [result for result in results if result is not None]

    async def reverse(self, coordinate: Coordinate) -> GeocodedAddress | None:
        """Look up the address at a coordinate."""
        data = await self._get(
            self.REVERSE_URL,
            {
                "lat": coordinate.latitude,
                "lon": coordinate.longitude,
                "format": "json",
            },
        )
        if not isinstance(data, dict) or "error" in data:
            return None
        return self._parse_place(data)

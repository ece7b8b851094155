"""Delivery eligibility exceptions."""

from typing import Any

from apps.web.core.exceptions import StorefrontError


class InvalidCoordinate(StorefrontError):
    """Latitude/longitude missing or outside WGS84 bounds."""

    code = "invalid_coordinate"

    def __init__(
        self,
        message: str,
        latitude: object = None,
        longitude: object = None,
    ) -> None:
        super().__init__(message)
        self.latitude = latitude
        self.longitude = longitude

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["latitude"] = self.latitude
        data["longitude"] = self.longitude
        return data


class NoEligibleStore(StorefrontError):
    """No active store delivers to the requested coordinate."""

    code = "outside_delivery_range"

    def __init__(
        self,
        message: str = "Outside delivery range",
        distance_km: float | None = None,
        nearest_store_id: int | None = None,
        radius_km: float | None = None,
    ) -> None:
        super().__init__(message)
        self.distance_km = distance_km
        self.nearest_store_id = nearest_store_id
        self.radius_km = radius_km

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["distance_km"] = (
            round(self.distance_km, 1) if self.distance_km is not None else None
        )
        data["nearest_store_id"] = self.nearest_store_id
        data["radius_km"] = self.radius_km
        return data


class GeocodingError(StorefrontError):
    """Geocoding provider request failed."""

    code = "geocoding_failed"

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["provider"] = self.provider
        data["status_code"] = self.status_code
        return data


class StoreClosed(StorefrontError):
    """The serving store is outside its operating hours."""

    code = "store_closed"

    def __init__(
        self,
        message: str = "Store is currently closed",
        store_id: int | None = None,
        day: str | None = None,
    ) -> None:
        super().__init__(message)
        self.store_id = store_id
        self.day = day

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["store_id"] = self.store_id
        data["day"] = self.day
        return data

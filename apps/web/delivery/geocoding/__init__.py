"""Geocoding adapters - free-text address search providers."""

from typing import Any

from apps.web.delivery.geocoding.base import Geocoder
from apps.web.delivery.geocoding.mock import MockGeocoder
from apps.web.delivery.geocoding.nominatim import NominatimGeocoder

SUPPORTED_GEOCODERS = ("nominatim", "mock")


def get_geocoder(name: str, **kwargs: Any) -> Geocoder:
    """
    Get a geocoder instance by provider name.

    Use this factory rather than instantiating geocoders directly.

    Args:
        name: Provider name ("nominatim" or "mock").
        **kwargs: Additional arguments passed to the geocoder constructor.
            For NominatimGeocoder: user_agent, country_codes, http_client.

    Returns:
        An instance implementing the Geocoder protocol.

    Raises:
        ValueError: If the provider is not supported.
    """
    if name == "mock":
        return MockGeocoder(**kwargs)
    elif name == "nominatim":
        return NominatimGeocoder(**kwargs)
    else:
        supported = ", ".join(SUPPORTED_GEOCODERS)
        raise ValueError(f"Unsupported geocoder: {name}. Supported: {supported}")


__all__ = [
    "Geocoder",
    "MockGeocoder",
    "NominatimGeocoder",
    "get_geocoder",
]

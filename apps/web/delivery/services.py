"""
Delivery services - store directory access and eligibility checks.

Handles:
1. Loading active stores as StoreConfig records (cached, refreshable)
2. Resolving a selected delivery location to its serving store
3. Address suggestions: geocode, resolve and rank
"""

import asyncio
import logging

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError

from storefront_schemas import (
    AddressCandidate,
    Coordinate,
    EligibilityResult,
    GeocodedAddress,
    SelectedDeliveryLocation,
    StoreConfig,
)

from apps.web.delivery.eligibility import resolve
from apps.web.delivery.exceptions import NoEligibleStore
from apps.web.delivery.geocoding import Geocoder, get_geocoder
from apps.web.delivery.ranking import build_candidates, rank

logger = logging.getLogger(__name__)

STORE_CACHE_KEY = "delivery:active-stores"


def invalidate_store_cache() -> None:
    """Drop the cached store directory (called when a store changes)."""
    cache.delete(STORE_CACHE_KEY)


def get_active_stores(force_refresh: bool = False) -> list[StoreConfig]:
    """
    Active, publicly listed stores as StoreConfig records.

    Results are cached for STORE_CACHE_SECONDS. If the database is
    unreachable the directory is treated as empty, so eligibility degrades
    to "outside delivery range" instead of failing.

    Args:
        force_refresh: Bypass the cache and reload from the database.
    """
    from apps.web.delivery.models import Store  # noqa: PLC0415

    if not force_refresh:
        cached = cache.get(STORE_CACHE_KEY)
        if cached is not None:
            return [StoreConfig.model_validate(data) for data in cached]

    try:
        stores = [
            store.to_config()
            for store in Store.objects.filter(is_active=True, show_on_website=True)
        ]
    except DatabaseError:
        logger.exception("Failed to load store directory")
        return []

    cache.set(
        STORE_CACHE_KEY,
        [store.model_dump(mode="json") for store in stores],
        timeout=settings.STORE_CACHE_SECONDS,
    )
    return stores


def resolve_location(
    location: SelectedDeliveryLocation,
    stores: list[StoreConfig] | None = None,
) -> EligibilityResult:
    """Resolve a confirmed delivery location against the store directory."""
    directory = get_active_stores() if stores is None else stores
    return resolve(location.coordinate, directory, location.address)


def require_deliverable(
    location: SelectedDeliveryLocation,
    stores: list[StoreConfig] | None = None,
) -> EligibilityResult:
    """
    Resolve a delivery location and insist that a store can serve it.

    Raises:
        NoEligibleStore: If no active store exists or the location is outside
            the nearest store's radius.
    """
    result = resolve_location(location, stores)
    if result.nearest_store is None:
        logger.info("No active store for delivery to %s", location.address)
        raise NoEligibleStore("No store is currently delivering")

    if not result.is_deliverable:
        logger.info(
            "Delivery location outside range: store=%s distance=%.2fkm radius=%.2fkm",
            result.nearest_store.id,
            result.distance_km,
            result.nearest_store.radius_km,
        )
        raise NoEligibleStore(
            "Outside delivery range",
            distance_km=result.distance_km,
            nearest_store_id=result.nearest_store.id,
            radius_km=result.nearest_store.radius_km,
        )
    return result


def default_geocoder() -> Geocoder:
    """Geocoder configured in settings."""
    if settings.GEOCODER == "nominatim":
        return get_geocoder(
            "nominatim",
            user_agent=settings.GEOCODER_USER_AGENT,
            country_codes=settings.GEOCODER_COUNTRY_CODES,
        )
    return get_geocoder(settings.GEOCODER)


async def _search(geocoder: Geocoder, query: str, limit: int) -> list[GeocodedAddress]:
    try:
        return await geocoder.search(query, limit=limit)
    finally:
        await geocoder.close()


async def _reverse(geocoder: Geocoder, coordinate: Coordinate) -> GeocodedAddress | None:
    try:
        return await geocoder.reverse(coordinate)
    finally:
        await geocoder.close()


def suggest_addresses(
    query: str,
    geocoder: Geocoder | None = None,
    stores: list[StoreConfig] | None = None,
    limit: int = 10,
) -> list[AddressCandidate]:
    """
    Geocode free text and rank the results for the location picker.

    Raises:
        GeocodingError: If the geocoding provider fails.
    """
    geocoder = geocoder or default_geocoder()
    geocoded = asyncio.run(_search(geocoder, query, limit))
    directory = get_active_stores() if stores is None else stores
    return rank(build_candidates(geocoded, directory))


def locate_address(
    coordinate: Coordinate,
    geocoder: Geocoder | None = None,
    stores: list[StoreConfig] | None = None,
) -> AddressCandidate | None:
    """
    Resolve a device coordinate into an annotated address candidate.

    Raises:
        GeocodingError: If the geocoding provider fails.
    """
    geocoder = geocoder or default_geocoder()
    address = asyncio.run(_reverse(geocoder, coordinate))
    if address is None:
        return None
    directory = get_active_stores() if stores is None else stores
    return build_candidates([address], directory)[0]

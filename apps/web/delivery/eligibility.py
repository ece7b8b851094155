"""
Store eligibility resolver.

Finds the nearest active store for a coordinate and classifies whether it
can be delivered to. The same resolver backs the public validate-delivery
endpoint, so client-side and server-side decisions never diverge.
"""

from collections.abc import Iterable
from typing import Literal

from storefront_schemas import (
    Coordinate,
    EligibilityClass,
    EligibilityResult,
    StoreConfig,
    StoreDistance,
)

from apps.web.delivery.geo import distance_km

DEFAULT_SEARCH_RADIUS_KM = 50.0

DeliveryBand = Literal["excellent", "good", "acceptable", "unavailable"]


def matches_coverage(store: StoreConfig, address_text: str) -> bool:
    """
    Check whether an address lies in one of the store's coverage cities.

    A store without coverage cities covers everything. Otherwise a city
    matches when it appears, case-insensitively, anywhere in the address.
    """
    if not store.coverage_cities:
        return True
    address_lower = (address_text or "").lower()
    return any(city in address_lower for city in store.coverage_cities)


def classify(in_range: bool, in_coverage: bool) -> EligibilityClass:
    """Map the range/coverage flags onto an eligibility class."""
    if in_range and in_coverage:
        return EligibilityClass.IN_COVERAGE_AND_RANGE
    if in_range:
        return EligibilityClass.IN_RANGE_ONLY
    return EligibilityClass.OUTSIDE_RANGE


def nearest_store(
    candidate: Coordinate, stores: Iterable[StoreConfig] | None
) -> StoreDistance | None:
    """Nearest active store, first seen wins on equal distance."""
    best: StoreDistance | None = None
    for store in stores or ():
        if not store.is_active:
            continue
        distance = distance_km(candidate, store.coordinate)
        if best is None or distance < best.distance_km:
            best = StoreDistance(store=store, distance_km=distance)
    return best


def resolve(
    candidate: Coordinate,
    stores: Iterable[StoreConfig] | None,
    address_text: str = "",
) -> EligibilityResult:
    """
    Resolve a coordinate against the store directory.

    Args:
        candidate: Delivery coordinate.
        stores: Store directory snapshot. ``None`` or empty means the
            directory was unavailable; the result is then OUTSIDE_RANGE.
        address_text: Free-text address used for the coverage-city check.

    Returns:
        EligibilityResult with the nearest active store (if any), its
        distance and the eligibility class. Never raises for an empty
        directory.
    """
    nearest = nearest_store(candidate, stores)
    if nearest is None:
        return EligibilityResult()

    in_range = nearest.distance_km <= nearest.store.radius_km
    in_coverage = matches_coverage(nearest.store, address_text)

    return EligibilityResult(
        nearest_store=nearest.store,
        distance_km=nearest.distance_km,
        eligibility_class=classify(in_range, in_coverage),
        in_range=in_range,
        in_coverage=in_coverage,
    )


def stores_in_range(
    candidate: Coordinate,
    stores: Iterable[StoreConfig] | None,
    max_distance_km: float = DEFAULT_SEARCH_RADIUS_KM,
) -> list[StoreDistance]:
    """Active stores within ``max_distance_km``, nearest first."""
    found = [
        StoreDistance(store=store, distance_km=distance_km(candidate, store.coordinate))
        for store in stores or ()
        if store.is_active
    ]
    found = [entry for entry in found if entry.distance_km <= max_distance_km]
    # sorted() is stable, so equal distances keep directory order
    return sorted(found, key=lambda entry: entry.distance_km)


def delivery_band(distance: float, radius_km: float) -> DeliveryBand:
    """
    Describe delivery quality for a distance within a store's radius.

    Half the radius or closer is "excellent", up to three quarters is "good",
    up to the radius is "acceptable"; beyond it delivery is "unavailable".
    """
    if distance <= radius_km * 0.5:
        return "excellent"
    if distance <= radius_km * 0.75:
        return "good"
    if distance <= radius_km:
        return "acceptable"
    return "unavailable"

"""Address candidate ranking for the delivery location picker."""

from collections.abc import Iterable
from math import inf

from storefront_schemas import AddressCandidate, GeocodedAddress, StoreConfig

from apps.web.delivery.eligibility import resolve


def build_candidates(
    geocoded: Iterable[GeocodedAddress],
    stores: Iterable[StoreConfig] | None,
) -> list[AddressCandidate]:
    """Annotate geocoded addresses with distance and eligibility class."""
    directory = list(stores or ())
    candidates: list[AddressCandidate] = []
    for address in geocoded:
        result = resolve(address.coordinate, directory, address.text)
        candidates.append(
            AddressCandidate(
                text=address.text,
                coordinate=address.coordinate,
                distance_km=result.distance_km,
                eligibility_class=result.eligibility_class,
            )
        )
    return candidates


def _sort_key(candidate: AddressCandidate) -> tuple[int, float]:
    distance = candidate.distance_km if candidate.distance_km is not None else inf
    return candidate.eligibility_class.priority, distance


def rank(candidates: Iterable[AddressCandidate]) -> list[AddressCandidate]:
    """
    Order candidates best first.

    Primary key is the eligibility class, secondary the distance to the
    nearest store (unknown distances last). The sort is stable: ties keep
    their input order.
    """
    return sorted(candidates, key=_sort_key)

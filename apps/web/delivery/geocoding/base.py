"""Base geocoder protocol - interface for address search providers."""

from typing import Protocol, runtime_checkable

from storefront_schemas import Coordinate, GeocodedAddress


@runtime_checkable
class Geocoder(Protocol):
    """
    Protocol defining the interface for geocoding providers.

    All geocoders (Nominatim, Mock) must implement this interface.
    Methods are async to support non-blocking I/O with external APIs.
    """

    @property
    def name(self) -> str:
        """Provider name used in logs and errors."""
        ...

    async def search(self, query: str, limit: int = 10) -> list[GeocodedAddress]:
        """
        Resolve free text into address candidates.

        Args:
            query: Address text typed by the customer.
            limit: Maximum number of candidates to return.

        Returns:
            Candidates in provider order (may be empty).

        Raises:
            GeocodingError: If the provider request fails.
        """
        ...

    async def reverse(self, coordinate: Coordinate) -> GeocodedAddress | None:
        """
        Resolve a coordinate (e.g. device location) into an address.

        Returns:
            The address at the coordinate, or None if the provider has none.

        Raises:
            GeocodingError: If the provider request fails.
        """
        ...

    async def close(self) -> None:
        """Release any underlying HTTP resources."""
        ...

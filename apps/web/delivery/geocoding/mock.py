"""Mock geocoder for development and testing."""

from storefront_schemas import Coordinate, GeocodedAddress

from apps.web.delivery.geo import distance_km


def _default_places() -> list[GeocodedAddress]:
    """A handful of addresses around Amersfoort."""
    places = [
        ("Stationsplein 1, 3818 LE Amersfoort, Nederland", 52.1533, 5.3736),
        ("Langestraat 50, 3811 AH Amersfoort, Nederland", 52.1561, 5.3874),
        ("Hamersveldseweg 10, 3833 GR Leusden, Nederland", 52.1365, 5.4281),
        ("Dorpsstraat 5, 3732 HJ De Bilt, Nederland", 52.1097, 5.1806),
        ("Damrak 1, 1012 LG Amsterdam, Nederland", 52.3759, 4.8975),
    ]
    return [
        GeocodedAddress(
            text=text,
            coordinate=Coordinate(latitude=lat, longitude=lng),
        )
        for text, lat, lng in places
    ]


class MockGeocoder:
    """
    In-memory geocoder.

    Search is a case-insensitive substring match over a fixed list of
    places; reverse returns the closest place.
    """

    def __init__(self, places: list[GeocodedAddress] | None = None) -> None:
        self.places = places if places is not None else _default_places()
        self.queries: list[str] = []

    @property
    def name(self) -> str:
        return "mock"

    async def close(self) -> None:
        return None

    async def search(self, query: str, limit: int = 10) -> list[GeocodedAddress]:
        self.queries.append(query)
        needle = query.strip().lower()
        if not needle:
            return []
        return [p for p in self.places if needle in p.text.lower()][:limit]

    async def reverse(self, coordinate: Coordinate) -> GeocodedAddress | None:
        if not self.places:
            return None
        return min(self.places, key=lambda p: distance_km(coordinate, p.coordinate))

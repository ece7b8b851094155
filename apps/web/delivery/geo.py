"""Great-circle distance between coordinates."""

from math import atan2, cos, isfinite, radians, sin, sqrt

from pydantic import ValidationError
from storefront_schemas import Coordinate

from apps.web.delivery.exceptions import InvalidCoordinate

# Mean radius of Earth in kilometres.
EARTH_RADIUS_KM = 6371.0


def make_coordinate(latitude: object, longitude: object) -> Coordinate:
    """
    Build a Coordinate from raw input.

    Out-of-range values are rejected, not clamped.

    Raises:
        InvalidCoordinate: If either value is missing, non-numeric, not finite
            or outside WGS84 bounds.
    """
    try:
        lat = float(latitude)  # type: ignore[arg-type]
        lng = float(longitude)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise InvalidCoordinate(
            "Latitude and longitude must be numbers",
            latitude=latitude,
            longitude=longitude,
        ) from e

    if not (isfinite(lat) and isfinite(lng)):
        raise InvalidCoordinate(
            "Latitude and longitude must be finite",
            latitude=latitude,
            longitude=longitude,
        )

    try:
        return Coordinate(latitude=lat, longitude=lng)
    except ValidationError as e:
        raise InvalidCoordinate(
            "Latitude must be within [-90, 90] and longitude within [-180, 180]",
            latitude=lat,
            longitude=lng,
        ) from e


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Return the haversine distance in km between two coordinates."""
    lat1, lon1 = radians(a.latitude), radians(a.longitude)
    lat2, lon2 = radians(b.latitude), radians(b.longitude)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))


def format_distance(km: float) -> str:
    """Format a distance for display: metres below 1 km, else one decimal km."""
    metres = round(km * 1000)
    # Unit is chosen after rounding: 999.6m displays as 1.0km
    if metres < 1000:
        return f"{metres}m"
    return f"{km:.1f}km"

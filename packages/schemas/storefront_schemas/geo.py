"""Location schemas - coordinates, eligibility classes, address candidates."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class EligibilityClass(str, Enum):
    """How deliverable an address is, best first."""

    IN_COVERAGE_AND_RANGE = "in_coverage_and_range"
    IN_RANGE_ONLY = "in_range_only"
    OUTSIDE_RANGE = "outside_range"

    @property
    def priority(self) -> int:
        """Sort priority (1 = most desirable)."""
        return _ELIGIBILITY_PRIORITY[self]

    @property
    def is_deliverable(self) -> bool:
        """Whether the address is within a store's delivery radius."""
        return self is not EligibilityClass.OUTSIDE_RANGE


_ELIGIBILITY_PRIORITY = {
    EligibilityClass.IN_COVERAGE_AND_RANGE: 1,
    EligibilityClass.IN_RANGE_ONLY: 2,
    EligibilityClass.OUTSIDE_RANGE: 3,
}


# =============================================================================
# Coordinates
# =============================================================================


class Coordinate(BaseModel):
    """A WGS84 point in degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class SelectedDeliveryLocation(BaseModel):
    """The address a customer confirmed for delivery."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(min_length=1)
    coordinate: Coordinate


# =============================================================================
# Address Suggestions
# =============================================================================


class GeocodedAddress(BaseModel):
    """A free-text address resolved by a geocoding provider."""

    text: str
    coordinate: Coordinate


class AddressCandidate(BaseModel):
    """A geocoded suggestion annotated with delivery eligibility."""

    text: str
    coordinate: Coordinate
    distance_km: float | None = None
    eligibility_class: EligibilityClass = EligibilityClass.OUTSIDE_RANGE

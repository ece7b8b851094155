"""Store directory schemas."""

from datetime import time
from decimal import Decimal
from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront_schemas.geo import Coordinate, EligibilityClass
from storefront_schemas.money import Money


class Weekday(str, Enum):
    """Day keys used in a store's weekly operating hours."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def for_index(cls, weekday: int) -> "Weekday":
        """Map ``date.weekday()`` (Monday is 0) to a Weekday."""
        return list(cls)[weekday]


class DayHours(BaseModel):
    """Opening window for one day. Both ends are inclusive."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_open: bool = Field(default=True, alias="isOpen")
    open: time = time(0, 0)
    close: time = time(23, 59)

    @model_validator(mode="after")
    def check_window(self) -> Self:
        if self.is_open and self.close < self.open:
            msg = "close must not be earlier than open"
            raise ValueError(msg)
        return self


class StoreConfig(BaseModel):
    """
    Delivery and pricing configuration for one physical store.

    Built from the admin-managed Store rows. Money fields default to zero
    when missing so pricing never fails on partial configuration.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    coordinate: Coordinate
    radius_km: float = Field(default=15.0, ge=0)
    coverage_cities: frozenset[str] = Field(default_factory=frozenset)

    delivery_fee: Money = Decimal("0")
    service_fee: Money = Decimal("0")
    minimum_order_amount: Money = Decimal("0")
    tax_rate_percent: Money = Decimal("0")

    estimated_minutes_min: int = 30
    estimated_minutes_max: int = 45

    is_active: bool = True

    # None means no schedule is configured and the store is always open.
    # With a schedule, a day that is missing is a closed day.
    operating_hours: dict[Weekday, DayHours] | None = None

    @field_validator("coverage_cities", mode="before")
    @classmethod
    def _normalize_cities(cls, value: object) -> frozenset[str]:
        """Store coverage cities lower-cased for case-insensitive matching."""
        if not value:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list | tuple | set | frozenset):
            msg = "coverage_cities must be a list of city names"
            raise ValueError(msg)
        return frozenset(
            str(city).strip().lower() for city in value if str(city).strip()
        )


class StoreDistance(BaseModel):
    """A store together with its distance from a point."""

    store: StoreConfig
    distance_km: float


class EligibilityResult(BaseModel):
    """Outcome of resolving a coordinate against the store directory."""

    nearest_store: StoreConfig | None = None
    distance_km: float | None = None
    eligibility_class: EligibilityClass = EligibilityClass.OUTSIDE_RANGE
    in_range: bool = False
    in_coverage: bool = False

    @property
    def is_deliverable(self) -> bool:
        """Whether a delivery order may be placed for this coordinate."""
        return self.eligibility_class.is_deliverable

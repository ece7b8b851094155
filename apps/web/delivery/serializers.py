"""
Pydantic schemas for store and delivery API requests and responses.

These schemas define the public API contract for delivery eligibility.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from storefront_schemas import (
    AddressCandidate,
    EligibilityClass,
    EligibilityResult,
    StoreConfig,
)

from apps.web.delivery.eligibility import DEFAULT_SEARCH_RADIUS_KM, delivery_band
from apps.web.delivery.geo import format_distance
from apps.web.delivery.hours import is_open

# =============================================================================
# Requests
# =============================================================================


class LocationRequest(BaseModel):
    """Request body carrying a raw coordinate."""

    lat: float | None = None
    lng: float | None = None


class ValidateDeliveryRequest(LocationRequest):
    """POST /api/stores/validate-delivery."""

    address: str = ""


class StoresInRangeRequest(LocationRequest):
    """POST /api/stores/in-range."""

    max_distance: float = Field(default=DEFAULT_SEARCH_RADIUS_KM, gt=0)


# =============================================================================
# Responses
# =============================================================================


class StoreSchema(BaseModel):
    """Public store details."""

    id: int
    name: str
    lat: float
    lng: float
    radius_km: float
    coverage_cities: list[str]
    delivery_fee: Decimal
    service_fee: Decimal
    minimum_order_amount: Decimal
    tax_rate_percent: Decimal

    @classmethod
    def from_config(cls, store: StoreConfig) -> "StoreSchema":
        return cls(
            id=store.id,
            name=store.name,
            lat=store.coordinate.latitude,
            lng=store.coordinate.longitude,
            radius_km=store.radius_km,
            coverage_cities=sorted(store.coverage_cities),
            delivery_fee=store.delivery_fee,
            service_fee=store.service_fee,
            minimum_order_amount=store.minimum_order_amount,
            tax_rate_percent=store.tax_rate_percent,
        )


class StoreListResponse(BaseModel):
    """Response for GET /api/stores."""

    stores: list[StoreSchema]


class NearbyStoreSchema(StoreSchema):
    """A store with its distance from the requested point."""

    distance_km: float
    distance_display: str


class NearestStoreResponse(BaseModel):
    """Response for POST /api/stores/nearest."""

    store: NearbyStoreSchema | None


class StoresInRangeResponse(BaseModel):
    """Response for POST /api/stores/in-range."""

    stores: list[NearbyStoreSchema]


class DeliveryDetailsSchema(BaseModel):
    """Delivery terms offered by the serving store."""

    fee: Decimal
    minimum_order_amount: Decimal
    estimated_minutes_min: int
    estimated_minutes_max: int
    band: str


class ValidateDeliveryResponse(BaseModel):
    """Response for POST /api/stores/validate-delivery."""

    is_valid: bool
    message: str
    eligibility_class: EligibilityClass
    in_range: bool
    in_coverage: bool
    nearest_store: NearbyStoreSchema | None = None
    delivery: DeliveryDetailsSchema | None = None
    store_open: bool | None = None

    @classmethod
    def from_result(
        cls, result: EligibilityResult, at: datetime
    ) -> "ValidateDeliveryResponse":
        store = result.nearest_store
        if store is None or result.distance_km is None:
            return cls(
                is_valid=False,
                message="No store is currently delivering",
                eligibility_class=result.eligibility_class,
                in_range=False,
                in_coverage=False,
            )

        nearest = nearby_store(store, result.distance_km)
        if not result.is_deliverable:
            return cls(
                is_valid=False,
                message=(
                    f"Outside delivery range ({nearest.distance_display} from "
                    f"{store.name}, maximum {store.radius_km:g}km)"
                ),
                eligibility_class=result.eligibility_class,
                in_range=result.in_range,
                in_coverage=result.in_coverage,
                nearest_store=nearest,
                store_open=is_open(store, at),
            )

        store_open = is_open(store, at)
        return cls(
            is_valid=True,
            message=(
                "Delivery available"
                if store_open
                else f"Delivery available, but {store.name} is currently closed"
            ),
            eligibility_class=result.eligibility_class,
            in_range=result.in_range,
            in_coverage=result.in_coverage,
            nearest_store=nearest,
            delivery=DeliveryDetailsSchema(
                fee=store.delivery_fee,
                minimum_order_amount=store.minimum_order_amount,
                estimated_minutes_min=store.estimated_minutes_min,
                estimated_minutes_max=store.estimated_minutes_max,
                band=delivery_band(result.distance_km, store.radius_km),
            ),
            store_open=store_open,
        )


class AddressCandidateSchema(BaseModel):
    """A ranked address suggestion."""

    address: str
    lat: float
    lng: float
    distance_km: float | None
    distance_display: str | None
    eligibility_class: EligibilityClass

    @classmethod
    def from_candidate(cls, candidate: AddressCandidate) -> "AddressCandidateSchema":
        distance = candidate.distance_km
        return cls(
            address=candidate.text,
            lat=candidate.coordinate.latitude,
            lng=candidate.coordinate.longitude,
            distance_km=round(distance, 1) if distance is not None else None,
            distance_display=format_distance(distance) if distance is not None else None,
            eligibility_class=candidate.eligibility_class,
        )


class AddressSuggestionsResponse(BaseModel):
    """Response for GET /api/addresses/suggest."""

    suggestions: list[AddressCandidateSchema]


def nearby_store(store: StoreConfig, distance_km: float) -> NearbyStoreSchema:
    """Public store details with a distance attached."""
    return NearbyStoreSchema(
        **StoreSchema.from_config(store).model_dump(),
        distance_km=round(distance_km, 1),
        distance_display=format_distance(distance_km),
    )

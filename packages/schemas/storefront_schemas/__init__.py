"""Storefront Schemas - Pydantic models for data contracts."""

from storefront_schemas.cart import (
    CartAddOn,
    CartAggregate,
    CartEdit,
    CartEditAction,
    CartLine,
    DeliveryType,
    PricingSnapshot,
)
from storefront_schemas.geo import (
    AddressCandidate,
    Coordinate,
    EligibilityClass,
    GeocodedAddress,
    SelectedDeliveryLocation,
)
from storefront_schemas.money import Money
from storefront_schemas.orders import (
    Actor,
    CustomerInfo,
    DeliveryInfo,
    OrderAction,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    StatusChange,
)
from storefront_schemas.stores import (
    DayHours,
    EligibilityResult,
    StoreConfig,
    StoreDistance,
    Weekday,
)

__all__ = [
    # Cart
    "CartAddOn",
    "CartAggregate",
    "CartEdit",
    "CartEditAction",
    "CartLine",
    "DeliveryType",
    "Money",
    "PricingSnapshot",
    # Geo
    "AddressCandidate",
    "Coordinate",
    "EligibilityClass",
    "GeocodedAddress",
    "SelectedDeliveryLocation",
    # Stores
    "DayHours",
    "EligibilityResult",
    "StoreConfig",
    "StoreDistance",
    "Weekday",
    # Orders
    "Actor",
    "CustomerInfo",
    "DeliveryInfo",
    "OrderAction",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "StatusChange",
]

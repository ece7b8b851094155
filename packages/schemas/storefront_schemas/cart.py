"""Cart and pricing schemas."""

from decimal import Decimal
from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from storefront_schemas.money import Money


class DeliveryType(str, Enum):
    """How the customer receives the order."""

    DELIVERY = "delivery"
    COLLECTION = "collection"


class CartAddOn(BaseModel):
    """An add-on selected for one serving of a cart line."""

    model_config = ConfigDict(frozen=True)

    add_on_id: str
    name: str = ""
    unit_price: Money = Decimal("0")
    quantity: int = Field(default=1, ge=1)


class CartLine(BaseModel):
    """One product entry in the cart."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str = ""
    unit_price: Money = Decimal("0")
    quantity: int = Field(default=1, ge=1)
    selected_add_ons: tuple[CartAddOn, ...] = ()
    notes: str = ""


class PricingSnapshot(BaseModel):
    """Money values frozen onto an order when it is placed."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    discount: Decimal = Decimal("0.00")
    service_fee: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    tax_rate_percent: Decimal = Decimal("0")
    delivery_fee: Decimal = Decimal("0.00")
    total: Decimal


class CartAggregate(PricingSnapshot):
    """Cart totals plus the minimum-order gate."""

    minimum_order_amount: Decimal = Decimal("0.00")
    meets_minimum_order: bool = True
    minimum_order_shortfall: Decimal = Decimal("0.00")
    item_count: int = 0

    def snapshot(self) -> PricingSnapshot:
        """Copy of the money fields for storing on an order."""
        return PricingSnapshot.model_validate(
            self.model_dump(include=set(PricingSnapshot.model_fields))
        )


# =============================================================================
# Cart edits
# =============================================================================


class CartEditAction(str, Enum):
    """Change applied to one line of the cart."""

    SET_QUANTITY = "set_quantity"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    SET_ADD_ON = "set_add_on"
    REMOVE_ADD_ON = "remove_add_on"


class CartEdit(BaseModel):
    """
    A single edit to the line at ``index``.

    ``quantity`` is the new line quantity for SET_QUANTITY and the new
    per-serving add-on quantity for SET_ADD_ON; zero removes the line or
    add-on.
    """

    model_config = ConfigDict(frozen=True)

    action: CartEditAction
    index: int = Field(ge=0)
    quantity: int | None = Field(default=None, ge=0)
    add_on: CartAddOn | None = None
    add_on_id: str | None = None

    @model_validator(mode="after")
    def check_arguments(self) -> Self:
        match self.action:
            case CartEditAction.SET_QUANTITY:
                if self.quantity is None:
                    raise ValueError("quantity is required for set_quantity")
            case CartEditAction.SET_ADD_ON:
                if self.add_on is None or self.quantity is None:
                    raise ValueError("add_on and quantity are required for set_add_on")
            case CartEditAction.REMOVE_ADD_ON:
                if not self.add_on_id:
                    raise ValueError("add_on_id is required for remove_add_on")
        return self

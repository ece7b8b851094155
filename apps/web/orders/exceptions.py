"""Order pricing and lifecycle exceptions."""

from decimal import Decimal
from typing import Any

from storefront_schemas import Actor, OrderAction, OrderStatus

from apps.web.core.exceptions import StorefrontError


class BelowMinimumOrder(StorefrontError):
    """Checkout blocked: cart subtotal is below the store's minimum order."""

    code = "below_minimum_order"

    def __init__(
        self,
        subtotal: Decimal,
        minimum_order_amount: Decimal,
        shortfall: Decimal,
    ) -> None:
        super().__init__(
            f"Minimum order is {minimum_order_amount:.2f}; add {shortfall:.2f} more"
        )
        self.subtotal = subtotal
        self.minimum_order_amount = minimum_order_amount
        self.shortfall = shortfall

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["subtotal"] = f"{self.subtotal:.2f}"
        data["minimum_order_amount"] = f"{self.minimum_order_amount:.2f}"
        data["shortfall"] = f"{self.shortfall:.2f}"
        return data


class InvalidTransition(StorefrontError):
    """Requested status change is not allowed from the current status."""

    code = "invalid_transition"

    def __init__(
        self,
        message: str,
        current: OrderStatus,
        action: OrderAction,
        actor: Actor,
        target: OrderStatus | None = None,
    ) -> None:
        super().__init__(message)
        self.current = current
        self.action = action
        self.actor = actor
        self.target = target

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["current_status"] = self.current.value
        data["action"] = self.action.value
        data["actor"] = self.actor.value
        data["target_status"] = self.target.value if self.target else None
        return data

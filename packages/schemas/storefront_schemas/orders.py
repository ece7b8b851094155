"""Order schemas - lifecycle, customer and delivery records."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from storefront_schemas.cart import DeliveryType
from storefront_schemas.geo import Coordinate

# =============================================================================
# Enums
# =============================================================================


class OrderStatus(str, Enum):
    """Order lifecycle status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class OrderAction(str, Enum):
    """Requested change to an order's status."""

    ADVANCE = "advance"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    REJECT = "reject"


class Actor(str, Enum):
    """Who requested a status change."""

    CUSTOMER = "customer"
    ADMIN = "admin"
    SYSTEM = "system"


class PaymentMethod(str, Enum):
    """How the customer pays."""

    CASH = "cash"
    CARD = "card"
    IDEAL = "ideal"

    @property
    def is_online(self) -> bool:
        """Whether payment goes through the payment gateway."""
        return self is not PaymentMethod.CASH


class PaymentStatus(str, Enum):
    """Payment processing status."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# =============================================================================
# Records
# =============================================================================


class CustomerInfo(BaseModel):
    """Contact details captured at checkout."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)
    email: EmailStr
    phone: str = Field(default="", max_length=20)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class DeliveryInfo(BaseModel):
    """Fulfilment details of an order."""

    type: DeliveryType
    address: str = ""
    coordinate: Coordinate | None = None


class StatusChange(BaseModel):
    """A single legal transition produced by the lifecycle state machine."""

    model_config = ConfigDict(frozen=True)

    from_status: OrderStatus
    to_status: OrderStatus
    action: OrderAction
    actor: Actor
    changed_at: datetime

"""Factory classes for order models and cart records."""

from decimal import Decimal

import factory
from storefront_schemas import (
    CartAddOn,
    CartLine,
    DeliveryType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)

from apps.web.delivery.tests.factories import StoreFactory
from apps.web.orders.models import Order, OrderItem


class CartAddOnFactory(factory.Factory):
    """Factory for CartAddOn records."""

    class Meta:
        model = CartAddOn

    add_on_id = factory.Sequence(lambda n: f"addon-{n}")
    name = factory.Sequence(lambda n: f"Add-on {n}")
    unit_price = factory.LazyFunction(lambda: Decimal("1.00"))
    quantity = 1


class CartLineFactory(factory.Factory):
    """Factory for CartLine records."""

    class Meta:
        model = CartLine

    product_id = factory.Sequence(lambda n: f"product-{n}")
    name = factory.Sequence(lambda n: f"Product {n}")
    unit_price = factory.LazyFunction(lambda: Decimal("12.50"))
    quantity = 1
    selected_add_ons = ()


class OrderFactory(factory.django.DjangoModelFactory):
    """Factory for Order model."""

    class Meta:
        model = Order

    store = factory.SubFactory(StoreFactory)
    confirmation_code = factory.Sequence(lambda n: f"ORD-{n:06d}")
    customer_first_name = factory.Faker("first_name")
    customer_last_name = factory.Faker("last_name")
    customer_email = factory.Faker("email")
    customer_phone = "0612345678"
    delivery_type = DeliveryType.DELIVERY.value
    delivery_address = "Hamersveldseweg 10, 3833 GR Leusden"
    delivery_latitude = 52.1365
    delivery_longitude = 5.4281
    subtotal = factory.LazyFunction(lambda: Decimal("25.00"))
    service_fee = factory.LazyFunction(lambda: Decimal("0.50"))
    delivery_fee = factory.LazyFunction(lambda: Decimal("2.50"))
    total = factory.LazyFunction(lambda: Decimal("28.00"))
    payment_method = PaymentMethod.CASH.value
    payment_status = PaymentStatus.PENDING.value
    status = OrderStatus.PENDING.value


class OrderItemFactory(factory.django.DjangoModelFactory):
    """Factory for OrderItem model."""

    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product_id = factory.Sequence(lambda n: f"product-{n}")
    item_name = factory.Sequence(lambda n: f"Product {n}")
    quantity = 1
    unit_price = factory.LazyFunction(lambda: Decimal("12.50"))
    line_total = factory.LazyAttribute(lambda obj: obj.unit_price * obj.quantity)

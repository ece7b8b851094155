"""
Cart pricing - line totals and cart aggregates.

Pricing is recomputed from scratch for every cart state. Nothing here
touches the database; callers persist the resulting snapshot.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from storefront_schemas import CartAggregate, CartLine, DeliveryType, StoreConfig

from apps.web.orders.exceptions import BelowMinimumOrder

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def add_on_unit_sum(line: CartLine) -> Decimal:
    """Price of the add-on bundle for one serving of the line."""
    return sum(
        (add_on.unit_price * add_on.quantity for add_on in line.selected_add_ons),
        ZERO,
    )


def line_total(line: CartLine) -> Decimal:
    """
    Monetary value of one cart line.

    Add-ons are per serving: the add-on bundle is priced once per unit of
    the parent item and then scaled by the parent's quantity.

        line_total = unit_price * quantity + add_on_unit_sum * quantity
    """
    base = line.unit_price * line.quantity
    return base + add_on_unit_sum(line) * line.quantity


def compose_cart(
    lines: Iterable[CartLine],
    store: StoreConfig,
    discount: Decimal = ZERO,
    delivery_type: DeliveryType = DeliveryType.DELIVERY,
) -> CartAggregate:
    """
    Combine cart lines with the store's fee and tax configuration.

    Args:
        lines: Current cart lines.
        store: Store serving the order.
        discount: Voucher discount (negative values are ignored).
        delivery_type: Collection orders carry no delivery fee.

    Returns:
        CartAggregate with totals rounded to cents and the minimum-order gate.
        The total never drops below zero.
    """
    lines = list(lines)
    discount = max(discount or ZERO, ZERO)

    subtotal = _money(sum((line_total(line) for line in lines), ZERO))
    service_fee = _money(store.service_fee)
    # Tax is levied on the subtotal only, before fees and discount
    tax_amount = _money(subtotal * store.tax_rate_percent / 100)
    delivery_fee = (
        _money(store.delivery_fee) if delivery_type == DeliveryType.DELIVERY else _money(ZERO)
    )

    total = subtotal + service_fee + tax_amount + delivery_fee - _money(discount)
    total = max(total, _money(ZERO))

    minimum = _money(store.minimum_order_amount)
    shortfall = max(minimum - subtotal, _money(ZERO))

    return CartAggregate(
        subtotal=subtotal,
        discount=_money(discount),
        service_fee=service_fee,
        tax_amount=tax_amount,
        tax_rate_percent=store.tax_rate_percent,
        delivery_fee=delivery_fee,
        total=total,
        minimum_order_amount=minimum,
        meets_minimum_order=subtotal >= minimum,
        minimum_order_shortfall=shortfall,
        item_count=sum(line.quantity for line in lines),
    )


def ensure_minimum_order(aggregate: CartAggregate) -> None:
    """
    Block checkout for carts below the store minimum.

    Raises:
        BelowMinimumOrder: With the shortfall still to be added.
    """
    if not aggregate.meets_minimum_order:
        raise BelowMinimumOrder(
            subtotal=aggregate.subtotal,
            minimum_order_amount=aggregate.minimum_order_amount,
            shortfall=aggregate.minimum_order_shortfall,
        )

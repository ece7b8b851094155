"""
Order lifecycle state machine.

Single authority for which status changes are legal. The machine holds no
state of its own: callers pass the authoritative current status and get back
a timestamped StatusChange or an InvalidTransition error.

Happy path:

    pending -> accepted|confirmed -> preparing -> ready
            -> out_for_delivery -> delivered

cancelled and rejected are terminal failure states reachable from any
non-terminal state (customer cancellation only before preparation starts).
"""

from datetime import UTC, datetime

from storefront_schemas import Actor, OrderAction, OrderStatus, StatusChange

from apps.web.orders.exceptions import InvalidTransition

TERMINAL_STATUSES = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REJECTED}
)

# Fixed successor for the admin "advance" action
NEXT_STATUS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.ACCEPTED,
    OrderStatus.ACCEPTED: OrderStatus.PREPARING,
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.OUT_FOR_DELIVERY: OrderStatus.DELIVERED,
}

# Food preparation has not started yet
CUSTOMER_CANCELLABLE = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.ACCEPTED}
)

# Who may request each action
ACTION_ACTORS: dict[OrderAction, frozenset[Actor]] = {
    OrderAction.ADVANCE: frozenset({Actor.ADMIN}),
    OrderAction.CONFIRM: frozenset({Actor.SYSTEM, Actor.ADMIN}),
    OrderAction.CANCEL: frozenset({Actor.CUSTOMER, Actor.ADMIN}),
    OrderAction.REJECT: frozenset({Actor.ADMIN}),
}


def is_terminal(status: OrderStatus) -> bool:
    """Whether no further transition is permitted from a status."""
    return status in TERMINAL_STATUSES


def next_status(status: OrderStatus) -> OrderStatus | None:
    """Successor on the happy path, or None for terminal statuses."""
    return NEXT_STATUS.get(status)


def can_cancel(status: OrderStatus, actor: Actor = Actor.CUSTOMER) -> bool:
    """Whether ``actor`` may cancel an order in ``status``."""
    if is_terminal(status):
        return False
    if actor == Actor.CUSTOMER:
        return status in CUSTOMER_CANCELLABLE
    return actor == Actor.ADMIN


def _target(current: OrderStatus, action: OrderAction, actor: Actor) -> OrderStatus:
    """Resolve the status an action leads to, or raise InvalidTransition."""
    if actor not in ACTION_ACTORS[action]:
        raise InvalidTransition(
            f"{actor.value} may not {action.value} an order",
            current=current,
            action=action,
            actor=actor,
        )

    if is_terminal(current):
        raise InvalidTransition(
            f"Order is already {current.value}",
            current=current,
            action=action,
            actor=actor,
        )

    match action:
        case OrderAction.ADVANCE:
            return NEXT_STATUS[current]
        case OrderAction.CONFIRM:
            if current != OrderStatus.PENDING:
                raise InvalidTransition(
                    f"Only pending orders can be confirmed (order is {current.value})",
                    current=current,
                    action=action,
                    actor=actor,
                    target=OrderStatus.CONFIRMED,
                )
            return OrderStatus.CONFIRMED
        case OrderAction.CANCEL:
            if not can_cancel(current, actor):
                raise InvalidTransition(
                    f"Order can no longer be cancelled (order is {current.value})",
                    current=current,
                    action=action,
                    actor=actor,
                    target=OrderStatus.CANCELLED,
                )
            return OrderStatus.CANCELLED
        case OrderAction.REJECT:
            return OrderStatus.REJECTED

    raise InvalidTransition(  # pragma: no cover
        f"Unknown action {action}",
        current=current,
        action=action,
        actor=actor,
    )


def transition(
    current: OrderStatus,
    action: OrderAction,
    actor: Actor,
    at: datetime | None = None,
) -> StatusChange:
    """
    Apply an action to the current status.

    Args:
        current: Authoritative current status (supplied by the caller).
        action: Requested change.
        actor: Who requests it.
        at: Timestamp of the change (defaults to now, UTC).

    Returns:
        StatusChange describing the legal transition.

    Raises:
        InvalidTransition: If the action is not allowed for this actor from
            the current status. Terminal statuses reject every action.
    """
    target = _target(current, action, actor)
    return StatusChange(
        from_status=current,
        to_status=target,
        action=action,
        actor=actor,
        changed_at=at or datetime.now(UTC),
    )


def allowed_actions(status: OrderStatus, actor: Actor) -> list[OrderAction]:
    """Actions ``actor`` may currently take, in OrderAction order."""
    allowed: list[OrderAction] = []
    for action in OrderAction:
        try:
            _target(status, action, actor)
        except InvalidTransition:
            continue
        allowed.append(action)
    return allowed

"""
Store operating hours.

Pure functions over StoreConfig. Times are compared at minute resolution
and both the opening and the closing minute count as open.
"""

from datetime import datetime

from storefront_schemas import DayHours, StoreConfig, Weekday

from apps.web.delivery.exceptions import StoreClosed


def hours_for(store: StoreConfig, at: datetime) -> DayHours | None:
    """Return the window for the weekday of ``at``, or None if it has none."""
    if store.operating_hours is None:
        return None
    return store.operating_hours.get(Weekday.for_index(at.weekday()))


def is_open(store: StoreConfig, at: datetime) -> bool:
    """
    Whether ``store`` accepts orders at ``at``.

    ``at`` is read as wall-clock time in the store's zone; callers pass an
    aware datetime already converted with ``timezone.localtime``.
    """
    if store.operating_hours is None:
        return True
    day = hours_for(store, at)
    if day is None or not day.is_open:
        return False
    minute = at.time().replace(second=0, microsecond=0)
    return day.open <= minute <= day.close


def ensure_open(store: StoreConfig, at: datetime) -> None:
    """
    Raises:
        StoreClosed: If the store is closed at ``at``.
    """
    if not is_open(store, at):
        raise StoreClosed(
            f"{store.name or 'Store'} is closed",
            store_id=store.id,
            day=Weekday.for_index(at.weekday()).value,
        )

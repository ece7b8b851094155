"""Tests for store operating hours."""

from datetime import datetime, time

from django.core.exceptions import ValidationError as ModelValidationError

import pytest
from pydantic import ValidationError
from storefront_schemas import DayHours, Weekday

from apps.web.delivery.exceptions import StoreClosed
from apps.web.delivery.hours import ensure_open, hours_for, is_open
from apps.web.delivery.models import Store
from apps.web.delivery.tests.factories import StoreConfigFactory

# 2026-10-19 is a Monday
MONDAY = datetime(2026, 10, 19)
TUESDAY = datetime(2026, 10, 20)
SUNDAY = datetime(2026, 10, 25)

WEEKDAYS_10_TO_22 = {
    day: DayHours(open=time(10, 0), close=time(22, 0))
    for day in Weekday
    if day != Weekday.SUNDAY
}


def _at(day: datetime, hour: int, minute: int = 0, second: int = 0) -> datetime:
    return day.replace(hour=hour, minute=minute, second=second)


class TestIsOpen:
    """Tests for the opening-hours check."""

    @pytest.mark.parametrize(
        ("hour", "minute", "second", "expected"),
        [
            (9, 59, 59, False),
            (10, 0, 0, True),
            (15, 30, 0, True),
            (22, 0, 0, True),
            # Seconds are ignored: the closing minute is open throughout
            (22, 0, 59, True),
            (22, 1, 0, False),
        ],
    )
    def test_boundaries(self, hour: int, minute: int, second: int, expected: bool) -> None:
        store = StoreConfigFactory(operating_hours=WEEKDAYS_10_TO_22)

        assert is_open(store, _at(MONDAY, hour, minute, second)) is expected

    def test_missing_day_is_closed(self) -> None:
        store = StoreConfigFactory(operating_hours=WEEKDAYS_10_TO_22)

        assert is_open(store, _at(SUNDAY, 12)) is False

    def test_day_marked_closed(self) -> None:
        hours = {
            **WEEKDAYS_10_TO_22,
            Weekday.TUESDAY: DayHours(is_open=False, open=time(10, 0), close=time(22, 0)),
        }
        store = StoreConfigFactory(operating_hours=hours)

        assert is_open(store, _at(TUESDAY, 12)) is False
        assert is_open(store, _at(MONDAY, 12)) is True

    def test_no_schedule_is_always_open(self) -> None:
        store = StoreConfigFactory()

        assert store.operating_hours is None
        assert is_open(store, _at(SUNDAY, 3)) is True

    def test_empty_schedule_is_always_closed(self) -> None:
        store = StoreConfigFactory(operating_hours={})

        assert is_open(store, _at(MONDAY, 12)) is False

    def test_hours_from_admin_json(self) -> None:
        """Test the JSON shape stored on Store.operating_hours."""
        store = StoreConfigFactory(
            operating_hours={"monday": {"open": "10:00", "close": "22:00", "isOpen": True}}
        )

        assert hours_for(store, MONDAY) == DayHours(open=time(10, 0), close=time(22, 0))
        assert hours_for(store, TUESDAY) is None
        assert is_open(store, _at(MONDAY, 21, 59)) is True


class TestEnsureOpen:
    """Tests for the checkout gate."""

    def test_open(self) -> None:
        ensure_open(StoreConfigFactory(operating_hours=WEEKDAYS_10_TO_22), _at(MONDAY, 12))

    def test_closed_raises_with_day(self) -> None:
        store = StoreConfigFactory(id=7, name="Leusden", operating_hours=WEEKDAYS_10_TO_22)

        with pytest.raises(StoreClosed) as exc_info:
            ensure_open(store, _at(SUNDAY, 12))

        assert exc_info.value.to_dict() == {
            "error": "store_closed",
            "message": "Leusden is closed",
            "store_id": 7,
            "day": "sunday",
        }


class TestDayHours:
    """Tests for the DayHours schema."""

    def test_close_before_open_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DayHours(open=time(22, 0), close=time(10, 0))

    def test_closed_day_skips_window_check(self) -> None:
        assert DayHours(is_open=False, open=time(22, 0), close=time(10, 0)).is_open is False

    def test_weekday_for_index(self) -> None:
        assert Weekday.for_index(MONDAY.weekday()) == Weekday.MONDAY
        assert Weekday.for_index(SUNDAY.weekday()) == Weekday.SUNDAY


class TestStoreHoursField:
    """Tests for validating Store.operating_hours in the admin."""

    def test_valid_schedule(self) -> None:
        Store(operating_hours={"friday": {"open": "16:00", "close": "23:30"}}).clean()

    @pytest.mark.parametrize(
        "hours",
        [
            {"funday": {"open": "10:00", "close": "22:00"}},
            {"monday": {"open": "22:00", "close": "10:00"}},
            {"monday": {"open": "ten", "close": "22:00"}},
        ],
    )
    def test_invalid_schedule(self, hours: dict) -> None:
        with pytest.raises(ModelValidationError) as exc_info:
            Store(operating_hours=hours).clean()

        assert "operating_hours" in exc_info.value.message_dict

from __future__ import annotations

import datetime as dt

from slotpicker.domain import TimeSlot
from slotpicker.slot_filter import filter_for_date


def _slot(date: str, time: str, available: bool = True) -> TimeSlot:
    return TimeSlot(date=date, time=time, available=available)


def test_keeps_only_available_slots_of_the_selected_date() -> None:
    slots = [
        _slot("2025-06-10", "09:00"),
        _slot("2025-06-11", "09:00"),
        _slot("2025-06-10", "09:30", available=False),
        _slot("2025-06-10", "10:00"),
    ]

    result = filter_for_date(slots, dt.date(2025, 6, 10))

    assert result == [_slot("2025-06-10", "09:00"), _slot("2025-06-10", "10:00")]


def test_preserves_upstream_order_instead_of_sorting() -> None:
    slots = [_slot("2025-06-10", "14:00"), _slot("2025-06-10", "09:00"), _slot("2025-06-10", "11:30")]

    result = filter_for_date(slots, "2025-06-10")

    assert [s.time for s in result] == ["14:00", "09:00", "11:30"]


def test_filtering_twice_is_a_no_op() -> None:
    slots = [_slot("2025-06-10", "09:00"), _slot("2025-06-12", "09:00"), _slot("2025-06-10", "12:00", False)]
    day = dt.date(2025, 6, 10)

    once = filter_for_date(slots, day)
    assert filter_for_date(once, day) == once


def test_empty_input_gives_empty_output() -> None:
    assert filter_for_date([], dt.date(2025, 6, 10)) == []


def test_datetime_is_matched_by_its_day() -> None:
    slots = [_slot("2025-06-10", "09:00"), _slot("2025-06-11", "09:00")]

    assert filter_for_date(slots, dt.datetime(2025, 6, 10, 12, 30)) == [_slot("2025-06-10", "09:00")]

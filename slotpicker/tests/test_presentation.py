from __future__ import annotations

import datetime as dt

import pytest

from slotpicker.domain import ErrorReason, SelectionState, Status, TimeSlot
from slotpicker.presentation import (
    NO_SCHEDULE_MESSAGE,
    NO_SLOTS_FOR_DATE_MESSAGE,
    TRANSPORT_FAILURE_MESSAGE,
    SlotButton,
    ViewKind,
    format_summary,
    format_view,
    render,
)

DAY = dt.date(2025, 6, 10)


def test_no_date_hides_time_section() -> None:
    view = render(SelectionState(selected_time="09:00", status=Status.IDLE))

    assert view.kind is ViewKind.HIDDEN
    assert view.summary is None


def test_loading_shows_only_indicator() -> None:
    view = render(SelectionState(selected_date=DAY, status=Status.LOADING))

    assert view.kind is ViewKind.LOADING
    assert view.message is None
    assert view.buttons == ()


@pytest.mark.parametrize(
    "reason, message, expected",
    [
        (ErrorReason.NO_SCHEDULE_CONFIGURED, None, NO_SCHEDULE_MESSAGE),
        (ErrorReason.NO_SLOTS_FOR_DATE, None, NO_SLOTS_FOR_DATE_MESSAGE),
        (ErrorReason.TRANSPORT_FAILURE, "Business not found", "Business not found"),
        (ErrorReason.TRANSPORT_FAILURE, None, TRANSPORT_FAILURE_MESSAGE),
    ],
)
def test_error_copy_depends_on_reason(reason: ErrorReason, message: str | None, expected: str) -> None:
    view = render(SelectionState(selected_date=DAY, status=Status.ERROR, error_reason=reason, error_message=message))

    assert view.kind is ViewKind.ERROR
    assert view.message == expected
    assert view.buttons == ()


def test_error_messages_are_distinguishable() -> None:
    assert len({NO_SCHEDULE_MESSAGE, NO_SLOTS_FOR_DATE_MESSAGE, TRANSPORT_FAILURE_MESSAGE}) == 3


def test_ready_renders_one_button_per_slot() -> None:
    state = SelectionState(
        selected_date=DAY,
        selected_time="09:30",
        status=Status.READY,
        slots_for_selected_date=(
            TimeSlot("2025-06-10", "09:00", True),
            TimeSlot("2025-06-10", "09:30", True),
            TimeSlot("2025-06-10", "10:00", False),
        ),
    )

    view = render(state)

    assert view.kind is ViewKind.SLOTS
    assert view.buttons == (
        SlotButton(label="09:00", selected=False, disabled=False),
        SlotButton(label="09:30", selected=True, disabled=False),
        SlotButton(label="10:00", selected=False, disabled=True),
    )
    assert view.summary == "Tuesday, June 10, 2025 at 09:30"


def test_date_without_fetch_renders_empty_hint() -> None:
    view = render(SelectionState(selected_date=DAY, status=Status.IDLE))

    assert view.kind is ViewKind.EMPTY
    assert view.message is not None
    assert "This may be because:" in view.message


def test_summary_needs_both_date_and_time() -> None:
    assert render(SelectionState(selected_date=DAY, status=Status.LOADING)).summary is None
    assert render(SelectionState(selected_date=DAY, selected_time="09:00", status=Status.LOADING)).summary is not None


def test_format_summary_has_no_zero_padded_day() -> None:
    assert format_summary(dt.date(2025, 6, 1), "18:00") == "Sunday, June 1, 2025 at 18:00"


def test_format_view_marks_selected_and_disabled_slots() -> None:
    state = SelectionState(
        selected_date=DAY,
        selected_time="09:00",
        status=Status.READY,
        slots_for_selected_date=(
            TimeSlot("2025-06-10", "09:00", True),
            TimeSlot("2025-06-10", "09:30", False),
            TimeSlot("2025-06-10", "10:00", True),
        ),
    )

    text = format_view(render(state))

    assert "[09:00]  (09:30)  10:00" in text
    assert text.endswith("Selected booking:\nTuesday, June 10, 2025 at 09:00")


def test_format_view_without_date() -> None:
    assert format_view(render(SelectionState())) == "Select a date to see available times."

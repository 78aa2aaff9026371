from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass

from slotpicker.domain import ErrorReason, SelectionState, Status

NO_SCHEDULE_MESSAGE = (
    "This business hasn't set up their availability schedule yet. "
    "Please contact them to set up booking times."
)
NO_SLOTS_FOR_DATE_MESSAGE = "No available time slots for this date. Please select another date."
TRANSPORT_FAILURE_MESSAGE = "Failed to load available time slots"

EMPTY_MESSAGE_LINES = (
    "No available time slots for this date.",
    "This may be because:",
    "• The business hasn't set up their availability schedule",
    "• All slots for this date are already booked",
    "• This date is blocked by the business",
    "Please select another date or contact the business.",
)


class ViewKind(str, enum.Enum):
    HIDDEN = "hidden"
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    SLOTS = "slots"


@dataclass(frozen=True)
class SlotButton:
    label: str
    selected: bool
    disabled: bool


@dataclass(frozen=True)
class PickerView:
    kind: ViewKind
    message: str | None = None
    buttons: tuple[SlotButton, ...] = ()
    summary: str | None = None


def error_message_for(state: SelectionState) -> str:
    if state.error_reason is ErrorReason.NO_SCHEDULE_CONFIGURED:
        return NO_SCHEDULE_MESSAGE
    if state.error_reason is ErrorReason.NO_SLOTS_FOR_DATE:
        return NO_SLOTS_FOR_DATE_MESSAGE
    return state.error_message or TRANSPORT_FAILURE_MESSAGE


def format_summary(selected_date: dt.date, selected_time: str) -> str:
    # e.g. "Tuesday, June 10, 2025 at 09:00"
    return f"{selected_date:%A}, {selected_date:%B} {selected_date.day}, {selected_date.year} at {selected_time}"


def render(state: SelectionState) -> PickerView:
    summary = None
    if state.selected_date is not None and state.selected_time:
        summary = format_summary(state.selected_date, state.selected_time)

    if state.selected_date is None:
        return PickerView(kind=ViewKind.HIDDEN)

    if state.status is Status.LOADING:
        return PickerView(kind=ViewKind.LOADING, summary=summary)

    if state.status is Status.ERROR:
        return PickerView(kind=ViewKind.ERROR, message=error_message_for(state), summary=summary)

    if state.status is Status.READY and state.slots_for_selected_date:
        buttons = tuple(
            SlotButton(
                label=slot.time,
                selected=slot.time == state.selected_time,
                disabled=not slot.available,
            )
            for slot in state.slots_for_selected_date
        )
        return PickerView(kind=ViewKind.SLOTS, buttons=buttons, summary=summary)

    return PickerView(kind=ViewKind.EMPTY, message="\n".join(EMPTY_MESSAGE_LINES), summary=summary)


def format_view(view: PickerView) -> str:
    """Plain-text rendering used by the CLI."""

    if view.kind is ViewKind.HIDDEN:
        return "Select a date to see available times."

    lines = ["Select Time"]
    if view.kind is ViewKind.LOADING:
        lines.append("Loading available times...")
    elif view.kind is ViewKind.SLOTS:
        labels = []
        for b in view.buttons:
            if b.selected:
                labels.append(f"[{b.label}]")
            elif b.disabled:
                labels.append(f"({b.label})")
            else:
                labels.append(b.label)
        lines.append("  ".join(labels))
    elif view.message:
        lines.append(view.message)

    if view.summary:
        lines.append("")
        lines.append("Selected booking:")
        lines.append(view.summary)

    return "\n".join(lines)

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from typing import Any, Mapping


class Status(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


class ErrorReason(str, enum.Enum):
    NO_SCHEDULE_CONFIGURED = "no-schedule-configured"
    NO_SLOTS_FOR_DATE = "no-slots-for-date"
    TRANSPORT_FAILURE = "transport-failure"


@dataclass(frozen=True)
class TimeSlot:
    """A single bookable (date, time) pair as returned by the scheduling endpoint."""

    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    available: bool

    @classmethod
    def from_payload(cls, item: Mapping[str, Any]) -> TimeSlot:
        return cls(
            date=str(item["date"]),
            time=str(item["time"]),
            available=bool(item.get("available", False)),
        )


@dataclass(frozen=True)
class AvailabilityQuery:
    business_id: str
    duration_minutes: int
    start_date: dt.date
    end_date: dt.date
    slot_interval_minutes: int = 30

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(f"Query window ends before it starts: {self.start_date}..{self.end_date}")

    @classmethod
    def for_date(
        cls,
        *,
        business_id: str,
        duration_minutes: int,
        selected_date: dt.date,
        window_days: int = 7,
        slot_interval_minutes: int = 30,
    ) -> AvailabilityQuery:
        return cls(
            business_id=business_id,
            duration_minutes=duration_minutes,
            start_date=selected_date,
            end_date=selected_date + dt.timedelta(days=window_days),
            slot_interval_minutes=slot_interval_minutes,
        )

    def to_params(self) -> dict[str, str]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "durationMinutes": str(self.duration_minutes),
            "slotIntervalMinutes": str(self.slot_interval_minutes),
        }


@dataclass(frozen=True)
class SelectionState:
    selected_date: dt.date | None = None
    selected_time: str | None = None
    slots_for_selected_date: tuple[TimeSlot, ...] = ()
    status: Status = Status.IDLE
    error_reason: ErrorReason | None = None
    error_message: str | None = None


class AvailabilityError(RuntimeError):
    """Availability could not be resolved for the requested date.

    Always handled inside the picker: it ends up as the error state and is never
    propagated to the host's selection callback.
    """

    def __init__(self, reason: ErrorReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

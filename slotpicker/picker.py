from __future__ import annotations

import datetime as dt
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable

from slotpicker.api_client import fetch_slots
from slotpicker.domain import AvailabilityError, ErrorReason, SelectionState, Status, TimeSlot
from slotpicker.session import SessionContext
from slotpicker.slot_filter import filter_for_date

logger = logging.getLogger(__name__)

OnSelect = Callable[[str, str], None]
Fetcher = Callable[..., Awaitable["list[TimeSlot] | None"]]

_UNSET = object()


def _as_date(value: dt.date | str | None) -> dt.date | None:
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    # Accepts "2025-06-10" as well as "2025-06-10T00:00:00".
    return dt.datetime.fromisoformat(value).date()


class AvailabilityPicker:
    """Date/time picker for booking-capable pages.

    The host owns the selection: it feeds ``selected_date``/``selected_time`` in
    (constructor and ``sync``) and gets user picks back through ``on_select``.
    The picker only resolves which times are bookable for the selected date.

    Every fetch gets a generation number. A response is applied only if its
    generation is still the latest one, so a slow answer for a previously
    selected date never overwrites the state of the current date.
    """

    def __init__(
        self,
        session: SessionContext,
        *,
        business_id: str | None,
        duration_minutes: int | None,
        on_select: OnSelect,
        selected_date: dt.date | str | None = None,
        selected_time: str | None = None,
        window_days: int = 7,
        slot_interval_minutes: int = 30,
        fetcher: Fetcher = fetch_slots,
        today: Callable[[], dt.date] = dt.date.today,
        listener: Callable[[SelectionState], None] | None = None,
    ):
        if window_days < 1:
            raise ValueError(f"window_days must be >= 1, got {window_days}")
        if slot_interval_minutes < 1:
            raise ValueError(f"slot_interval_minutes must be >= 1, got {slot_interval_minutes}")

        self._session = session
        self._business_id = business_id
        self._duration_minutes = duration_minutes
        self._on_select = on_select
        self._window_days = window_days
        self._slot_interval_minutes = slot_interval_minutes
        self._fetcher = fetcher
        self._today = today
        self._listener = listener

        self._generation = 0
        self._state = SelectionState(
            selected_date=_as_date(selected_date),
            selected_time=selected_time or None,
        )

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def business_id(self) -> str | None:
        return self._business_id

    @property
    def duration_minutes(self) -> int | None:
        return self._duration_minutes

    def _set(self, state: SelectionState) -> None:
        self._state = state
        if self._listener is not None:
            self._listener(state)

    async def start(self) -> None:
        # A date supplied by the host up front is resolved right away.
        if self._state.selected_date is not None:
            await self._resolve()

    async def refresh(self) -> None:
        await self._resolve()

    async def sync(
        self,
        *,
        selected_date: Any = _UNSET,
        selected_time: Any = _UNSET,
        business_id: Any = _UNSET,
        duration_minutes: Any = _UNSET,
    ) -> None:
        """Apply values re-fed by the host. Re-resolves only when something the query depends on changed."""

        changed = False

        if selected_date is not _UNSET:
            new_date = _as_date(selected_date)
            if new_date != self._state.selected_date:
                self._state = replace(self._state, selected_date=new_date)
                changed = True

        if business_id is not _UNSET and business_id != self._business_id:
            self._business_id = business_id
            changed = True

        if duration_minutes is not _UNSET and duration_minutes != self._duration_minutes:
            self._duration_minutes = duration_minutes
            changed = True

        if selected_time is not _UNSET:
            new_time = selected_time or None
            if new_time != self._state.selected_time:
                self._set(replace(self._state, selected_time=new_time))

        if changed:
            await self._resolve()

    def is_selectable(self, day: dt.date | str) -> bool:
        return _as_date(day) >= self._today()

    async def pick_date(self, day: dt.date | str | None) -> bool:
        """User picked a date (or cleared it). Returns False if the pick was rejected."""

        new_date = _as_date(day)
        if new_date is not None and not self.is_selectable(new_date):
            logger.info("Rejected past date %s", new_date.isoformat())
            return False

        self._state = replace(self._state, selected_date=new_date, selected_time=None)
        if new_date is not None:
            self._on_select(new_date.isoformat(), "")

        await self._resolve()
        return True

    def pick_time(self, time: str) -> bool:
        """User picked a time. Only times currently offered as available are accepted."""

        state = self._state
        if state.selected_date is None or state.status is not Status.READY:
            return False

        slot = next((s for s in state.slots_for_selected_date if s.time == time), None)
        if slot is None or not slot.available:
            logger.debug("Ignoring pick of unavailable time %r", time)
            return False

        self._set(replace(state, selected_time=time))
        self._on_select(state.selected_date.isoformat(), time)
        return True

    def _has_query_inputs(self) -> bool:
        return bool(self._business_id) and (self._duration_minutes or 0) > 0

    async def _resolve(self) -> None:
        self._generation += 1
        generation = self._generation
        selected_date = self._state.selected_date

        if selected_date is None:
            self._set(
                replace(
                    self._state,
                    slots_for_selected_date=(),
                    status=Status.IDLE,
                    error_reason=None,
                    error_message=None,
                )
            )
            return

        if not self._has_query_inputs():
            # Nothing to ask for yet; keep the date and wait for the host.
            self._set(replace(self._state, slots_for_selected_date=(), status=Status.IDLE, error_reason=None, error_message=None))
            return

        self._set(replace(self._state, slots_for_selected_date=(), status=Status.LOADING, error_reason=None, error_message=None))

        try:
            all_slots = await self._fetcher(
                self._session,
                business_id=self._business_id,
                duration_minutes=self._duration_minutes,
                selected_date=selected_date,
                window_days=self._window_days,
                slot_interval_minutes=self._slot_interval_minutes,
            )
        except AvailabilityError as e:
            if generation != self._generation:
                logger.debug("Dropping stale failure for %s", selected_date.isoformat())
                return
            logger.warning("Failed to load available slots for %s (%s)", selected_date.isoformat(), e.message)
            self._set(
                replace(
                    self._state,
                    status=Status.ERROR,
                    error_reason=e.reason,
                    error_message=e.message,
                )
            )
            return
        except Exception as e:
            # Anything else is still a failed load; the host never sees it.
            if generation != self._generation:
                logger.debug("Dropping stale failure for %s", selected_date.isoformat())
                return
            logger.error("Unexpected error loading slots for %s (%s: %s)", selected_date.isoformat(), type(e).__name__, e)
            self._set(
                replace(
                    self._state,
                    status=Status.ERROR,
                    error_reason=ErrorReason.TRANSPORT_FAILURE,
                    error_message=None,
                )
            )
            return

        if generation != self._generation:
            logger.debug("Dropping stale availability response for %s", selected_date.isoformat())
            return

        if all_slots is None:
            self._set(replace(self._state, status=Status.IDLE))
            return

        slots_for_date = tuple(filter_for_date(all_slots, selected_date))

        if not all_slots:
            # Nothing in the whole window: the business has no schedule upstream.
            self._set(replace(self._state, status=Status.ERROR, error_reason=ErrorReason.NO_SCHEDULE_CONFIGURED))
        elif not slots_for_date:
            self._set(replace(self._state, status=Status.ERROR, error_reason=ErrorReason.NO_SLOTS_FOR_DATE))
        else:
            self._set(replace(self._state, slots_for_selected_date=slots_for_date, status=Status.READY))

        logger.info(
            "Slots: window=%d date=%d status=%s",
            len(all_slots),
            len(slots_for_date),
            self._state.status.value,
        )

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Callable

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from slotpicker.config import Settings
from slotpicker.domain import AvailabilityError, ErrorReason, SelectionState, Status
from slotpicker.picker import AvailabilityPicker
from slotpicker.presentation import format_view, render
from slotpicker.session import SessionContext

logger = logging.getLogger(__name__)

_RETRY_WAIT = wait_exponential(multiplier=2, min=2, max=4)


def _on_unauthorized() -> None:
    logger.warning("Session was rejected by the API. Log in again and update SESSION_COOKIE.")


def _short_exc(retry_state: RetryCallState) -> str | None:
    if retry_state.outcome is None or not retry_state.outcome.failed:
        return None
    exc = retry_state.outcome.exception()
    if exc is None:
        return None
    msg = str(exc).strip()
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


def _log_before_attempt(retry_state: RetryCallState) -> None:
    logger.info("Attempt %s: start", retry_state.attempt_number)


def _log_after_attempt(retry_state: RetryCallState) -> None:
    if retry_state.outcome is not None and retry_state.outcome.failed:
        reason = _short_exc(retry_state)
        if reason:
            logger.warning("Attempt %s: failed (%s)", retry_state.attempt_number, reason)
        else:
            logger.warning("Attempt %s: failed", retry_state.attempt_number)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    sleep_seconds = getattr(retry_state.next_action, "sleep", None)
    if sleep_seconds is None:
        logger.info("Waiting before the next attempt...")
        return
    logger.info("Waiting %.0f s before attempt %s", sleep_seconds, retry_state.attempt_number + 1)


async def _refresh_checked(picker: AvailabilityPicker) -> None:
    await picker.refresh()
    state = picker.state
    # Only transport failures are worth another try; the other errors are answers.
    if state.status is Status.ERROR and state.error_reason is ErrorReason.TRANSPORT_FAILURE:
        raise AvailabilityError(state.error_reason, state.error_message or "Failed to load available slots")


async def refresh_with_retry(picker: AvailabilityPicker, *, attempts: int) -> SelectionState:
    """Re-resolve availability, retrying transport failures up to ``attempts`` times in total.

    The final state is returned either way; a failure that survived all attempts is
    left in the picker as its error state.
    """

    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=_RETRY_WAIT,
        retry=retry_if_exception_type(AvailabilityError),
        before=_log_before_attempt,
        after=_log_after_attempt,
        before_sleep=_log_before_sleep,
        reraise=True,
    )
    try:
        await retrying(_refresh_checked, picker)
    except AvailabilityError as e:
        logger.error("Availability check failed (%s)", e.message)
    return picker.state


def build_picker(
    session: SessionContext,
    settings: Settings,
    *,
    business_id: str,
    duration_minutes: int,
    selected_date: dt.date,
    on_select: Callable[[str, str], None] | None = None,
) -> AvailabilityPicker:
    def _log_selection(date_iso: str, time: str) -> None:
        logger.info("Selected booking: date=%s time=%s", date_iso, time or "-")

    return AvailabilityPicker(
        session,
        business_id=business_id,
        duration_minutes=duration_minutes,
        on_select=on_select or _log_selection,
        selected_date=selected_date,
        window_days=settings.window_days,
        slot_interval_minutes=settings.slot_interval_minutes,
    )


async def run_check_once(
    settings: Settings,
    *,
    business_id: str,
    duration_minutes: int,
    selected_date: dt.date,
    selected_time: str | None = None,
    output: Callable[[str], None] = print,
) -> SelectionState:
    async with SessionContext.from_settings(settings, on_unauthorized=_on_unauthorized) as session:
        picker = build_picker(
            session,
            settings,
            business_id=business_id,
            duration_minutes=duration_minutes,
            selected_date=selected_date,
        )
        if not picker.is_selectable(selected_date):
            raise ValueError(f"Date {selected_date.isoformat()} is in the past")

        state = await refresh_with_retry(picker, attempts=settings.fetch_retry_attempts)

        if selected_time:
            if not picker.pick_time(selected_time):
                logger.warning("Time %s is not available on %s", selected_time, selected_date.isoformat())
            state = picker.state

        output(format_view(render(state)))
        return state


async def run_forever(
    settings: Settings,
    *,
    business_id: str,
    duration_minutes: int,
    selected_date: dt.date,
    output: Callable[[str], None] = print,
) -> None:
    logger.info("Watching availability. Interval=%ss", settings.refresh_interval_seconds)
    async with SessionContext.from_settings(settings, on_unauthorized=_on_unauthorized) as session:
        picker = build_picker(
            session,
            settings,
            business_id=business_id,
            duration_minutes=duration_minutes,
            selected_date=selected_date,
        )
        if not picker.is_selectable(selected_date):
            raise ValueError(f"Date {selected_date.isoformat()} is in the past")

        while True:
            try:
                state = await refresh_with_retry(picker, attempts=settings.fetch_retry_attempts)
                output(format_view(render(state)))
            except Exception as e:
                # One bad poll must not stop the watch loop.
                logger.error("Check failed in run_forever (%s: %s)", type(e).__name__, e)
            await asyncio.sleep(settings.refresh_interval_seconds)

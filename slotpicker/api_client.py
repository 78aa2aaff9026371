from __future__ import annotations

import datetime as dt
import logging
from urllib.parse import quote

import httpx

from slotpicker.domain import AvailabilityError, AvailabilityQuery, ErrorReason, TimeSlot
from slotpicker.session import SessionContext

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to load available slots"


def build_availability_path(business_id: str) -> str:
    return f"/businesses/{quote(business_id, safe='')}/availability"


def _failure(message: str | None) -> AvailabilityError:
    return AvailabilityError(ErrorReason.TRANSPORT_FAILURE, message or FETCH_FAILED_MESSAGE)


async def fetch_slots(
    session: SessionContext,
    *,
    business_id: str | None,
    duration_minutes: int | None,
    selected_date: dt.date | None,
    window_days: int = 7,
    slot_interval_minutes: int = 30,
) -> list[TimeSlot] | None:
    """Fetch the raw slot list for the window anchored at ``selected_date``.

    Returns None without touching the network when business id, duration or
    date is missing. Raises AvailabilityError(TRANSPORT_FAILURE) on any HTTP,
    network or payload problem. Slots come back exactly as the backend sent them.
    """

    if not business_id or (duration_minutes or 0) <= 0 or selected_date is None:
        logger.debug(
            "Skipping availability fetch (business_id=%r duration=%r date=%r)",
            business_id,
            duration_minutes,
            selected_date,
        )
        return None

    if isinstance(selected_date, dt.datetime):
        selected_date = selected_date.date()

    query = AvailabilityQuery.for_date(
        business_id=business_id,
        duration_minutes=duration_minutes,
        selected_date=selected_date,
        window_days=window_days,
        slot_interval_minutes=slot_interval_minutes,
    )
    path = build_availability_path(business_id)

    logger.info("Fetching availability: %s %s..%s", path, query.start_date, query.end_date)
    try:
        response = await session.get(path, params=query.to_params())
    except httpx.HTTPError as e:
        logger.warning("Availability request failed (%s: %s)", type(e).__name__, e)
        raise _failure(str(e).strip() or None) from e

    try:
        data = response.json()
    except (ValueError, RecursionError) as e:
        # Undecodable or absurdly nested body.
        raise _failure(None) from e

    if not isinstance(data, dict):
        raise _failure(None)

    if not response.is_success or not data.get("success", False):
        message = data.get("message")
        logger.warning("Availability endpoint returned an error (status=%s message=%r)", response.status_code, message)
        raise _failure(str(message) if message else None)

    items = data.get("data")
    if not isinstance(items, list):
        return []

    try:
        return [TimeSlot.from_payload(item) for item in items]
    except (KeyError, TypeError, AttributeError) as e:
        raise _failure(None) from e

"""Smoke test against a running marketplace API.

Skipped by default. To run it, point it at a backend and a business that has an
availability schedule:

    export LIVE_API_BASE_URL=http://localhost:5000/api
    export LIVE_BUSINESS_ID=...
    export LIVE_SESSION_COOKIE="connect.sid=..."   # optional
    python -m pytest -q -m live_api
"""

from __future__ import annotations

import asyncio
import datetime as dt
import os

import pytest

from slotpicker.api_client import fetch_slots
from slotpicker.session import SessionContext, parse_cookie_header

pytestmark = pytest.mark.live_api


@pytest.mark.skipif(
    not os.getenv("LIVE_API_BASE_URL") or not os.getenv("LIVE_BUSINESS_ID"),
    reason="Set LIVE_API_BASE_URL and LIVE_BUSINESS_ID to run the live availability smoke test",
)
def test_live_availability_window_smoke() -> None:
    start = dt.date.today() + dt.timedelta(days=1)

    async def _run():
        async with SessionContext(
            base_url=os.environ["LIVE_API_BASE_URL"],
            cookies=parse_cookie_header(os.getenv("LIVE_SESSION_COOKIE")),
        ) as session:
            return await fetch_slots(
                session,
                business_id=os.environ["LIVE_BUSINESS_ID"],
                duration_minutes=60,
                selected_date=start,
            )

    slots = asyncio.run(_run())

    assert slots is not None
    end = start + dt.timedelta(days=7)
    assert all(start.isoformat() <= s.date <= end.isoformat() for s in slots)
    assert len({(s.date, s.time) for s in slots}) == len(slots)

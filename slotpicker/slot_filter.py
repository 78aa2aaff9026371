from __future__ import annotations

import datetime as dt
from typing import Iterable

from slotpicker.domain import TimeSlot


def filter_for_date(all_slots: Iterable[TimeSlot], selected_date: dt.date | str) -> list[TimeSlot]:
    # Stable filter: upstream order is kept, nothing is sorted.
    if isinstance(selected_date, dt.datetime):
        selected_date = selected_date.date()
    date_iso = selected_date.isoformat() if isinstance(selected_date, dt.date) else selected_date
    return [s for s in all_slots if s.date == date_iso and s.available]

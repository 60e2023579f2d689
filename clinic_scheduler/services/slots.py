"""Bookable slot calculation.

A slot is a fixed-length piece of a recurring availability window on a
concrete date. Slots already held by a non-cancelled reservation are left
out; cancelled reservations do not occupy anything.
"""

from datetime import date, datetime, timedelta
from typing import Iterator

from pydantic import BaseModel
from sqlalchemy.orm import Session

from clinic_scheduler.core import config
from clinic_scheduler.core.errors import ValidationError
from clinic_scheduler.core.timeutils import parse_calendar_date, weekday_index
from clinic_scheduler.models.availability import AvailabilityWindow
from clinic_scheduler.services.availability import list_windows
from clinic_scheduler.services.reservations import get_active_slot_starts


class CandidateSlot(BaseModel):
    start: datetime
    end: datetime


def get_slot_duration(minutes: int | None = None) -> timedelta:
    minutes = minutes if minutes is not None else config.SLOT_DURATION_MINUTES
    if minutes <= 0:
        raise ValidationError('Slot length must be a positive number of minutes.')
    return timedelta(minutes=minutes)


def iterate_window_slots(
    day: date,
    window: AvailabilityWindow,
    duration: timedelta,
) -> Iterator[CandidateSlot]:
    """Yield consecutive slots inside ``window`` on ``day``.

    A trailing remainder shorter than ``duration`` is dropped.
    """
    if duration <= timedelta(0):
        raise ValidationError('Slot length must be a positive number of minutes.')

    current_start = datetime.combine(day, window.start_time)
    window_end = datetime.combine(day, window.end_time)

    while current_start + duration <= window_end:
        current_end = current_start + duration
        yield CandidateSlot(start=current_start, end=current_end)
        current_start = current_end


def compute_available_slots(
    db: Session,
    owner_id: int,
    target_date: date | str,
    slot_minutes: int | None = None,
) -> list[CandidateSlot]:
    if owner_id is None or owner_id <= 0:
        raise ValidationError('Invalid owner ID provided.')

    duration = get_slot_duration(slot_minutes)
    day = parse_calendar_date(target_date)
    windows = sorted(
        list_windows(db, owner_id, weekday=weekday_index(day)),
        key=lambda window: (window.start_time, window.id),
    )
    if not windows:
        return []

    occupied = get_active_slot_starts(db, owner_id, day)

    available: list[CandidateSlot] = []
    # Overlapping windows can produce the same slot twice; both are kept.
    for window in windows:
        for slot in iterate_window_slots(day, window, duration):
            if slot.start not in occupied:
                available.append(slot)

    return available

from datetime import date, datetime, time, timedelta

import pytest

from clinic_scheduler.core.errors import ValidationError
from clinic_scheduler.models.availability import AvailabilityWindow
from clinic_scheduler.models.reservation import STATUS_CANCELLED, STATUS_CONFIRMED, STATUS_PENDING, Reservation
from clinic_scheduler.services.slots import CandidateSlot, compute_available_slots, iterate_window_slots

MONDAY = date(2026, 1, 5)


def _add_reservation(db, owner_id: int, scheduled_at: datetime, status: str, secret: str) -> Reservation:
    reservation = Reservation(
        owner_id=owner_id,
        requester_name='Sam Patient',
        requester_contact='sam@example.com',
        scheduled_at=scheduled_at,
        status=status,
        cancellation_secret=secret,
    )
    db.add(reservation)
    db.commit()
    return reservation


def _starts(slots: list[CandidateSlot]) -> list[time]:
    return [slot.start.time() for slot in slots]


def test_compute_available_slots_returns_empty_without_windows(db, make_owner) -> None:
    owner = make_owner(windows=())

    assert compute_available_slots(db, owner.id, '2026-01-05') == []


def test_compute_available_slots_returns_empty_on_day_without_windows(db, make_owner) -> None:
    owner = make_owner()

    assert compute_available_slots(db, owner.id, '2026-01-06') == []


def test_compute_available_slots_splits_hour_window_into_two_slots(db, make_owner) -> None:
    owner = make_owner()

    slots = compute_available_slots(db, owner.id, '2026-01-05')

    assert slots == [
        CandidateSlot(start=datetime(2026, 1, 5, 9, 0), end=datetime(2026, 1, 5, 9, 30)),
        CandidateSlot(start=datetime(2026, 1, 5, 9, 30), end=datetime(2026, 1, 5, 10, 0)),
    ]


@pytest.mark.parametrize('status', [STATUS_PENDING, STATUS_CONFIRMED])
def test_compute_available_slots_skips_active_reservation(db, make_owner, status: str) -> None:
    owner = make_owner()
    _add_reservation(db, owner.id, datetime(2026, 1, 5, 9, 0), status, 'a' * 32)

    slots = compute_available_slots(db, owner.id, MONDAY)

    assert slots == [CandidateSlot(start=datetime(2026, 1, 5, 9, 30), end=datetime(2026, 1, 5, 10, 0))]


def test_compute_available_slots_keeps_slot_of_cancelled_reservation(db, make_owner) -> None:
    owner = make_owner()
    _add_reservation(db, owner.id, datetime(2026, 1, 5, 9, 0), STATUS_CANCELLED, 'b' * 32)

    slots = compute_available_slots(db, owner.id, MONDAY)

    assert _starts(slots) == [time(9, 0), time(9, 30)]


def test_compute_available_slots_ignores_reservations_of_other_owners_and_days(db, make_owner) -> None:
    owner = make_owner()
    other = make_owner(name='Dr. Okafor')
    _add_reservation(db, other.id, datetime(2026, 1, 5, 9, 0), STATUS_PENDING, 'c' * 32)
    _add_reservation(db, owner.id, datetime(2026, 1, 12, 9, 0), STATUS_PENDING, 'd' * 32)

    slots = compute_available_slots(db, owner.id, MONDAY)

    assert _starts(slots) == [time(9, 0), time(9, 30)]


def test_compute_available_slots_drops_trailing_partial_period(db, make_owner) -> None:
    owner = make_owner(windows=((1, time(9, 0), time(10, 15)),))

    slots = compute_available_slots(db, owner.id, MONDAY)

    assert _starts(slots) == [time(9, 0), time(9, 30)]
    assert slots[-1].end == datetime(2026, 1, 5, 10, 0)


def test_compute_available_slots_orders_windows_by_start_time(db, make_owner) -> None:
    owner = make_owner(windows=((1, time(14, 0), time(15, 0)), (1, time(9, 0), time(9, 30))))

    slots = compute_available_slots(db, owner.id, MONDAY)

    assert _starts(slots) == [time(9, 0), time(14, 0), time(14, 30)]


def test_compute_available_slots_keeps_duplicates_from_overlapping_windows(db, make_owner) -> None:
    owner = make_owner(windows=((1, time(9, 0), time(10, 0)), (1, time(9, 30), time(10, 30))))

    slots = compute_available_slots(db, owner.id, MONDAY)

    assert _starts(slots) == [time(9, 0), time(9, 30), time(9, 30), time(10, 0)]


def test_compute_available_slots_honors_custom_slot_length(db, make_owner) -> None:
    owner = make_owner()

    slots = compute_available_slots(db, owner.id, MONDAY, slot_minutes=15)

    assert len(slots) == 4


@pytest.mark.parametrize('value', ['2026-02-30', '05-01-2026', ''])
def test_compute_available_slots_rejects_malformed_date(db, make_owner, value: str) -> None:
    owner = make_owner()

    with pytest.raises(ValidationError):
        compute_available_slots(db, owner.id, value)


def test_compute_available_slots_rejects_non_positive_owner_id(db) -> None:
    with pytest.raises(ValidationError):
        compute_available_slots(db, 0, MONDAY)


def test_iterate_window_slots_yields_nothing_for_window_shorter_than_slot() -> None:
    window = AvailabilityWindow(owner_id=1, weekday=1, start_time=time(9, 0), end_time=time(9, 20))

    assert list(iterate_window_slots(MONDAY, window, timedelta(minutes=30))) == []


@pytest.mark.parametrize('slot_minutes', [0, -15])
def test_compute_available_slots_rejects_non_positive_slot_length(db, make_owner, slot_minutes: int) -> None:
    owner = make_owner()

    with pytest.raises(ValidationError):
        compute_available_slots(db, owner.id, MONDAY, slot_minutes=slot_minutes)


def test_iterate_window_slots_rejects_non_positive_duration() -> None:
    window = AvailabilityWindow(owner_id=1, weekday=1, start_time=time(9, 0), end_time=time(10, 0))

    with pytest.raises(ValidationError):
        list(iterate_window_slots(MONDAY, window, timedelta(minutes=-15)))

from datetime import time

import pytest

from clinic_scheduler.core.errors import AuthorizationError, ValidationError
from clinic_scheduler.models.availability import AvailabilityWindow
from clinic_scheduler.services.availability import (
    add_availability_window,
    list_windows,
    list_windows_for_credential,
    remove_availability_window,
)

TOKEN = '3' * 32


def test_add_window_round_trips_normalized_times(db, make_owner) -> None:
    owner = make_owner(windows=(), token=TOKEN)

    add_availability_window(db, TOKEN, 2, '09:00', '17:00')
    windows = list_windows(db, owner.id, weekday=2)

    assert len(windows) == 1
    assert windows[0].start_time.isoformat() == '09:00:00'
    assert windows[0].end_time.isoformat() == '17:00:00'


def test_add_window_keeps_overlapping_windows(db, make_owner) -> None:
    owner = make_owner(windows=(), token=TOKEN)

    add_availability_window(db, TOKEN, 3, '09:00', '12:00')
    add_availability_window(db, TOKEN, 3, '11:00', '13:00')

    assert [window.start_time for window in list_windows(db, owner.id, weekday=3)] == [time(9, 0), time(11, 0)]


@pytest.mark.parametrize(
    ('weekday', 'start', 'end'),
    [
        (1, '10:00', '09:00'),
        (1, '09:00', '09:00'),
        (7, '09:00', '10:00'),
        (-1, '09:00', '10:00'),
        (1, '9am', '10:00'),
    ],
)
def test_add_window_rejects_invalid_input(db, make_owner, weekday: int, start: str, end: str) -> None:
    make_owner(windows=(), token=TOKEN)

    with pytest.raises(ValidationError):
        add_availability_window(db, TOKEN, weekday, start, end)

    assert db.query(AvailabilityWindow).count() == 0


def test_add_window_rejects_unknown_credential(db) -> None:
    with pytest.raises(AuthorizationError):
        add_availability_window(db, 'missing', 1, '09:00', '10:00')


def test_list_windows_for_credential_returns_empty_for_unknown_token(db, make_owner) -> None:
    make_owner(token=TOKEN)

    assert list_windows_for_credential(db, 'missing') == []


def test_list_windows_for_credential_orders_by_weekday_then_start(db, make_owner) -> None:
    make_owner(
        token=TOKEN,
        windows=((2, time(13, 0), time(14, 0)), (1, time(9, 0), time(10, 0)), (2, time(8, 0), time(9, 0))),
    )

    windows = list_windows_for_credential(db, TOKEN)

    assert [(window.weekday, window.start_time) for window in windows] == [
        (1, time(9, 0)),
        (2, time(8, 0)),
        (2, time(13, 0)),
    ]


def test_remove_window_deletes_only_owned_window(db, make_owner) -> None:
    owner = make_owner(token=TOKEN)
    other = make_owner(name='Dr. Okafor', token='4' * 32)
    own_id = list_windows(db, owner.id)[0].id
    other_id = list_windows(db, other.id)[0].id

    assert remove_availability_window(db, TOKEN, other_id) is False
    assert remove_availability_window(db, TOKEN, own_id) is True
    assert remove_availability_window(db, TOKEN, own_id) is False
    assert list_windows(db, owner.id) == []
    assert len(list_windows(db, other.id)) == 1


def test_remove_window_with_unknown_credential_returns_false(db, make_owner) -> None:
    owner = make_owner(token=TOKEN)
    window = list_windows(db, owner.id)[0]

    assert remove_availability_window(db, 'missing', window.id) is False

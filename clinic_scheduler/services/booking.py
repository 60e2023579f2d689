"""Reservation creation.

The availability and duplicate checks below give callers a quick, readable
error, but they are not atomic with the insert. The partial unique index on
``reservations(owner_id, scheduled_at)`` decides every race: the loser gets
``SlotConflictError`` and should refresh its slot list and pick again.
"""

import logging
import secrets
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_scheduler.core import config
from clinic_scheduler.core.errors import (
    SlotConflictError,
    SlotUnavailableError,
    StorageError,
    ValidationError,
)
from clinic_scheduler.core.timeutils import parse_timestamp, weekday_index
from clinic_scheduler.database import ACTIVE_SLOT_INDEX_NAME
from clinic_scheduler.models.reservation import STATUS_PENDING, Reservation
from clinic_scheduler.services.availability import list_windows
from clinic_scheduler.services.notifications import (
    ReservationNotifier,
    dispatch_reservation_booked,
    log_reservation_confirmation,
)
from clinic_scheduler.services.reservations import find_active_reservation

logger = logging.getLogger(__name__)


def generate_cancellation_secret() -> str:
    return secrets.token_hex(config.CANCELLATION_SECRET_BYTES)


def is_within_availability(db: Session, owner_id: int, scheduled_at: datetime) -> bool:
    time_of_day = scheduled_at.time()
    windows = list_windows(db, owner_id, weekday=weekday_index(scheduled_at.date()))
    return any(window.start_time <= time_of_day < window.end_time for window in windows)


def _is_active_slot_violation(exc: IntegrityError) -> bool:
    # SQLite names the columns, PostgreSQL names the index.
    message = str(exc.orig)
    return ACTIVE_SLOT_INDEX_NAME in message or 'reservations.owner_id, reservations.scheduled_at' in message


def reserve(
    db: Session,
    owner_id: int,
    requester_name: str,
    requester_contact: str,
    scheduled_at: datetime | str,
    now: Callable[[], datetime] = datetime.now,
    secret_factory: Callable[[], str] = generate_cancellation_secret,
    notifier: ReservationNotifier | None = log_reservation_confirmation,
) -> Reservation:
    if owner_id is None or owner_id <= 0:
        raise ValidationError('Invalid owner ID provided.')
    name = (requester_name or '').strip()
    contact = (requester_contact or '').strip()
    if not name or not contact:
        raise ValidationError('Requester name and contact information are required.')

    slot_start = parse_timestamp(scheduled_at)
    slot_label = slot_start.isoformat(sep=' ')

    if not is_within_availability(db, owner_id, slot_start):
        raise SlotUnavailableError(f'Slot at {slot_label} is not available for booking.')
    if find_active_reservation(db, owner_id, slot_start) is not None:
        raise SlotUnavailableError(f'Slot at {slot_label} is not available for booking.')

    created_at = now()
    reservation = Reservation(
        owner_id=owner_id,
        requester_name=name,
        requester_contact=contact,
        scheduled_at=slot_start,
        status=STATUS_PENDING,
        cancellation_secret=secret_factory(),
        created_at=created_at,
        updated_at=created_at,
    )

    try:
        db.add(reservation)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _is_active_slot_violation(exc):
            logger.info('Reservation race lost for owner %s at %s', owner_id, slot_label)
            raise SlotConflictError(
                f'Slot at {slot_label} was booked by another user just now. Please try a different slot.'
            ) from exc
        logger.exception('Reservation insert violated a constraint for owner %s at %s', owner_id, slot_label)
        raise StorageError('Failed to book reservation.') from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to book reservation for owner %s at %s', owner_id, slot_label)
        raise StorageError('Failed to book reservation.') from exc

    db.refresh(reservation)
    logger.info('Reservation %s booked for owner %s at %s', reservation.id, owner_id, slot_label)

    dispatch_reservation_booked(reservation, notifier)
    return reservation

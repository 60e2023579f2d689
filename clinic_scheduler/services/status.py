import logging
import re
from datetime import datetime
from typing import Callable

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_scheduler.core import config
from clinic_scheduler.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    StorageError,
    ValidationError,
)
from clinic_scheduler.models.reservation import (
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    Reservation,
)
from clinic_scheduler.services.owners import resolve_owner_id

logger = logging.getLogger(__name__)

RESERVATION_NOT_FOUND = 'Reservation not found.'

# Confirmed -> Confirmed is accepted as a no-op confirmation.
ALLOWED_TRANSITIONS = {
    STATUS_PENDING: {STATUS_CONFIRMED, STATUS_CANCELLED},
    STATUS_CONFIRMED: {STATUS_CONFIRMED, STATUS_CANCELLED},
    STATUS_CANCELLED: set(),
}
OWNER_SETTABLE_STATUSES = (STATUS_CONFIRMED, STATUS_CANCELLED)


def is_transition_allowed(current_status: str, new_status: str) -> bool:
    return new_status in ALLOWED_TRANSITIONS.get(current_status, set())


def _secret_pattern() -> re.Pattern:
    return re.compile(rf'^[0-9a-f]{{{config.CANCELLATION_SECRET_BYTES * 2}}}$')


def set_status(
    db: Session,
    reservation_id: int,
    new_status: str,
    credential: str,
    now: Callable[[], datetime] = datetime.now,
) -> bool:
    """Change a reservation's status on behalf of its owner.

    Unknown credentials, unknown reservations and reservations belonging to
    another owner all raise the same ``AuthorizationError``. Returns False
    when a concurrent writer changed the status between the read and the
    update.
    """
    if new_status not in OWNER_SETTABLE_STATUSES:
        raise ValidationError(f'Status must be one of: {", ".join(OWNER_SETTABLE_STATUSES)}.')
    if reservation_id is None or reservation_id <= 0:
        raise ValidationError('Invalid reservation ID.')

    owner_id = resolve_owner_id(db, credential)
    if owner_id is None:
        logger.warning('Invalid management credential supplied for status update of reservation %s', reservation_id)
        raise AuthorizationError(RESERVATION_NOT_FOUND)

    try:
        reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
        if reservation is None or reservation.owner_id != owner_id:
            raise AuthorizationError(RESERVATION_NOT_FOUND)

        current_status = reservation.status
        if not is_transition_allowed(current_status, new_status):
            raise InvalidTransitionError(
                f'Cannot change reservation status from {current_status} to {new_status}.'
            )

        result = db.execute(
            update(Reservation)
            .where(
                Reservation.id == reservation_id,
                Reservation.owner_id == owner_id,
                Reservation.status == current_status,
            )
            .values(status=new_status, updated_at=now())
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update status for reservation %s', reservation_id)
        raise StorageError('Failed to update reservation status.') from exc

    changed = result.rowcount > 0
    if changed:
        logger.info('Reservation %s moved from %s to %s', reservation_id, current_status, new_status)
    else:
        logger.info('Reservation %s changed concurrently; %s not applied', reservation_id, new_status)
    return changed


def cancel_by_secret(
    db: Session,
    secret: str,
    now: Callable[[], datetime] = datetime.now,
) -> bool:
    """Cancel the live reservation holding ``secret``. Unknown or already cancelled secrets return False."""
    normalized = (secret or '').strip().lower()
    if not _secret_pattern().match(normalized):
        raise ValidationError('Invalid cancellation code.')

    try:
        result = db.execute(
            update(Reservation)
            .where(
                Reservation.cancellation_secret == normalized,
                Reservation.status != STATUS_CANCELLED,
            )
            .values(status=STATUS_CANCELLED, updated_at=now())
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to cancel reservation by code')
        raise StorageError('Failed to cancel reservation.') from exc

    cancelled = result.rowcount > 0
    if cancelled:
        logger.info('Reservation cancelled by requester code')
    return cancelled

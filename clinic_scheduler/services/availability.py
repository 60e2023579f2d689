import logging
from datetime import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_scheduler.core.errors import AuthorizationError, StorageError, ValidationError
from clinic_scheduler.core.timeutils import parse_time_of_day
from clinic_scheduler.models.availability import AvailabilityWindow
from clinic_scheduler.services.owners import OWNER_NOT_FOUND, resolve_owner_id

logger = logging.getLogger(__name__)


def validate_weekday(weekday: int) -> int:
    if isinstance(weekday, bool) or not isinstance(weekday, int) or not 0 <= weekday <= 6:
        raise ValidationError('Weekday must be an integer from 0 (Sunday) to 6 (Saturday).')
    return weekday


def list_windows(db: Session, owner_id: int, weekday: int | None = None) -> list[AvailabilityWindow]:
    """Windows for an owner, ordered by weekday then start time. Overlaps are returned as stored."""
    try:
        query = db.query(AvailabilityWindow).filter(AvailabilityWindow.owner_id == owner_id)
        if weekday is not None:
            query = query.filter(AvailabilityWindow.weekday == weekday)
        return query.order_by(
            AvailabilityWindow.weekday.asc(),
            AvailabilityWindow.start_time.asc(),
            AvailabilityWindow.id.asc(),
        ).all()
    except SQLAlchemyError as exc:
        logger.exception('Failed to fetch availability windows for owner %s', owner_id)
        raise StorageError('Failed to fetch availability windows.') from exc


def list_windows_for_credential(db: Session, credential: str) -> list[AvailabilityWindow]:
    owner_id = resolve_owner_id(db, credential)
    if owner_id is None:
        logger.warning('No owner found for the management credential supplied to list windows')
        return []
    return list_windows(db, owner_id)


def add_availability_window(
    db: Session,
    credential: str,
    weekday: int,
    start_time: time | str,
    end_time: time | str,
) -> AvailabilityWindow:
    validate_weekday(weekday)
    start = parse_time_of_day(start_time)
    end = parse_time_of_day(end_time)
    if start >= end:
        raise ValidationError('Start time must be before end time.')

    owner_id = resolve_owner_id(db, credential)
    if owner_id is None:
        raise AuthorizationError(OWNER_NOT_FOUND)

    # TODO: decide whether overlapping windows should be merged on write; they are stored as given.
    window = AvailabilityWindow(owner_id=owner_id, weekday=weekday, start_time=start, end_time=end)
    try:
        db.add(window)
        db.commit()
        db.refresh(window)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to add availability window for owner %s', owner_id)
        raise StorageError('Failed to add availability window.') from exc

    logger.info(
        'Owner %s added window %s on weekday %s (%s-%s)',
        owner_id, window.id, weekday, start.isoformat(), end.isoformat(),
    )
    return window


def remove_availability_window(db: Session, credential: str, window_id: int) -> bool:
    owner_id = resolve_owner_id(db, credential)
    if owner_id is None:
        logger.warning('No owner found for the management credential supplied to remove window %s', window_id)
        return False

    try:
        deleted = db.query(AvailabilityWindow).filter(
            AvailabilityWindow.id == window_id,
            AvailabilityWindow.owner_id == owner_id,
        ).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to delete availability window %s', window_id)
        raise StorageError('Failed to delete availability window.') from exc

    return deleted > 0

import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from clinic_scheduler.core.errors import StorageError
from clinic_scheduler.models.reservation import STATUS_CANCELLED, Reservation
from clinic_scheduler.services.owners import resolve_owner_id

logger = logging.getLogger(__name__)


def find_active_reservation(db: Session, owner_id: int, scheduled_at: datetime) -> Reservation | None:
    try:
        return db.query(Reservation).filter(
            Reservation.owner_id == owner_id,
            Reservation.scheduled_at == scheduled_at,
            Reservation.status != STATUS_CANCELLED,
        ).first()
    except SQLAlchemyError as exc:
        logger.exception('Failed to check reservation for owner %s at %s', owner_id, scheduled_at)
        raise StorageError('Failed to check existing reservations.') from exc


def get_active_slot_starts(db: Session, owner_id: int, day: date) -> set[datetime]:
    day_start = datetime.combine(day, time.min)
    day_end = day_start + timedelta(days=1)
    try:
        rows = db.query(Reservation.scheduled_at).filter(
            Reservation.owner_id == owner_id,
            Reservation.scheduled_at >= day_start,
            Reservation.scheduled_at < day_end,
            Reservation.status != STATUS_CANCELLED,
        ).all()
    except SQLAlchemyError as exc:
        logger.exception('Failed to fetch reservations for owner %s on %s', owner_id, day)
        raise StorageError('Failed to fetch reservations.') from exc

    return {scheduled_at.replace(microsecond=0) for (scheduled_at,) in rows}


def get_reservation(db: Session, reservation_id: int) -> Reservation | None:
    try:
        return (
            db.query(Reservation)
            .options(joinedload(Reservation.owner))
            .filter(Reservation.id == reservation_id)
            .first()
        )
    except SQLAlchemyError as exc:
        logger.exception('Failed to fetch reservation %s', reservation_id)
        raise StorageError('Failed to fetch reservation.') from exc


def list_reservations(db: Session, credential: str | None = None) -> list[Reservation]:
    """All reservations, newest first; restricted to one owner when a credential is given."""
    owner_id = None
    if credential is not None:
        owner_id = resolve_owner_id(db, credential)
        if owner_id is None:
            logger.warning('Invalid management credential supplied to filter reservations')
            return []

    try:
        query = db.query(Reservation).options(joinedload(Reservation.owner))
        if owner_id is not None:
            query = query.filter(Reservation.owner_id == owner_id)
        return query.order_by(Reservation.scheduled_at.desc(), Reservation.id.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Failed to list reservations')
        raise StorageError('Failed to fetch reservations.') from exc

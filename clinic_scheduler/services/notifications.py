import logging
from typing import Callable

from clinic_scheduler.core import config
from clinic_scheduler.models.reservation import Reservation

logger = logging.getLogger(__name__)

ReservationNotifier = Callable[[Reservation], None]


def log_reservation_confirmation(reservation: Reservation) -> None:
    """Simulated email/SMS sent to the requester once a booking is stored."""
    logger.info(
        'Simulated message to %s: reservation %s with owner %s at %s is booked. '
        'Cancellation code: %s',
        reservation.requester_contact,
        reservation.id,
        reservation.owner_id,
        reservation.scheduled_at.isoformat(sep=' '),
        reservation.cancellation_secret,
    )


def dispatch_reservation_booked(reservation: Reservation, notifier: ReservationNotifier | None) -> None:
    if notifier is None or not config.NOTIFICATIONS_ENABLED:
        return
    try:
        notifier(reservation)
    except Exception:
        # The booking is already committed; a failed notification must not surface to the caller.
        logger.exception('Notification for reservation %s failed', reservation.id)

import re
from datetime import date, datetime, time

from clinic_scheduler.core.errors import ValidationError

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_OF_DAY_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$')


def parse_calendar_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    normalized = (value or '').strip()
    if not DATE_PATTERN.match(normalized):
        raise ValidationError('Invalid date format. Use YYYY-MM-DD.')
    try:
        return date.fromisoformat(normalized)
    except ValueError as exc:
        raise ValidationError(f'{normalized} is not a valid calendar date.') from exc


def parse_time_of_day(value: time | str) -> time:
    if isinstance(value, time):
        return value.replace(microsecond=0)

    normalized = (value or '').strip()
    if not TIME_OF_DAY_PATTERN.match(normalized):
        raise ValidationError('Invalid time format. Use HH:MM or HH:MM:SS (e.g., 09:00, 14:30).')
    return time.fromisoformat(normalized)


def parse_timestamp(value: datetime | str) -> datetime:
    """Parse an ISO timestamp into a naive local datetime with second precision.

    Both ``2026-01-05T09:00:00`` and ``2026-01-05 09:00:00`` are accepted.
    Offset-aware values are converted to server-local wall time, which is the
    clock availability windows are expressed in.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        normalized = (value or '').strip()
        if not normalized or not DATE_PATTERN.match(normalized[:10]):
            raise ValidationError('Invalid timestamp format. Use "YYYY-MM-DD HH:MM:SS".')
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError as exc:
            raise ValidationError(f'{normalized} is not a valid timestamp.') from exc

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def weekday_index(day: date) -> int:
    """Return 0 for Sunday through 6 for Saturday."""
    return day.isoweekday() % 7

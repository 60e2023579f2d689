from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    SchedulingError,
    SlotConflictError,
    SlotUnavailableError,
    StorageError,
    ValidationError,
)
from clinic_scheduler.database import ensure_reservation_schema, session_scope

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'

ERROR_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    SlotUnavailableError: status.HTTP_409_CONFLICT,
    SlotConflictError: status.HTTP_409_CONFLICT,
    AuthorizationError: status.HTTP_404_NOT_FOUND,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def ensure_database_ready() -> None:
    try:
        ensure_reservation_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def get_db():
    with session_scope() as db:
        yield db


def to_http_exception(exc: SchedulingError) -> HTTPException:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped_status in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            status_code = mapped_status
            break

    headers = {'Retry-After': '0'} if exc.retryable else None
    return HTTPException(status_code=status_code, detail=exc.message, headers=headers)

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from clinic_scheduler.core.errors import SchedulingError
from clinic_scheduler.routes import common
from clinic_scheduler.services import booking, reservations
from clinic_scheduler.services.status import cancel_by_secret, set_status

router = APIRouter(tags=['reservations'])

MAX_REQUESTER_FIELD_LENGTH = 200


class CreateReservationRequest(BaseModel):
    owner_id: int = Field(gt=0)
    requester_name: str
    requester_contact: str
    scheduled_at: str

    @field_validator('requester_name', 'requester_contact')
    @classmethod
    def validate_requester_field(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Requester name and contact information are required.')
        if len(normalized) > MAX_REQUESTER_FIELD_LENGTH:
            raise ValueError(f'Must be {MAX_REQUESTER_FIELD_LENGTH} characters or fewer.')
        return normalized


class UpdateReservationStatusRequest(BaseModel):
    status: str
    management_token: str


class ReservationResponse(BaseModel):
    id: int
    owner_id: int
    owner_name: str | None = None
    requester_name: str
    requester_contact: str
    scheduled_at: datetime
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ReservationCreatedResponse(ReservationResponse):
    cancellation_secret: str


class StatusUpdateResponse(BaseModel):
    updated: bool


class CancellationResponse(BaseModel):
    cancelled: bool


@router.post('', response_model=ReservationCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_reservation(data: CreateReservationRequest, db: Session = Depends(common.get_db)):
    common.ensure_database_ready()

    try:
        return booking.reserve(
            db,
            owner_id=data.owner_id,
            requester_name=data.requester_name,
            requester_contact=data.requester_contact,
            scheduled_at=data.scheduled_at,
        )
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc


@router.get('', response_model=list[ReservationResponse])
def list_reservations(
    token: str | None = Query(default=None, description='Management token to filter by owner'),
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    try:
        return reservations.list_reservations(db, credential=token)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc


@router.get('/{reservation_id}', response_model=ReservationResponse)
def get_reservation(reservation_id: int, db: Session = Depends(common.get_db)):
    if reservation_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid reservation ID.',
        )

    common.ensure_database_ready()

    try:
        reservation = reservations.get_reservation(db, reservation_id)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    if reservation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'Reservation with ID {reservation_id} not found.',
        )
    return reservation


@router.put('/{reservation_id}/status', response_model=StatusUpdateResponse)
def update_reservation_status(
    reservation_id: int,
    data: UpdateReservationStatusRequest,
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    try:
        updated = set_status(db, reservation_id, data.status, data.management_token)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    return StatusUpdateResponse(updated=updated)


@router.delete('/cancel/{cancellation_code}', response_model=CancellationResponse)
def cancel_reservation_by_code(cancellation_code: str, db: Session = Depends(common.get_db)):
    common.ensure_database_ready()

    try:
        cancelled = cancel_by_secret(db, cancellation_code)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    if not cancelled:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='No active reservation found for this cancellation code.',
        )
    return CancellationResponse(cancelled=True)

from datetime import time

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from clinic_scheduler.core.errors import SchedulingError
from clinic_scheduler.routes import common
from clinic_scheduler.services import availability

router = APIRouter(tags=['availability'])


class CreateAvailabilityWindowRequest(BaseModel):
    weekday: int = Field(ge=0, le=6)
    start_time: str
    end_time: str


class AvailabilityWindowResponse(BaseModel):
    id: int
    owner_id: int
    weekday: int
    start_time: time
    end_time: time

    class Config:
        from_attributes = True


@router.get('/manage/{management_token}', response_model=list[AvailabilityWindowResponse])
def list_availability_windows(management_token: str, db: Session = Depends(common.get_db)):
    common.ensure_database_ready()

    try:
        return availability.list_windows_for_credential(db, management_token)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc


@router.post(
    '/manage/{management_token}',
    response_model=AvailabilityWindowResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_availability_window(
    management_token: str,
    data: CreateAvailabilityWindowRequest,
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    try:
        return availability.add_availability_window(
            db,
            management_token,
            weekday=data.weekday,
            start_time=data.start_time,
            end_time=data.end_time,
        )
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc


@router.delete('/manage/{management_token}/{window_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_availability_window(
    management_token: str,
    window_id: int,
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    try:
        deleted = availability.remove_availability_window(db, management_token, window_id)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Availability window not found.',
        )

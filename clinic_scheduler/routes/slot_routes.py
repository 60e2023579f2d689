from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from clinic_scheduler.core.errors import SchedulingError
from clinic_scheduler.routes import common
from clinic_scheduler.services.owners import OWNER_NOT_FOUND, owner_exists
from clinic_scheduler.services.slots import CandidateSlot, compute_available_slots

router = APIRouter(tags=['slots'])


class AvailableSlotsResponse(BaseModel):
    owner_id: int
    date: str
    count: int
    available_slots: list[CandidateSlot]


@router.get('/owner/{owner_id}', response_model=AvailableSlotsResponse)
def list_available_slots(
    owner_id: int = Path(..., gt=0),
    date: str = Query(..., description='Calendar date, YYYY-MM-DD'),
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    try:
        if not owner_exists(db, owner_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=OWNER_NOT_FOUND)
        slots = compute_available_slots(db, owner_id, date)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    return AvailableSlotsResponse(
        owner_id=owner_id,
        date=date.strip(),
        count=len(slots),
        available_slots=slots,
    )

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from clinic_scheduler.auth import jwt_handler
from clinic_scheduler.auth.dependencies import get_current_owner
from clinic_scheduler.core.errors import SchedulingError
from clinic_scheduler.models.owner import Owner
from clinic_scheduler.routes import common
from clinic_scheduler.services import owners

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(common.get_db)):
    common.ensure_database_ready()

    try:
        owner = owners.authenticate_owner(db, data.email, data.password)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    if owner is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = jwt_handler.create_access_token(subject=owner.email, owner_id=owner.id)
    return TokenResponse(access_token=token)


@router.get("/me")
def me(current_owner: Owner = Depends(get_current_owner)):
    return {
        "id": current_owner.id,
        "name": current_owner.name,
        "email": current_owner.email,
        "management_token": current_owner.management_token,
    }

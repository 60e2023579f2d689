from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from clinic_scheduler.core.errors import SchedulingError
from clinic_scheduler.routes import common
from clinic_scheduler.services import owners
from clinic_scheduler.services.owners import OwnerPatch

router = APIRouter(tags=['owners'])

MIN_PASSWORD_LENGTH = 8


class RegisterOwnerRequest(BaseModel):
    name: str
    specialization: str | None = None
    experience: int = Field(default=0, ge=0)
    contact_info: str | None = None
    email: str | None = None
    password: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lower()
        if not normalized:
            return None
        if '@' not in normalized:
            raise ValueError('Invalid email address.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str | None) -> str | None:
        if value is not None and len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        return value


class OwnerResponse(BaseModel):
    id: int
    name: str
    specialization: str | None = None
    experience: int | None = None
    contact_info: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class RegisteredOwnerResponse(OwnerResponse):
    email: str | None = None
    management_token: str


@router.post('', response_model=RegisteredOwnerResponse, status_code=status.HTTP_201_CREATED)
def register_owner(data: RegisterOwnerRequest, db: Session = Depends(common.get_db)):
    common.ensure_database_ready()

    try:
        return owners.register_owner(
            db,
            name=data.name,
            specialization=data.specialization,
            experience=data.experience,
            contact_info=data.contact_info,
            email=data.email,
            password=data.password,
        )
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc


@router.get('', response_model=list[OwnerResponse])
def list_owners(db: Session = Depends(common.get_db)):
    common.ensure_database_ready()

    try:
        return owners.list_owners(db)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc


@router.get('/{owner_id}', response_model=OwnerResponse)
def get_owner(owner_id: int, db: Session = Depends(common.get_db)):
    common.ensure_database_ready()

    try:
        owner = owners.get_owner(db, owner_id)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

    if owner is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=owners.OWNER_NOT_FOUND,
        )
    return owner


@router.patch('/manage/{management_token}', response_model=OwnerResponse)
def update_owner_profile(
    management_token: str,
    patch: OwnerPatch,
    db: Session = Depends(common.get_db),
):
    common.ensure_database_ready()

    try:
        return owners.update_owner_profile(db, management_token, patch)
    except SchedulingError as exc:
        raise common.to_http_exception(exc) from exc

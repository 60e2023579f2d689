"""Owner directory: credential lookup, registration and profile updates."""

import logging
import secrets
from datetime import datetime
from typing import Callable

from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_scheduler.auth.passwords import hash_password, verify_password
from clinic_scheduler.core import config
from clinic_scheduler.core.errors import AuthorizationError, StorageError, ValidationError
from clinic_scheduler.core.timeutils import parse_time_of_day
from clinic_scheduler.models.availability import AvailabilityWindow
from clinic_scheduler.models.owner import Owner

logger = logging.getLogger(__name__)

OWNER_NOT_FOUND = 'Owner not found.'


def generate_management_token() -> str:
    return secrets.token_hex(config.MANAGEMENT_TOKEN_BYTES)


class OwnerPatch(BaseModel):
    """Partial update of an owner profile. Unset fields are left untouched."""

    name: str | None = None
    specialization: str | None = None
    experience: int | None = Field(default=None, ge=0)
    contact_info: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name cannot be blank.')
        return normalized


def apply_owner_patch(owner: Owner, patch: OwnerPatch) -> list[str]:
    """Copy every explicitly set field of ``patch`` onto ``owner``; return the changed field names."""
    changed: list[str] = []
    for field_name, value in patch.model_dump(exclude_unset=True).items():
        if field_name == 'name' and value is None:
            continue
        if getattr(owner, field_name) != value:
            setattr(owner, field_name, value)
            changed.append(field_name)
    return changed


def resolve_owner_id(db: Session, credential: str | None) -> int | None:
    if not credential or not credential.strip():
        return None
    try:
        row = db.query(Owner.id).filter(Owner.management_token == credential.strip()).first()
    except SQLAlchemyError as exc:
        logger.exception('Failed to resolve management credential')
        raise StorageError('Failed to resolve management credential.') from exc
    return row[0] if row else None


def owner_exists(db: Session, owner_id: int) -> bool:
    try:
        return db.query(Owner.id).filter(Owner.id == owner_id).first() is not None
    except SQLAlchemyError as exc:
        logger.exception('Failed to look up owner %s', owner_id)
        raise StorageError('Failed to look up owner.') from exc


def get_owner(db: Session, owner_id: int) -> Owner | None:
    try:
        return db.query(Owner).filter(Owner.id == owner_id).first()
    except SQLAlchemyError as exc:
        logger.exception('Failed to fetch owner %s', owner_id)
        raise StorageError('Failed to fetch owner.') from exc


def list_owners(db: Session) -> list[Owner]:
    try:
        return db.query(Owner).order_by(Owner.name.asc(), Owner.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Failed to list owners')
        raise StorageError('Failed to fetch owners.') from exc


def register_owner(
    db: Session,
    name: str,
    specialization: str | None = None,
    experience: int = 0,
    contact_info: str | None = None,
    email: str | None = None,
    password: str | None = None,
    token_factory: Callable[[], str] = generate_management_token,
) -> Owner:
    """Create an owner together with its default weekly windows.

    The owner row and every default window are committed in one transaction;
    if any insert fails nothing is kept.
    """
    if not name or not name.strip():
        raise ValidationError('Name is required.')
    if experience is not None and experience < 0:
        raise ValidationError('Experience cannot be negative.')
    if password is not None and not email:
        raise ValidationError('An email address is required to set a password.')

    default_start = parse_time_of_day(config.DEFAULT_WINDOW_START)
    default_end = parse_time_of_day(config.DEFAULT_WINDOW_END)

    owner = Owner(
        name=name.strip(),
        specialization=specialization,
        experience=experience or 0,
        contact_info=contact_info,
        email=email.strip().lower() if email else None,
        hashed_password=hash_password(password) if password else None,
        management_token=token_factory(),
    )

    try:
        db.add(owner)
        db.flush()
        for weekday in config.DEFAULT_WINDOW_WEEKDAYS:
            db.add(
                AvailabilityWindow(
                    owner_id=owner.id,
                    weekday=weekday,
                    start_time=default_start,
                    end_time=default_end,
                )
            )
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if 'email' in str(exc.orig).lower():
            logger.warning('Owner registration rejected: email already registered')
            raise ValidationError('Registration failed: email address is already in use.') from exc
        logger.exception('Owner registration violated a constraint, transaction rolled back')
        raise StorageError('Failed to register owner.') from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Owner registration failed, transaction rolled back')
        raise StorageError('Failed to register owner.') from exc

    db.refresh(owner)
    logger.info('Registered owner %s with %d default windows', owner.id, len(config.DEFAULT_WINDOW_WEEKDAYS))
    return owner


def authenticate_owner(db: Session, email: str, password: str) -> Owner | None:
    normalized = (email or '').strip().lower()
    if not normalized:
        return None
    try:
        owner = db.query(Owner).filter(Owner.email == normalized).first()
    except SQLAlchemyError as exc:
        logger.exception('Failed to look up owner for login')
        raise StorageError('Failed to look up owner.') from exc
    if owner is None or not verify_password(password, owner.hashed_password):
        return None
    return owner


def update_owner_profile(
    db: Session,
    credential: str,
    patch: OwnerPatch,
    now: Callable[[], datetime] = datetime.now,
) -> Owner:
    owner_id = resolve_owner_id(db, credential)
    if owner_id is None:
        logger.warning('Rejected profile update with an unknown management credential')
        raise AuthorizationError(OWNER_NOT_FOUND)

    try:
        owner = db.query(Owner).filter(Owner.id == owner_id).first()
        if owner is None:
            raise AuthorizationError(OWNER_NOT_FOUND)
        changed = apply_owner_patch(owner, patch)
        if changed:
            owner.updated_at = now()
            db.commit()
            db.refresh(owner)
            logger.info('Updated owner %s fields: %s', owner.id, ', '.join(changed))
        return owner
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update owner %s', owner_id)
        raise StorageError('Failed to update owner profile.') from exc

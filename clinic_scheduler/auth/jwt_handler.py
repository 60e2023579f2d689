from datetime import datetime, timedelta, timezone

import jwt
from jwt import InvalidTokenError

from clinic_scheduler.core import config

__all__ = ["InvalidTokenError", "create_access_token", "decode_access_token"]


def create_access_token(subject: str, expires_minutes: int | None = None, owner_id: int | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    issued_at = datetime.now(timezone.utc)
    payload = {"sub": subject, "exp": issued_at + timedelta(minutes=expire_minutes), "iat": issued_at}
    if owner_id is not None:
        payload["owner_id"] = owner_id
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from clinic_scheduler.auth import jwt_handler
from clinic_scheduler.models.owner import Owner
from clinic_scheduler.routes.common import get_db

security = HTTPBearer()


def get_current_owner(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Owner:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt_handler.InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token subject")

    owner = db.query(Owner).filter(Owner.email == email).first()
    if owner is None:
        raise HTTPException(status_code=401, detail="Owner not found")
    return owner

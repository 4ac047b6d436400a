import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from . import models

ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)


def _secret_key() -> str:
    return os.getenv("SECRET_KEY", "change-me")


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _secret_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the subject email of a valid token, or None."""

    try:
        payload = jwt.decode(token, _secret_key(), algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
    return payload.get("sub")


def _user_for_token(db: Session, token: str) -> Optional[models.User]:
    email = decode_access_token(token)
    if not email:
        return None
    user = db.query(models.User).filter(models.User.email == email).first()
    if not user or not user.is_active:
        return None
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = _user_for_token(db, credentials.credentials)
    if user is None:
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[models.User]:
    """Session context for routes anonymous visitors may also read.

    A missing, expired or unknown token reads as an anonymous viewer.
    """

    if credentials is None:
        return None
    return _user_for_token(db, credentials.credentials)

from fastapi import APIRouter, Depends, HTTPException, Request
import os
from sqlalchemy.orm import Session
from datetime import datetime, timedelta, timezone
import uuid
from ..database import get_db
from .. import models, schemas, notify, audit
from ..auth import create_access_token
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
testing = os.getenv("TESTING") == "1"

def rate_limit(limit: str):
    if testing:
        def wrapper(func):
            return func
        return wrapper
    return limiter.limit(limit)

router = APIRouter(prefix="/api/auth", tags=["auth"])

MAGIC_LINK_TTL = timedelta(hours=1)


@router.post("/magic-link")
@rate_limit("5/minute")
async def request_magic_link(
    request: Request, data: schemas.MagicLinkRequest, db: Session = Depends(get_db)
):
    email = data.email.lower()
    token = uuid.uuid4().hex
    expires = datetime.now(timezone.utc) + MAGIC_LINK_TTL
    db.add(models.MagicLinkToken(email=email, token=token, expires_at=expires))
    db.commit()
    notify.send_email(email, "Your catalog sign-in code", f"Use this code to sign in: {token}")
    return {"status": "sent"}


@router.post("/verify", response_model=schemas.Token)
@rate_limit("10/minute")
async def verify_magic_link(
    request: Request, data: schemas.MagicLinkVerify, db: Session = Depends(get_db)
):
    record = (
        db.query(models.MagicLinkToken)
        .filter(models.MagicLinkToken.token == data.token, models.MagicLinkToken.used == False)
        .first()
    )
    if not record:
        raise HTTPException(status_code=400, detail="Invalid or expired token")
    expires_at = record.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at < datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="Invalid or expired token")
    record.used = True
    user = db.query(models.User).filter(models.User.email == record.email).first()
    created = user is None
    if created:
        user = models.User(email=record.email)
        db.add(user)
    db.add(record)
    db.commit()
    db.refresh(user)
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account disabled")
    audit.log_action(db, str(user.id), "register" if created else "login", "user", str(user.id))
    return schemas.Token(access_token=create_access_token({"sub": user.email}))

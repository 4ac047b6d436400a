from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID

from ..database import get_db
from .. import models, schemas, auth, audit
from ..services import profiles as profile_service

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users/me", response_model=schemas.UserOut)
async def read_current_user(current_user: models.User = Depends(auth.get_current_user)):
    return current_user


@router.get("/profiles/me", response_model=schemas.ProfileOut)
async def read_profile(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    profile = profile_service.get_profile(db, current_user.id)
    return profile_service.profile_payload(current_user.id, profile)


@router.put("/profiles/me", response_model=schemas.ProfileOut)
async def update_profile(
    update: schemas.ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    try:
        profile = profile_service.upsert_profile(db, current_user, update)
    except profile_service.ProfileValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    audit.log_action(db, current_user.id, "profile_update", "profile", current_user.id)
    return profile_service.profile_payload(current_user.id, profile)


@router.get("/profiles/{user_id}", response_model=schemas.ContributorOut)
async def read_contributor(
    user_id: UUID,
    db: Session = Depends(get_db),
    viewer: models.User | None = Depends(auth.get_optional_user),
):
    if not db.get(models.User, user_id):
        raise HTTPException(status_code=404, detail="Contributor not found")
    profile = profile_service.get_profile(db, user_id)
    return profile_service.contributor_card(user_id, profile, viewer)

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth import get_current_user, get_optional_user
from .. import models, schemas
from ..rbac import ensure_contribution_author, get_visible_test
from ..services import contributions as contribution_service

router = APIRouter(prefix="/api/entries", tags=["contributions"])


def _model_for(kind: str):
    model = contribution_service.CONTRIBUTION_MODELS.get(kind)
    if model is None:
        raise HTTPException(status_code=404, detail="Unknown contribution type")
    return model


def _get_row(db: Session, model, test_id: UUID, row_id: UUID):
    row = db.get(model, row_id)
    if not row or row.test_id != test_id:
        raise HTTPException(status_code=404, detail="Row not found")
    return row


@router.get("/{entry_id}/{kind}", response_model=list[schemas.ContributionOut])
async def list_contributions(
    entry_id: UUID,
    kind: str,
    db: Session = Depends(get_db),
    viewer: models.User | None = Depends(get_optional_user),
):
    model = _model_for(kind)
    test = get_visible_test(db, viewer, entry_id)
    return contribution_service.list_rows(db, model, test.id)


@router.post("/{entry_id}/{kind}", response_model=schemas.ContributionOut)
async def add_contribution(
    entry_id: UUID,
    kind: str,
    payload: schemas.ContributionWrite,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    model = _model_for(kind)
    test = get_visible_test(db, user, entry_id)
    try:
        return contribution_service.add_row(db, model, test.id, user, payload)
    except contribution_service.ContributionValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/{entry_id}/{kind}/{row_id}", response_model=schemas.ContributionOut)
async def update_contribution(
    entry_id: UUID,
    kind: str,
    row_id: UUID,
    payload: schemas.ContributionWrite,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    model = _model_for(kind)
    test = get_visible_test(db, user, entry_id)
    row = _get_row(db, model, test.id, row_id)
    ensure_contribution_author(row, user)
    try:
        return contribution_service.update_row(db, row, payload)
    except contribution_service.ContributionValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/{entry_id}/{kind}/{row_id}", status_code=204)
async def delete_contribution(
    entry_id: UUID,
    kind: str,
    row_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    model = _model_for(kind)
    test = get_visible_test(db, user, entry_id)
    row = _get_row(db, model, test.id, row_id)
    ensure_contribution_author(row, user)
    db.delete(row)
    db.commit()
    return Response(status_code=204)

from dataclasses import fields
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth import get_current_user, get_optional_user
from .. import models, schemas, audit
from ..rbac import ensure_test_owner, get_visible_test
from ..services import catalog as catalog_service
from ..services import editor, profiles as profile_service
from ..services.tags import TagLink, group_term_ids, resolve_labels, sorted_labels

router = APIRouter(prefix="/api/entries", tags=["entries"])

_FORM_FIELDS = {f.name for f in fields(editor.EntryForm)}


def _form_from_payload(payload: schemas.EntryWrite) -> editor.EntryForm:
    return editor.EntryForm(**payload.model_dump(include=_FORM_FIELDS))


def _ensure_can_submit(db: Session, user: models.User) -> None:
    allowed, reason = profile_service.submit_eligibility(db, user)
    if not allowed:
        raise HTTPException(status_code=403, detail=reason)


def _save(db, user, entry_id, payload: schemas.EntryWrite) -> schemas.EntrySaveOut:
    selections = payload.tags.model_dump()
    try:
        result = editor.save_entry(db, user, entry_id, _form_from_payload(payload), selections)
    except editor.EntryValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except editor.EntrySaveError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    audit.log_action(
        db,
        user.id,
        "entry_create" if entry_id is None else "entry_update",
        "test",
        result.entry_id,
        {"tag_changes": {s.facet: s.operations for s in result.syncs}},
    )
    return schemas.EntrySaveOut(
        id=result.entry_id,
        syncs=[
            schemas.FacetSyncOut(facet=s.facet, inserted=list(s.inserted), deleted=list(s.deleted))
            for s in result.syncs
        ],
    )


@router.get("/eligibility", response_model=schemas.SubmitEligibility)
async def submit_eligibility(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    allowed, reason = profile_service.submit_eligibility(db, user)
    return schemas.SubmitEligibility(can_submit=allowed, reason=reason)


@router.get("/mine", response_model=list[schemas.EntrySummary])
async def list_my_entries(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return (
        db.query(models.Test)
        .filter(models.Test.owner_id == user.id)
        .order_by(models.Test.updated_at.desc())
        .all()
    )


@router.post("", response_model=schemas.EntrySaveOut)
async def create_entry(
    payload: schemas.EntryWrite,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    _ensure_can_submit(db, user)
    return _save(db, user, None, payload)


@router.put("/{entry_id}", response_model=schemas.EntrySaveOut)
async def update_entry(
    entry_id: UUID,
    payload: schemas.EntryWrite,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    test = get_visible_test(db, user, entry_id)
    ensure_test_owner(test, user)
    _ensure_can_submit(db, user)
    return _save(db, user, entry_id, payload)


@router.get("/{entry_id}", response_model=schemas.EntryDetail)
async def read_entry(
    entry_id: UUID,
    db: Session = Depends(get_db),
    viewer: models.User | None = Depends(get_optional_user),
):
    test = get_visible_test(db, viewer, entry_id)
    labels = {}
    term_ids = {}
    for facet in models.FACETS:
        links = [
            TagLink(entry_id=test.id, term_id=term_id)
            for term_id in sorted(editor.stored_term_ids(db, facet, test.id), key=str)
        ]
        vocabulary = catalog_service.load_vocabulary(db, facet)
        labels[facet.key] = sorted_labels(resolve_labels([test.id], links, vocabulary)[test.id])
        term_ids[facet.key] = group_term_ids([test.id], links)[test.id]
    profile = profile_service.get_profile(db, test.owner_id)
    return schemas.EntryDetail(
        entry=schemas.EntryOut.model_validate(test),
        labels=schemas.FacetLabels(**labels),
        term_ids=schemas.FacetTermIds(**term_ids),
        adapted=catalog_service.is_adapted(labels["population"]),
        contributor=profile_service.contributor_card(test.owner_id, profile, viewer),
        can_edit=viewer is not None and viewer.id == test.owner_id,
    )


@router.get("/{entry_id}/history", response_model=list[schemas.AuditLogOut])
async def read_entry_history(
    entry_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    test = get_visible_test(db, user, entry_id)
    ensure_test_owner(test, user)
    return audit.entry_history(db, test.id)

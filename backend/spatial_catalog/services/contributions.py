from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from .. import models
from .editor import is_valid_url

# purpose: community-maintained version and related-work rows attached to an entry
# status: active

CONTRIBUTION_MODELS = {
    "versions": models.TestVersion,
    "related-works": models.TestRelatedWork,
}


class ContributionValidationError(ValueError):
    pass


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def clean_payload(data) -> dict:
    about = (data.about or "").strip()
    if not about:
        raise ContributionValidationError("About is required")
    url = _clean(data.publication_url)
    if url and not is_valid_url(url):
        raise ContributionValidationError("Publication URL must be a valid URL")
    return {
        "about": about,
        "authors": _clean(data.authors),
        "publication_url": url,
        "notes": _clean(data.notes),
    }


def list_rows(db: Session, model, test_id: UUID):
    return (
        db.query(model)
        .filter(model.test_id == test_id)
        .order_by(model.created_at.desc())
        .all()
    )


def add_row(db: Session, model, test_id: UUID, user: models.User, data):
    row = model(test_id=test_id, created_by=user.id, **clean_payload(data))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_row(db: Session, row, data):
    for key, value in clean_payload(data).items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row

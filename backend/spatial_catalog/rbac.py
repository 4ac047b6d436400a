from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa
from fastapi import HTTPException
from sqlalchemy.orm import Query, Session

from . import models

# purpose: centralize row-level visibility and ownership rules for catalog entries
# status: active
# depends_on: backend.spatial_catalog.models (Test, TestVersion, TestRelatedWork)


def visible_tests(db: Session, viewer: models.User | None) -> Query:
    """Return a query over the entries the viewer is allowed to receive.

    Published entries are public, work-in-progress entries need a signed-in
    viewer and drafts are visible to their owner only.
    """

    query = db.query(models.Test)
    if viewer is None:
        return query.filter(models.Test.status == "published")
    return query.filter(
        sa.or_(
            models.Test.status.in_(("published", "wip")),
            models.Test.owner_id == viewer.id,
        )
    )


def get_visible_test(
    db: Session, viewer: models.User | None, test_id: UUID
) -> models.Test:
    test = visible_tests(db, viewer).filter(models.Test.id == test_id).first()
    if not test:
        raise HTTPException(status_code=404, detail="Entry not found")
    return test


def ensure_test_owner(test: models.Test, user: models.User) -> None:
    if test.owner_id != user.id:
        raise HTTPException(status_code=403, detail="Only the owner can edit this entry")


def ensure_contribution_author(row, user: models.User) -> None:
    if row.created_by != user.id:
        raise HTTPException(status_code=403, detail="Only the author can change this row")

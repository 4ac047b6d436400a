from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .. import models
from ..data.loaders import get_vocabulary_seed

# purpose: read and seed the controlled vocabularies entries are tagged with
# status: active

logger = logging.getLogger(__name__)


def list_terms(db: Session, facet: models.Facet):
    term = facet.term_model
    return db.query(term).order_by(term.label.asc()).all()


def seed_vocabularies(db: Session) -> dict[str, int]:
    """Insert bundled terms missing by slug; existing rows keep their edits."""

    created: dict[str, int] = {}
    seed = get_vocabulary_seed()
    for facet in models.FACETS:
        term = facet.term_model
        existing = {row[0] for row in db.query(term.slug).all()}
        count = 0
        for item in seed.get(facet.key, ()):
            if item["slug"] in existing:
                continue
            db.add(
                term(
                    slug=item["slug"],
                    label=item["label"],
                    description=item.get("description"),
                )
            )
            count += 1
        created[facet.key] = count
    db.commit()
    logger.info("Seeded vocabularies: %s", created)
    return created

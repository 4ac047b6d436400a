"""Create and update catalog entries and sync their facet tags."""

# purpose: validate entry scalar fields and reconcile per-facet link rows by set difference
# status: active
# depends_on: backend.spatial_catalog.models (Test, FACETS), services.ages

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import urlparse
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from .ages import parse_age

logger = logging.getLogger(__name__)

_OPTIONAL_TEXT_FIELDS = (
    "authors",
    "source_url",
    "doi",
    "original_citation",
    "access_notes",
    "use_cases",
    "notes",
)


class EntryValidationError(ValueError):
    """Raised before any write when the submitted form is not acceptable."""


class EntrySaveError(RuntimeError):
    """Raised with the store's message when a write fails part way through a save."""


@dataclass
class EntryForm:
    """Raw editor input; numbers may still be typed text."""

    name: str = ""
    authors: Optional[str] = None
    year: Any = None
    age_min: Any = None
    age_max: Any = None
    source_url: Optional[str] = None
    doi: Optional[str] = None
    original_citation: Optional[str] = None
    access_notes: Optional[str] = None
    use_cases: Optional[str] = None
    notes: Optional[str] = None
    status: str = "draft"


@dataclass(frozen=True)
class FacetSync:
    facet: str
    inserted: tuple[UUID, ...] = ()
    deleted: tuple[UUID, ...] = ()

    @property
    def operations(self) -> int:
        return len(self.inserted) + len(self.deleted)


@dataclass
class SaveResult:
    entry_id: UUID
    syncs: list[FacetSync] = field(default_factory=list)


def citation_required() -> bool:
    return os.getenv("CATALOG_REQUIRE_CITATION") == "1"


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def validate_form(form: EntryForm, *, require_citation: Optional[bool] = None) -> dict[str, Any]:
    """Return the column values to store, or raise ``EntryValidationError``."""

    if require_citation is None:
        require_citation = citation_required()

    values: dict[str, Any] = {"name": (form.name or "").strip()}
    if not values["name"]:
        raise EntryValidationError("Name is required")
    for key in _OPTIONAL_TEXT_FIELDS:
        values[key] = _clean_text(getattr(form, key))
    if require_citation:
        if not values["authors"]:
            raise EntryValidationError("Authors are required")
        if not values["original_citation"]:
            raise EntryValidationError("Original citation is required")

    for key in ("age_min", "age_max"):
        try:
            values[key] = parse_age(getattr(form, key))
        except (TypeError, ValueError):
            raise EntryValidationError(f"{key} must be a non-negative number")
    if (
        values["age_min"] is not None
        and values["age_max"] is not None
        and values["age_min"] > values["age_max"]
    ):
        raise EntryValidationError("age_min cannot be greater than age_max")

    values["year"] = _parse_year(form.year)

    if values["source_url"] and not is_valid_url(values["source_url"]):
        raise EntryValidationError("source_url must be a valid URL")
    if form.status not in models.ENTRY_STATUSES:
        raise EntryValidationError(f"Unknown status: {form.status}")
    values["status"] = form.status
    return values


def _parse_year(raw: Any) -> Optional[int]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        raise EntryValidationError("year must be a whole number")
    try:
        number = float(raw)
    except (TypeError, ValueError):
        raise EntryValidationError("year must be a whole number")
    if not number.is_integer():
        raise EntryValidationError("year must be a whole number")
    return int(number)


def stored_term_ids(db: Session, facet: models.Facet, entry_id: UUID) -> set[UUID]:
    rows = (
        db.query(facet.link_term_attr)
        .filter(facet.link_model.test_id == entry_id)
        .all()
    )
    return {row[0] for row in rows}


def compute_delta(stored: Iterable[UUID], selected: Iterable[UUID]) -> tuple[list[UUID], list[UUID]]:
    """Return ``(to_insert, to_delete)`` as sorted id lists."""

    stored_set, selected_set = set(stored), set(selected)
    return sorted(selected_set - stored_set, key=str), sorted(stored_set - selected_set, key=str)


def _check_terms_exist(db: Session, facet: models.Facet, term_ids: set[UUID]) -> None:
    if not term_ids:
        return
    term = facet.term_model
    found = {row[0] for row in db.query(term.id).filter(term.id.in_(term_ids)).all()}
    missing = term_ids - found
    if missing:
        raise EntryValidationError(
            f"Unknown {facet.key} term(s): {', '.join(sorted(str(m) for m in missing))}"
        )


def sync_facet(
    db: Session, facet: models.Facet, entry_id: UUID, selected: Iterable[UUID]
) -> FacetSync:
    """Bring one facet's stored links for an entry in line with ``selected``.

    Ids present on both sides are never touched.
    """

    to_insert, to_delete = compute_delta(stored_term_ids(db, facet, entry_id), selected)
    link = facet.link_model
    if to_insert:
        db.execute(
            sa.insert(link),
            [{"test_id": entry_id, facet.term_column: term_id} for term_id in to_insert],
        )
    if to_delete:
        db.execute(
            sa.delete(link).where(
                link.test_id == entry_id,
                facet.link_term_attr.in_(to_delete),
            )
        )
    db.commit()
    return FacetSync(facet=facet.key, inserted=tuple(to_insert), deleted=tuple(to_delete))


def save_entry(
    db: Session,
    actor: models.User,
    entry_id: Optional[UUID],
    form: EntryForm,
    selections: Mapping[str, Optional[Iterable[UUID]]],
) -> SaveResult:
    """Create (``entry_id`` is None) or update an entry, then sync its tags.

    Facets missing from ``selections`` (or mapped to None) are left as stored.
    The scalar row and each facet commit separately; the first failure raises
    ``EntrySaveError`` and earlier commits stay in place.
    """

    values = validate_form(form)
    wanted = {
        key: set(ids)
        for key, ids in selections.items()
        if ids is not None and key in models.FACETS_BY_KEY
    }
    for key, ids in wanted.items():
        _check_terms_exist(db, models.FACETS_BY_KEY[key], ids)

    try:
        if entry_id is None:
            test = models.Test(owner_id=actor.id, **values)
            db.add(test)
        else:
            test = db.get(models.Test, entry_id)
            if test is None:
                raise EntryValidationError("Entry not found")
            for key, value in values.items():
                setattr(test, key, value)
        db.commit()
        db.refresh(test)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Entry save failed for %s: %s", entry_id or "new entry", exc)
        raise EntrySaveError(str(getattr(exc, "orig", None) or exc)) from exc

    result = SaveResult(entry_id=test.id)
    for facet in models.FACETS:
        if facet.key not in wanted:
            continue
        try:
            result.syncs.append(sync_facet(db, facet, test.id, wanted[facet.key]))
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Tag sync for %s failed on entry %s: %s", facet.key, test.id, exc)
            raise EntrySaveError(str(getattr(exc, "orig", None) or exc)) from exc
    logger.info(
        "Saved entry %s (%d tag changes)",
        test.id,
        sum(sync.operations for sync in result.syncs),
    )
    return result

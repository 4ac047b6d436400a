"""Catalog listing: fetch visible entries with their tags and filter them in memory."""

# purpose: orchestrate entry/vocabulary/link reads and apply text, status, facet and age filters
# status: active
# depends_on: backend.spatial_catalog.rbac, services.tags, services.ages

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from .. import models, rbac
from .ages import AgeFilter, AgePolicy, RawAge
from .tags import TagLink, group_term_ids, resolve_labels, sorted_labels

logger = logging.getLogger(__name__)

GENERAL_POPULATION = "general population"


@dataclass(frozen=True)
class CatalogEntry:
    """Decoded ``tests`` row in the shape the listing needs."""

    id: UUID
    name: str
    authors: Optional[str]
    year: Optional[int]
    age_min: Optional[float]
    age_max: Optional[float]
    source_url: Optional[str]
    access_notes: Optional[str]
    status: str
    owner_id: Optional[UUID] = None

    @classmethod
    def from_row(cls, row: models.Test) -> "CatalogEntry":
        return cls(
            id=row.id,
            name=row.name or "",
            authors=row.authors,
            year=row.year,
            age_min=row.age_min,
            age_max=row.age_max,
            source_url=row.source_url,
            access_notes=row.access_notes,
            status=row.status or "draft",
            owner_id=row.owner_id,
        )


@dataclass
class CatalogSnapshot:
    """Everything the listing screen holds after its initial load."""

    entries: list[CatalogEntry]
    vocabularies: dict[str, dict[UUID, str]]
    links: dict[str, list[TagLink]]

    def __post_init__(self):
        ids = [entry.id for entry in self.entries]
        self.term_ids = {
            facet.key: group_term_ids(ids, self.links.get(facet.key, ()))
            for facet in models.FACETS
        }
        self.labels = {
            facet.key: resolve_labels(
                ids,
                self.links.get(facet.key, ()),
                self.vocabularies.get(facet.key, {}),
            )
            for facet in models.FACETS
        }


@dataclass(frozen=True)
class CatalogFilters:
    q: str = ""
    status: Optional[str] = None
    ability: Optional[UUID] = None
    platform: Optional[UUID] = None
    modality: Optional[UUID] = None
    population: Optional[UUID] = None
    age_min: RawAge = None
    age_max: RawAge = None
    age_policy: AgePolicy = AgePolicy.OPEN

    def cleared(self) -> "CatalogFilters":
        """Reset every criterion at once; the age policy is a setting, not a criterion."""

        return CatalogFilters(age_policy=self.age_policy)

    def facet_value(self, key: str) -> Optional[UUID]:
        return getattr(self, key)


@dataclass(frozen=True)
class CatalogRow:
    entry: CatalogEntry
    labels: dict[str, list[str]] = field(default_factory=dict)
    adapted: bool = False


def is_adapted(population_labels: list[str]) -> bool:
    return any(label.lower() != GENERAL_POPULATION for label in population_labels)


def _load_links(db: Session, facet: models.Facet, entry_ids: list[UUID]) -> list[TagLink]:
    if not entry_ids:
        return []
    link = facet.link_model
    rows = (
        db.query(link.test_id, facet.link_term_attr)
        .filter(link.test_id.in_(entry_ids))
        .all()
    )
    return [TagLink(entry_id=row[0], term_id=row[1]) for row in rows]


def load_vocabulary(db: Session, facet: models.Facet) -> dict[UUID, str]:
    term = facet.term_model
    rows = db.query(term.id, term.label).order_by(term.label.asc()).all()
    return {row[0]: row[1] for row in rows}


def load_catalog(db: Session, viewer: models.User | None) -> CatalogSnapshot:
    """Read visible entries by name, every vocabulary and the links for those entries."""

    rows = rbac.visible_tests(db, viewer).order_by(models.Test.name.asc()).all()
    entries = [CatalogEntry.from_row(row) for row in rows]
    entry_ids = [entry.id for entry in entries]
    vocabularies = {facet.key: load_vocabulary(db, facet) for facet in models.FACETS}
    links = {facet.key: _load_links(db, facet, entry_ids) for facet in models.FACETS}
    logger.debug("Loaded catalog snapshot with %d entries", len(entries))
    return CatalogSnapshot(entries=entries, vocabularies=vocabularies, links=links)


def _matches_text(entry: CatalogEntry, q: str) -> bool:
    needle = q.strip().lower()
    if not needle:
        return True
    return needle in entry.name.lower() or needle in (entry.authors or "").lower()


def filter_catalog(snapshot: CatalogSnapshot, filters: CatalogFilters) -> list[CatalogRow]:
    """Apply every active criterion with AND, keeping the snapshot's order."""

    age_filter = AgeFilter.from_raw(filters.age_min, filters.age_max, filters.age_policy)
    rows: list[CatalogRow] = []
    for entry in snapshot.entries:
        if not _matches_text(entry, filters.q):
            continue
        if filters.status and entry.status != filters.status:
            continue
        if any(
            filters.facet_value(facet.key) is not None
            and filters.facet_value(facet.key) not in snapshot.term_ids[facet.key][entry.id]
            for facet in models.FACETS
        ):
            continue
        if not age_filter.accepts(entry.age_min, entry.age_max):
            continue
        labels = {
            facet.key: sorted_labels(snapshot.labels[facet.key][entry.id])
            for facet in models.FACETS
        }
        rows.append(
            CatalogRow(entry=entry, labels=labels, adapted=is_adapted(labels["population"]))
        )
    return rows


def facet_options(snapshot: CatalogSnapshot) -> dict[str, list[tuple[UUID, str]]]:
    """Terms actually used by the visible entries, sorted by label, per facet."""

    options = {}
    for facet in models.FACETS:
        vocabulary = snapshot.vocabularies.get(facet.key, {})
        used = {
            term_id
            for term_ids in snapshot.term_ids[facet.key].values()
            for term_id in term_ids
            if term_id in vocabulary
        }
        options[facet.key] = sorted(
            ((term_id, vocabulary[term_id]) for term_id in used),
            key=lambda item: (item[1].casefold(), item[1]),
        )
    return options


def search_catalog(
    db: Session, viewer: models.User | None, filters: CatalogFilters
) -> tuple[list[CatalogRow], CatalogSnapshot]:
    snapshot = load_catalog(db, viewer)
    return filter_catalog(snapshot, filters), snapshot

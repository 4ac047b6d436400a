from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth import get_optional_user
from .. import models, schemas
from ..services import catalog as catalog_service
from ..services.ages import AgePolicy, default_policy

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def _row_out(row: catalog_service.CatalogRow) -> schemas.CatalogRowOut:
    entry = row.entry
    return schemas.CatalogRowOut(
        id=entry.id,
        name=entry.name,
        authors=entry.authors,
        year=entry.year,
        age_min=entry.age_min,
        age_max=entry.age_max,
        source_url=entry.source_url,
        access_notes=entry.access_notes,
        status=entry.status,
        labels=schemas.FacetLabels(**row.labels),
        adapted=row.adapted,
    )


@router.get("", response_model=schemas.CatalogOut)
async def browse_catalog(
    q: str = "",
    status: Optional[str] = Query(None, pattern="^(draft|wip|published)$"),
    ability: Optional[UUID] = None,
    platform: Optional[UUID] = None,
    modality: Optional[UUID] = None,
    population: Optional[UUID] = None,
    # kept as text so the age policy decides what an unparseable bound means
    age_min: Optional[str] = None,
    age_max: Optional[str] = None,
    age_policy: Optional[AgePolicy] = None,
    db: Session = Depends(get_db),
    viewer: models.User | None = Depends(get_optional_user),
):
    filters = catalog_service.CatalogFilters(
        q=q,
        status=status,
        ability=ability,
        platform=platform,
        modality=modality,
        population=population,
        age_min=age_min,
        age_max=age_max,
        age_policy=age_policy or default_policy(),
    )
    rows, snapshot = catalog_service.search_catalog(db, viewer, filters)
    options = {
        key: [schemas.TermOption(id=term_id, label=label) for term_id, label in terms]
        for key, terms in catalog_service.facet_options(snapshot).items()
    }
    return schemas.CatalogOut(
        results=[_row_out(row) for row in rows],
        options=schemas.CatalogOptions(**options),
        total=len(snapshot.entries),
    )

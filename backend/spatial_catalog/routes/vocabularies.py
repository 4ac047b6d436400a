from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth import get_optional_user
from .. import models, schemas
from ..services import vocabularies as vocabulary_service

router = APIRouter(prefix="/api/vocabularies", tags=["vocabularies"])


@router.get("/{facet}", response_model=list[schemas.TermOut])
async def list_vocabulary(
    facet: str,
    db: Session = Depends(get_db),
    viewer: models.User | None = Depends(get_optional_user),
):
    definition = models.FACETS_BY_KEY.get(facet)
    if definition is None:
        raise HTTPException(status_code=404, detail="Unknown facet")
    return vocabulary_service.list_terms(db, definition)

from datetime import datetime
from typing import Optional, Literal, Union
from pydantic import BaseModel, EmailStr, ConfigDict, Field
from uuid import UUID


EntryStatus = Literal["draft", "wip", "published"]
# raw form input: numbers may arrive as typed text and are parsed by the editor
NumericInput = Union[int, float, str, None]


class UserOut(BaseModel):
    id: UUID
    email: EmailStr
    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MagicLinkRequest(BaseModel):
    email: EmailStr


class MagicLinkVerify(BaseModel):
    token: str


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    affiliation: Optional[str] = None
    orcid: Optional[str] = None
    contact_email: Optional[str] = None
    contact_via_orcid: bool = True
    contact_via_email: bool = False


class ProfileOut(BaseModel):
    user_id: UUID
    display_name: Optional[str] = None
    affiliation: Optional[str] = None
    orcid: Optional[str] = None
    orcid_url: Optional[str] = None
    contact_email: Optional[str] = None
    contact_via_orcid: bool = True
    contact_via_email: bool = False


class ContributorOut(BaseModel):
    user_id: Optional[UUID] = None
    name: str
    orcid: Optional[str] = None
    orcid_url: Optional[str] = None
    email: Optional[str] = None


class TermOut(BaseModel):
    id: UUID
    label: str
    slug: str
    description: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class TermOption(BaseModel):
    id: UUID
    label: str


class FacetSelection(BaseModel):
    ability: Optional[list[UUID]] = None
    platform: Optional[list[UUID]] = None
    modality: Optional[list[UUID]] = None
    population: Optional[list[UUID]] = None


class EntryWrite(BaseModel):
    name: str = ""
    authors: Optional[str] = None
    year: NumericInput = None
    age_min: NumericInput = None
    age_max: NumericInput = None
    source_url: Optional[str] = None
    doi: Optional[str] = None
    original_citation: Optional[str] = None
    access_notes: Optional[str] = None
    use_cases: Optional[str] = None
    notes: Optional[str] = None
    status: str = "draft"
    tags: FacetSelection = Field(default_factory=FacetSelection)


class EntryOut(BaseModel):
    id: UUID
    name: str
    authors: Optional[str] = None
    year: Optional[int] = None
    age_min: Optional[float] = None
    age_max: Optional[float] = None
    source_url: Optional[str] = None
    doi: Optional[str] = None
    original_citation: Optional[str] = None
    access_notes: Optional[str] = None
    use_cases: Optional[str] = None
    notes: Optional[str] = None
    status: EntryStatus
    owner_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class EntrySummary(BaseModel):
    id: UUID
    name: str
    status: EntryStatus
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class FacetLabels(BaseModel):
    ability: list[str] = []
    platform: list[str] = []
    modality: list[str] = []
    population: list[str] = []


class FacetTermIds(BaseModel):
    ability: list[UUID] = []
    platform: list[UUID] = []
    modality: list[UUID] = []
    population: list[UUID] = []


class EntryDetail(BaseModel):
    entry: EntryOut
    labels: FacetLabels
    term_ids: FacetTermIds
    adapted: bool
    contributor: ContributorOut
    can_edit: bool = False


class FacetSyncOut(BaseModel):
    facet: str
    inserted: list[UUID]
    deleted: list[UUID]


class EntrySaveOut(BaseModel):
    id: UUID
    syncs: list[FacetSyncOut]


class SubmitEligibility(BaseModel):
    can_submit: bool
    reason: Optional[str] = None


class CatalogRowOut(BaseModel):
    id: UUID
    name: str
    authors: Optional[str] = None
    year: Optional[int] = None
    age_min: Optional[float] = None
    age_max: Optional[float] = None
    source_url: Optional[str] = None
    access_notes: Optional[str] = None
    status: EntryStatus
    labels: FacetLabels
    adapted: bool


class CatalogOptions(BaseModel):
    ability: list[TermOption] = []
    platform: list[TermOption] = []
    modality: list[TermOption] = []
    population: list[TermOption] = []


class CatalogOut(BaseModel):
    results: list[CatalogRowOut]
    options: CatalogOptions
    total: int


class ContributionWrite(BaseModel):
    about: str = ""
    authors: Optional[str] = None
    publication_url: Optional[str] = None
    notes: Optional[str] = None


class ContributionOut(BaseModel):
    id: UUID
    test_id: UUID
    created_by: UUID
    about: str
    authors: Optional[str] = None
    publication_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class AuditLogOut(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    action: str
    details: dict = {}
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

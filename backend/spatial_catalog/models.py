import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Float,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .database import Base


def _now():
    return datetime.now(timezone.utc)


ENTRY_STATUSES = ("draft", "wip", "published")


class User(Base):
    __tablename__ = "users"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=_now)

    profile = relationship("Profile", back_populates="user", uselist=False)


class MagicLinkToken(Base):
    __tablename__ = "magic_link_tokens"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False)
    token = Column(String, unique=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False)
    created_at = Column(DateTime, default=_now)


class Profile(Base):
    __tablename__ = "profiles"
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), primary_key=True)
    display_name = Column(String)
    affiliation = Column(String)
    orcid = Column(String)
    contact_email = Column(String)
    contact_via_orcid = Column(Boolean, default=True, nullable=False)
    contact_via_email = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now)

    user = relationship("User", back_populates="profile")


class Test(Base):
    """A catalogued spatial-ability assessment instrument."""

    __tablename__ = "tests"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    authors = Column(String)
    year = Column(Integer)
    age_min = Column(Float)
    age_max = Column(Float)
    source_url = Column(String)
    doi = Column(String)
    original_citation = Column(Text)
    access_notes = Column(Text)
    use_cases = Column(Text)
    notes = Column(Text)
    status = Column(String, default="draft", nullable=False)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)

    owner = relationship("User")

    __table_args__ = (
        sa.CheckConstraint(
            "status in ('draft', 'wip', 'published')", name="ck_tests_status"
        ),
    )


class Ability(Base):
    __tablename__ = "abilities"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    label = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    description = Column(Text)


class Platform(Base):
    __tablename__ = "platforms"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    label = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    description = Column(Text)


class Modality(Base):
    __tablename__ = "modalities"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    label = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    description = Column(Text)


class PopulationType(Base):
    __tablename__ = "population_types"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    label = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    description = Column(Text)


# link tables: the composite primary key gives set semantics per (test, term)
class TestAbility(Base):
    __tablename__ = "test_abilities"
    test_id = Column(
        UUID(as_uuid=True), ForeignKey("tests.id", ondelete="CASCADE"), primary_key=True
    )
    ability_id = Column(
        UUID(as_uuid=True), ForeignKey("abilities.id", ondelete="CASCADE"), primary_key=True
    )


class TestPlatform(Base):
    __tablename__ = "test_platforms"
    test_id = Column(
        UUID(as_uuid=True), ForeignKey("tests.id", ondelete="CASCADE"), primary_key=True
    )
    platform_id = Column(
        UUID(as_uuid=True), ForeignKey("platforms.id", ondelete="CASCADE"), primary_key=True
    )


class TestModality(Base):
    __tablename__ = "test_modalities"
    test_id = Column(
        UUID(as_uuid=True), ForeignKey("tests.id", ondelete="CASCADE"), primary_key=True
    )
    modality_id = Column(
        UUID(as_uuid=True), ForeignKey("modalities.id", ondelete="CASCADE"), primary_key=True
    )


class TestPopulationType(Base):
    __tablename__ = "test_population_types"
    test_id = Column(
        UUID(as_uuid=True), ForeignKey("tests.id", ondelete="CASCADE"), primary_key=True
    )
    population_type_id = Column(
        UUID(as_uuid=True),
        ForeignKey("population_types.id", ondelete="CASCADE"),
        primary_key=True,
    )


@dataclass(frozen=True)
class Facet:
    """Bind a controlled vocabulary to the link table that tags entries with it."""

    key: str
    term_model: type
    link_model: type
    term_column: str

    @property
    def link_term_attr(self):
        return getattr(self.link_model, self.term_column)


FACETS: tuple[Facet, ...] = (
    Facet("ability", Ability, TestAbility, "ability_id"),
    Facet("platform", Platform, TestPlatform, "platform_id"),
    Facet("modality", Modality, TestModality, "modality_id"),
    Facet("population", PopulationType, TestPopulationType, "population_type_id"),
)
FACETS_BY_KEY = {facet.key: facet for facet in FACETS}


class TestVersion(Base):
    __tablename__ = "test_versions"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    test_id = Column(
        UUID(as_uuid=True), ForeignKey("tests.id", ondelete="CASCADE"), nullable=False
    )
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    about = Column(Text, nullable=False)
    authors = Column(String)
    publication_url = Column(String)
    notes = Column(Text)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)


class TestRelatedWork(Base):
    __tablename__ = "test_related_works"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    test_id = Column(
        UUID(as_uuid=True), ForeignKey("tests.id", ondelete="CASCADE"), nullable=False
    )
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    about = Column(Text, nullable=False)
    authors = Column(String)
    publication_url = Column(String)
    notes = Column(Text)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)


class AuditLog(Base):
    __tablename__ = "audit_logs"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    action = Column(String, nullable=False)
    target_type = Column(String)
    target_id = Column(UUID(as_uuid=True))
    details = Column(JSON, default=dict)
    created_at = Column(DateTime, default=_now)

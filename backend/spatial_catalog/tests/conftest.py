import os
os.environ["TESTING"] = "1"
os.environ.setdefault("SECRET_KEY", "test-secret")
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import sys
from pathlib import Path

import uuid

sys.path.append(str(Path(__file__).resolve().parents[2]))

from spatial_catalog.main import app
from spatial_catalog.database import Base, enable_sqlite_foreign_keys, get_db
from spatial_catalog import models, notify
from spatial_catalog.services.vocabularies import seed_vocabularies

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)

_seed_session = TestingSessionLocal()
seed_vocabularies(_seed_session)
_seed_session.close()


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def catalog_settings(monkeypatch):
    for key in ("CATALOG_AGE_POLICY", "CATALOG_REQUIRE_CITATION", "CATALOG_REQUIRE_ORCID"):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_user(db, email: str | None = None) -> models.User:
    user = models.User(email=email or f"user-{uuid.uuid4()}@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def term_id(db, facet_key: str, slug: str):
    term = models.FACETS_BY_KEY[facet_key].term_model
    return db.query(term.id).filter(term.slug == slug).scalar()


def ensure_access_token(client, *, email: str | None = None):
    """
    catalog: purpose: sign a test user in through the magic-link outbox
    catalog: inputs: fastapi TestClient, optional email override
    catalog: outputs: tuple(access_token str, normalized email str)
    catalog: status: active
    """

    normalized_email = (email or f"user-{uuid.uuid4()}@example.com").lower()
    resp = client.post("/api/auth/magic-link", json={"email": normalized_email})
    assert resp.status_code == 200, resp.text
    code = notify.EMAIL_OUTBOX[-1][2].split()[-1]
    verify = client.post("/api/auth/verify", json={"token": code})
    assert verify.status_code == 200, f"Sign-in failed for {normalized_email}: {verify.text}"
    token = verify.json().get("access_token")
    if not token:
        raise AssertionError(f"Authentication response missing token for {normalized_email}")
    return token, normalized_email


def ensure_auth_headers(client, *, email: str | None = None):
    """
    catalog: purpose: convenience wrapper returning authorization headers for API tests
    catalog: depends_on: ensure_access_token
    catalog: outputs: tuple(headers dict, normalized email str)
    catalog: status: active
    """

    token, normalized_email = ensure_access_token(client, email=email)
    return {"Authorization": f"Bearer {token}"}, normalized_email


def create_entry(client, headers, **fields):
    payload = {"name": f"Entry {uuid.uuid4().hex[:8]}", "status": "published"}
    payload.update(fields)
    resp = client.post("/api/entries", json=payload, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]

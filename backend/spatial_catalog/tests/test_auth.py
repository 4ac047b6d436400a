from spatial_catalog import notify
from spatial_catalog.auth import create_access_token, decode_access_token

from .conftest import client, ensure_auth_headers


def test_magic_link_sign_in_creates_user(client):
    notify.EMAIL_OUTBOX.clear()
    resp = client.post("/api/auth/magic-link", json={"email": "New.Person@Example.com"})
    assert resp.status_code == 200
    to_email, subject, message = notify.EMAIL_OUTBOX[-1]
    assert to_email == "new.person@example.com"
    code = message.split()[-1]
    verify = client.post("/api/auth/verify", json={"token": code})
    assert verify.status_code == 200
    token = verify.json()["access_token"]
    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "new.person@example.com"


def test_magic_link_code_is_single_use(client):
    client.post("/api/auth/magic-link", json={"email": "once@example.com"})
    code = notify.EMAIL_OUTBOX[-1][2].split()[-1]
    assert client.post("/api/auth/verify", json={"token": code}).status_code == 200
    again = client.post("/api/auth/verify", json={"token": code})
    assert again.status_code == 400


def test_unknown_code_rejected(client):
    resp = client.post("/api/auth/verify", json={"token": "not-a-code"})
    assert resp.status_code == 400


def test_second_sign_in_reuses_account(client):
    headers_one, email = ensure_auth_headers(client)
    headers_two, _ = ensure_auth_headers(client, email=email)
    first = client.get("/api/users/me", headers=headers_one).json()["id"]
    second = client.get("/api/users/me", headers=headers_two).json()["id"]
    assert first == second


def test_protected_route_requires_token(client):
    assert client.get("/api/users/me").status_code == 401
    bad = client.get("/api/users/me", headers={"Authorization": "Bearer nonsense"})
    assert bad.status_code == 401


def test_access_token_round_trip():
    token = create_access_token({"sub": "someone@example.com"})
    assert decode_access_token(token) == "someone@example.com"
    assert decode_access_token(token + "x") is None

from urllib.parse import parse_qs, urlparse

import requests

from spatial_catalog.services import identity

from .conftest import client

BASE = "/functions/v1/orcid-proxy/realms/orcid/protocol/openid-connect"


class FakeUpstream:
    def __init__(self, status_code=200, content=b'{"access_token": "abc"}', headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {"Content-Type": "application/json", "Content-Length": "23"}


def test_authorize_redirect_normalizes_query(client):
    resp = client.get(
        f"{BASE}/auth",
        params={"client_id": "X", "redirect_uri": "Y", "scope": "openid profile", "state": "Z"},
        follow_redirects=False,
    )
    assert resp.status_code == 302
    assert resp.headers["cache-control"] == "no-store"
    location = urlparse(resp.headers["location"])
    assert f"{location.scheme}://{location.netloc}{location.path}" == "https://orcid.org/oauth/authorize"
    query = parse_qs(location.query)
    assert query == {
        "client_id": ["X"],
        "redirect_uri": ["Y"],
        "response_type": ["code"],
        "scope": ["openid"],
        "state": ["Z"],
    }


def test_authorize_without_state(client):
    resp = client.get(f"{BASE}/auth", params={"client_id": "X"}, follow_redirects=False)
    query = parse_qs(urlparse(resp.headers["location"]).query)
    assert "state" not in query


def test_missing_marker_is_404(client):
    resp = client.get("/functions/v1/orcid-proxy/oauth/authorize")
    assert resp.status_code == 404
    assert resp.text == "Not found"


def test_unknown_endpoint_is_404(client):
    assert client.get(f"{BASE}/logout").status_code == 404


def test_token_request_forwarded(client, monkeypatch):
    calls = []

    def fake_request(method, url, headers=None, data=None, **kwargs):
        calls.append((method, url, headers, data))
        return FakeUpstream()

    monkeypatch.setattr(identity.requests, "request", fake_request)
    resp = client.post(
        f"{BASE}/token",
        content=b"grant_type=authorization_code&code=abc",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"access_token": "abc"}
    method, url, headers, data = calls[0]
    assert method == "POST"
    assert url == "https://orcid.org/oauth/token"
    assert data == b"grant_type=authorization_code&code=abc"
    assert "host" not in {key.lower() for key in headers}


def test_userinfo_keeps_query_and_upstream_status(client, monkeypatch):
    calls = []

    def fake_request(method, url, **kwargs):
        calls.append(url)
        return FakeUpstream(status_code=401, content=b"unauthorized", headers={"Content-Type": "text/plain"})

    monkeypatch.setattr(identity.requests, "request", fake_request)
    resp = client.get(f"{BASE}/userinfo", params={"a": "1"})
    assert resp.status_code == 401
    assert resp.text == "unauthorized"
    assert calls == ["https://orcid.org/oauth/userinfo?a=1"]


def test_upstream_failure_is_502(client, monkeypatch):
    def broken(*args, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(identity.requests, "request", broken)
    resp = client.get(f"{BASE}/userinfo")
    assert resp.status_code == 502


def test_orcid_base_override(monkeypatch):
    monkeypatch.setenv("ORCID_BASE", "https://sandbox.orcid.org/")
    url = identity.build_authorize_url({"client_id": "X", "redirect_uri": "Y"})
    assert url.startswith("https://sandbox.orcid.org/oauth/authorize?")

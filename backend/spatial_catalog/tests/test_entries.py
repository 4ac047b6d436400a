import uuid

from .conftest import client, create_entry, ensure_auth_headers


def _ability_ids(client):
    return {term["slug"]: term["id"] for term in client.get("/api/vocabularies/ability").json()}


def test_create_and_read_entry_detail(client):
    headers, _ = ensure_auth_headers(client)
    client.put("/api/profiles/me", json={"orcid": "0000-0002-1825-0097"}, headers=headers)
    abilities = _ability_ids(client)
    entry_id = create_entry(
        client,
        headers,
        name="Paper Folding Test",
        year="1976",
        age_min="12",
        age_max="",
        source_url="https://example.org/vz-2",
        tags={"ability": [abilities["spatial-visualization"], abilities["mental-rotation"]]},
    )
    resp = client.get(f"/api/entries/{entry_id}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["entry"]["year"] == 1976
    assert data["entry"]["age_min"] == 12
    assert data["entry"]["age_max"] is None
    assert data["labels"]["ability"] == ["Mental Rotation", "Spatial Visualization"]
    assert len(data["term_ids"]["ability"]) == 2
    assert data["contributor"]["name"] == "ORCID 0000-0002-1825-0097"
    assert data["can_edit"] is False
    owner_view = client.get(f"/api/entries/{entry_id}", headers=headers)
    assert owner_view.json()["can_edit"] is True


def test_update_reports_minimal_tag_changes(client):
    headers, _ = ensure_auth_headers(client)
    abilities = _ability_ids(client)
    a, b, c = abilities["mental-rotation"], abilities["spatial-visualization"], abilities["navigation"]
    entry_id = create_entry(client, headers, name="Tagged entry", tags={"ability": [a, b]})

    resp = client.put(
        f"/api/entries/{entry_id}",
        json={"name": "Tagged entry", "status": "published", "tags": {"ability": [b, c]}},
        headers=headers,
    )
    assert resp.status_code == 200
    syncs = resp.json()["syncs"]
    assert syncs == [{"facet": "ability", "inserted": [c], "deleted": [a]}]

    detail = client.get(f"/api/entries/{entry_id}").json()
    assert set(detail["term_ids"]["ability"]) == {b, c}


def test_update_keeps_owner(client):
    headers, _ = ensure_auth_headers(client)
    entry_id = create_entry(client, headers, name="Owned entry")
    before = client.get(f"/api/entries/{entry_id}").json()["entry"]["owner_id"]
    client.put(f"/api/entries/{entry_id}", json={"name": "Owned entry v2", "status": "published"}, headers=headers)
    after = client.get(f"/api/entries/{entry_id}").json()["entry"]
    assert after["owner_id"] == before
    assert after["name"] == "Owned entry v2"


def test_non_owner_cannot_edit(client):
    owner_headers, _ = ensure_auth_headers(client)
    entry_id = create_entry(client, owner_headers, name="Guarded entry")
    other_headers, _ = ensure_auth_headers(client)
    resp = client.put(
        f"/api/entries/{entry_id}",
        json={"name": "Hijacked", "status": "published"},
        headers=other_headers,
    )
    assert resp.status_code == 403


def test_draft_hidden_from_others(client):
    owner_headers, _ = ensure_auth_headers(client)
    entry_id = create_entry(client, owner_headers, name="Secret draft", status="draft")
    assert client.get(f"/api/entries/{entry_id}").status_code == 404
    other_headers, _ = ensure_auth_headers(client)
    assert client.get(f"/api/entries/{entry_id}", headers=other_headers).status_code == 404
    assert client.get(f"/api/entries/{entry_id}", headers=owner_headers).status_code == 200


def test_wip_visible_to_signed_in_viewers_only(client):
    owner_headers, _ = ensure_auth_headers(client)
    entry_id = create_entry(client, owner_headers, name="In progress", status="wip")
    assert client.get(f"/api/entries/{entry_id}").status_code == 404
    other_headers, _ = ensure_auth_headers(client)
    assert client.get(f"/api/entries/{entry_id}", headers=other_headers).status_code == 200


def test_validation_errors(client):
    headers, _ = ensure_auth_headers(client)
    cases = [
        {"name": ""},
        {"name": "Bad ages", "age_min": 10, "age_max": 4},
        {"name": "Bad age", "age_min": "ten"},
        {"name": "Bad url", "source_url": "ftp//nowhere"},
        {"name": "Bad status", "status": "archived"},
        {"name": "Bad tag", "tags": {"ability": [str(uuid.uuid4())]}},
    ]
    for payload in cases:
        resp = client.post("/api/entries", json=payload, headers=headers)
        assert resp.status_code == 400, payload


def test_anonymous_cannot_create(client):
    assert client.post("/api/entries", json={"name": "Nope"}).status_code == 401


def test_orcid_policy_blocks_submission(client, monkeypatch):
    monkeypatch.setenv("CATALOG_REQUIRE_ORCID", "1")
    headers, _ = ensure_auth_headers(client)
    eligibility = client.get("/api/entries/eligibility", headers=headers).json()
    assert eligibility["can_submit"] is False
    assert client.post("/api/entries", json={"name": "Blocked"}, headers=headers).status_code == 403

    client.put("/api/profiles/me", json={"orcid": "0000-0002-1694-233X"}, headers=headers)
    assert client.get("/api/entries/eligibility", headers=headers).json()["can_submit"] is True
    assert client.post("/api/entries", json={"name": "Allowed"}, headers=headers).status_code == 200


def test_my_entries_and_history(client):
    headers, _ = ensure_auth_headers(client)
    entry_id = create_entry(client, headers, name="Mine", status="draft")
    client.put(f"/api/entries/{entry_id}", json={"name": "Mine again", "status": "wip"}, headers=headers)

    mine = client.get("/api/entries/mine", headers=headers).json()
    assert [row["id"] for row in mine] == [entry_id]

    history = client.get(f"/api/entries/{entry_id}/history", headers=headers)
    assert history.status_code == 200
    actions = [row["action"] for row in history.json()]
    assert actions == ["entry_update", "entry_create"]

    other_headers, _ = ensure_auth_headers(client)
    assert client.get(f"/api/entries/{entry_id}/history", headers=other_headers).status_code == 403

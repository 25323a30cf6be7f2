from datetime import date

import pytest

from conftest import valid_values
from ostsee.services.sightings import repository as repo


@pytest.fixture
def seeded(db):
    ids = []
    for i, overrides in enumerate([
        {"sighting_date": "2024-05-01"},
        {"sighting_date": "2024-06-01", "name_consent": True},
        {"sighting_date": "2023-06-01", "is_dead": True, "dead_condition": 1, "dead_sex": 2},
    ]):
        ids.append(repo.create_sighting(db, valid_values(reference_id=f"seed{i}", **overrides)))
    repo.set_verified(db, ids[1], True)
    return ids


def login(client, cookies):
    for name, value in cookies.items():
        client.cookies.set(name, value)


def test_public_create(client):
    resp = client.post("/api/sightings", json=valid_values(reference_id="pub1"))
    assert resp.status_code == 201
    assert resp.json()["success"] is True

    resp = client.post("/api/sightings", json=valid_values(reference_id="pub2", email="kaputt"))
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "email"


def test_public_list_by_year(client, seeded):
    rows = client.get("/api/sightings", params={"year": 2024}).json()
    assert len(rows) == 2
    assert "email" not in rows[0]
    assert rows[1]["last_name"] == "Mustermann"
    assert rows[0]["last_name"] is None


def test_public_list_defaults_to_current_year(client, db):
    today = date.today()
    current = repo.create_sighting(db, valid_values(reference_id="now", sighting_date=today.isoformat(),
                                                    sighting_time="00:00"))
    repo.create_sighting(db, valid_values(reference_id="old", sighting_date=f"{today.year - 1}-06-01"))
    resp = client.get("/api/sightings")
    assert resp.status_code == 200
    assert resp.headers["cache-control"] == "max-age=3600"
    assert [r["id"] for r in resp.json()] == [current]


@pytest.mark.parametrize("path", [
    "/api/admin/sightings", "/api/admin/me", "/api/sightings/export", "/api/sightings/export/csv",
])
def test_admin_routes_need_login(client, path):
    resp = client.get(path)
    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"


def test_admin_routes_need_role(client, user_cookies):
    login(client, user_cookies)
    resp = client.get("/api/admin/sightings")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Forbidden: Insufficient permissions"


def test_admin_list_and_filters(client, admin_cookies, seeded):
    login(client, admin_cookies)
    body = client.get("/api/admin/sightings", params={"perPage": 2, "sort": "sightingDate"}).json()
    assert body["total"] == 3
    assert len(body["items"]) == 2
    assert body["items"][0]["email"] == "erika@example.org"

    body = client.get("/api/admin/sightings", params={"verified": "1"}).json()
    assert [i["id"] for i in body["items"]] == [seeded[1]]
    body = client.get("/api/admin/sightings", params={"dateFrom": "2024-01-01", "entryChannel": "all"}).json()
    assert body["total"] == 2
    assert client.get("/api/admin/sightings", params={"entryChannel": "web"}).status_code == 400
    assert client.get("/api/admin/me").json()["roles"] == ["admin"]


def test_admin_detail_update_verify_approve(client, admin_cookies, seeded):
    login(client, admin_cookies)
    sid = seeded[0]
    assert client.get(f"/api/sightings/{sid}").json()["reference_id"] == "seed0"
    assert client.get("/api/sightings/9999").status_code == 404

    resp = client.put(f"/api/sightings/{sid}", json={"waterway": "Schlei", "entry_channel": 2})
    assert resp.json()["sighting"]["waterway"] == "Schlei"
    assert resp.json()["sighting"]["entry_channel"] == 2
    assert client.put(f"/api/sightings/{sid}", json={}).status_code == 400

    assert client.patch(f"/api/sightings/{sid}/verify", json={"verified": 1}).json()["verified"] == 1
    assert client.patch(f"/api/sightings/{sid}/verify", json={"verified": 3}).status_code == 400
    body = client.patch(f"/api/sightings/{sid}/approve", json={"approve": True, "internal_comment": "ok"}).json()
    assert body["approved_at"] is not None
    assert body["internal_comment"] == "ok"

    assert client.delete(f"/api/sightings/{sid}").json() == {"success": True}
    assert client.get(f"/api/sightings/{sid}").status_code == 404


def test_bulk(client, admin_cookies, seeded):
    login(client, admin_cookies)
    resp = client.post("/api/sightings/bulk", params={"action": "verify"},
                       json={"ids": seeded, "verified": 1})
    assert resp.json()["affected"] == sorted(seeded)
    assert client.post("/api/sightings/bulk", params={"action": "verify"}, json={"ids": []}).status_code == 400


def test_search_masks_for_public(client, admin_cookies, seeded):
    body = client.post("/api/sightings/search", json={"filters": {"search": "Muster"}}).json()
    assert body["pagination"]["total"] == 1
    assert "email" not in body["data"][0]

    login(client, admin_cookies)
    body = client.post("/api/sightings/search", json={}).json()
    assert body["pagination"]["total"] == 3
    assert body["data"][0]["email"] == "erika@example.org"


def test_map_shows_verified(client, seeded):
    collection = client.get("/api/map/sightings").json()
    assert collection["type"] == "FeatureCollection"
    assert [f["id"] for f in collection["features"]] == [seeded[1]]
    assert collection["features"][0]["properties"]["name"] == "Mustermann"


def test_exports(client, admin_cookies, seeded):
    login(client, admin_cookies)
    assert client.get("/api/sightings/export").json()["count"] == 3

    resp = client.get("/api/sightings/export/csv")
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="sichtungen-export.csv"' in resp.headers["content-disposition"]
    assert resp.text.count("\n") == 4

    resp = client.get("/api/sightings/export/kml", params={"verified": "1"})
    assert resp.text.count("<Placemark>") == 1
    resp = client.get("/api/sightings/export/xml")
    assert resp.text.count("<sichtung>") == 3
    resp = client.get("/api/sightings/export/json")
    assert resp.headers["content-disposition"].endswith('sichtungen-export.json"')

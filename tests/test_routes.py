"""
HTTP tests for the full application.

Covers:
- GET / and /api/health* - liveness and readiness
- POST /api/auth/login  - admin login
- /api/properties, /api/team, /api/contact, /api/leads - CRUD and the auth gate
- Error mapping for store failures, bad bodies and unexpected exceptions
"""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

import realty_api.routes
from realty_api.errors import StoreError
from realty_api.main import create_app
from realty_api.store import RecordStore

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, make_settings


# =============================================================================
# Liveness
# =============================================================================


def test_root_message(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "SSP Realty Backend API" in resp.json()["message"]


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert "Backend is running" in resp.json()["status"]


def test_ready_with_reachable_store(client):
    assert client.get("/api/health/ready").json() == {"status": "ready"}


def test_ready_with_unreachable_store(settings):
    store = AsyncMock(spec=RecordStore)
    store.ping.return_value = False
    client = TestClient(create_app(settings=settings, store=store))
    resp = client.get("/api/health/ready")
    assert resp.status_code == 503


# =============================================================================
# Login
# =============================================================================


def test_login_returns_usable_token(client):
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    headers = {"Authorization": f"Bearer {body['token']}"}
    assert client.get("/api/leads", headers=headers).status_code == 200


def test_login_wrong_password(client):
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid credentials"}


def test_login_missing_fields(client):
    resp = client.post("/api/auth/login", json={})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid credentials"}


def test_login_disabled_without_hash(store):
    client = TestClient(create_app(settings=make_settings(password_hash=None), store=store))
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Admin login is not configured"}


def test_login_checks_password_in_threadpool(client, monkeypatch):
    calls = []

    async def fake_threadpool(func, *args):
        calls.append(args)
        return func(*args)

    monkeypatch.setattr(realty_api.routes, "run_in_threadpool", fake_threadpool)
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    assert calls == [(ADMIN_EMAIL, ADMIN_PASSWORD)]


def test_login_password_over_72_bytes(client):
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "x" * 100})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid credentials"}


# =============================================================================
# Properties
# =============================================================================


def test_property_crud(client, auth_headers):
    body = {"id": "villa-1", "title": "Sea Villa", "price": "2.5 Cr", "beds": 4,
            "pricingTiers": [{"unitNumbers": "101-110", "price": "2.5 Cr"}]}
    resp = client.post("/api/properties", json=body, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["data"]["id"] == "villa-1"

    fetched = client.get("/api/properties/villa-1").json()
    assert fetched["title"] == "Sea Villa"
    assert fetched["pricingTiers"][0]["unitNumbers"] == "101-110"
    assert "_id" not in fetched

    resp = client.put("/api/properties/villa-1", json={"price": "2.7 Cr"}, headers=auth_headers)
    assert resp.json() == {"success": True}
    fetched = client.get("/api/properties/villa-1").json()
    assert fetched["price"] == "2.7 Cr"
    assert fetched["title"] == "Sea Villa"

    assert client.delete("/api/properties/villa-1", headers=auth_headers).json() == {"success": True}
    assert client.get("/api/properties/villa-1").status_code == 404


def test_property_not_found(client):
    resp = client.get("/api/properties/missing")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Property not found"}


def test_property_fractional_numbers(client, auth_headers):
    body = {"id": "p1", "beds": 3, "baths": 2.5, "sqft": 1450.75}
    resp = client.post("/api/properties", json=body, headers=auth_headers)
    assert resp.status_code == 200
    fetched = client.get("/api/properties/p1").json()
    assert fetched["beds"] == 3
    assert fetched["baths"] == 2.5
    assert fetched["sqft"] == 1450.75


def test_property_update_reports_success_without_match(client, auth_headers):
    resp = client.put("/api/properties/ghost", json={"title": "x"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get("/api/properties").json() == []


def test_property_create_without_token_does_not_write(client, store):
    resp = client.post("/api/properties", json={"id": "p1", "title": "x"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "No token provided"}
    assert client.get("/api/properties").json() == []


def test_protected_routes_reject_missing_token():
    store = AsyncMock(spec=RecordStore)
    client = TestClient(create_app(settings=make_settings(), store=store))
    requests = [
        ("post", "/api/properties"),
        ("put", "/api/properties/1"),
        ("delete", "/api/properties/1"),
        ("post", "/api/team"),
        ("put", "/api/team/1"),
        ("delete", "/api/team/1"),
    ]
    for method, path in requests:
        kwargs = {} if method == "delete" else {"json": {"name": "x"}}
        resp = getattr(client, method)(path, **kwargs)
        assert resp.status_code == 401, path
    assert client.get("/api/leads").status_code == 401
    store.insert.assert_not_called()
    store.update.assert_not_called()
    store.delete.assert_not_called()
    store.find_all.assert_not_called()


def test_invalid_token_rejected(client):
    resp = client.delete("/api/properties/1", headers={"Authorization": "Bearer forged"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid or expired token"}


def test_delete_twice_reports_success(client, auth_headers):
    client.post("/api/properties", json={"id": "p1"}, headers=auth_headers)
    for _ in range(2):
        resp = client.delete("/api/properties/p1", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"success": True}


# =============================================================================
# Team
# =============================================================================


def test_team_round_trip(client, auth_headers):
    member = {"id": "t-1", "name": "Alice", "role": "Agent", "image": "a.jpg"}
    created = client.post("/api/team", json=member, headers=auth_headers).json()["data"]

    team = client.get("/api/team").json()
    assert len(team) == 1
    assert team[0]["id"] == created["id"] == "t-1"
    for key in ("name", "role", "image"):
        assert team[0][key] == member[key]


def test_team_member_created_without_id(client, auth_headers):
    member = {"name": "Alice", "role": "Agent", "image": "a.jpg"}
    created = client.post("/api/team", json=member, headers=auth_headers).json()["data"]
    assert created["id"]

    team = client.get("/api/team").json()
    assert team[0]["id"] == created["id"]

    resp = client.put(f"/api/team/{created['id']}", json={"role": "Broker"}, headers=auth_headers)
    assert resp.json()["data"]["role"] == "Broker"
    client.delete(f"/api/team/{created['id']}", headers=auth_headers)
    assert client.get("/api/team").json() == []


def test_team_update_returns_updated_member(client, auth_headers):
    client.post("/api/team", json={"id": "t-1", "name": "Alice", "role": "Agent"}, headers=auth_headers)
    resp = client.put("/api/team/t-1", json={"role": "Director"}, headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["role"] == "Director"
    assert data["name"] == "Alice"


def test_team_update_without_token_then_missing_member(client, auth_headers):
    resp = client.put("/api/team/42", json={"name": "x"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "No token provided"}

    resp = client.put("/api/team/42", json={"name": "x"}, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Team member not found"}


def test_team_numeric_id_is_stored_as_text(client, auth_headers):
    client.post("/api/team", json={"id": 7, "name": "Raj"}, headers=auth_headers)
    assert client.get("/api/team/7").json()["name"] == "Raj"


# =============================================================================
# Contact
# =============================================================================


def test_contact_submission_is_public(client):
    resp = client.post("/api/contact", json={"name": "Bob", "email": "b@x.com", "message": "Hi"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["id"]
    assert data["name"] == "Bob"
    assert data["email"] == "b@x.com"
    assert data["message"] == "Hi"
    assert data["created_at"]

    contacts = client.get("/api/contact").json()
    assert contacts[0]["id"] == data["id"]


def test_contacts_listed_newest_first(client):
    client.post("/api/contact", json={"name": "old", "created_at": "2025-01-01T00:00:00Z"})
    client.post("/api/contact", json={"name": "newest", "created_at": "2025-03-01T00:00:00Z"})
    client.post("/api/contact", json={"name": "middle", "created_at": "2025-02-01T00:00:00Z"})
    names = [c["name"] for c in client.get("/api/contact").json()]
    assert names == ["newest", "middle", "old"]


def test_contacts_with_naive_and_generated_timestamps(client):
    client.post("/api/contact", json={"name": "old", "created_at": "2025-01-01T00:00:00"})
    client.post("/api/contact", json={"name": "now"})
    resp = client.get("/api/contact")
    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["now", "old"]


# =============================================================================
# Leads
# =============================================================================


def test_lead_submission_public_listing_protected(client, auth_headers):
    resp = client.post("/api/leads", json={"name": "Priya", "phone": "99999", "propertyId": "villa-1"})
    assert resp.status_code == 200
    lead_id = resp.json()["data"]["id"]
    assert lead_id

    assert client.get("/api/leads").status_code == 401
    leads = client.get("/api/leads", headers=auth_headers).json()
    assert [lead["id"] for lead in leads] == [lead_id]


# =============================================================================
# Error mapping
# =============================================================================


def test_store_failure_returns_static_message(settings):
    store = AsyncMock(spec=RecordStore)
    store.find_all.side_effect = StoreError("auth failed for user mongo-admin", "find_all", "teammembers")
    client = TestClient(create_app(settings=settings, store=store))
    resp = client.get("/api/team")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch team"}


def test_unexpected_exception_hidden(settings):
    store = AsyncMock(spec=RecordStore)
    store.find_all.side_effect = RuntimeError("secret internals")
    client = TestClient(create_app(settings=settings, store=store), raise_server_exceptions=False)
    resp = client.get("/api/properties")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_malformed_body_returns_400(client):
    resp = client.post(
        "/api/contact", content=b"not json", headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request body"}


def test_unparsable_body_without_token_gets_401(client):
    headers = {"Content-Type": "application/json"}
    for method, path in [("post", "/api/properties"), ("put", "/api/properties/1"),
                         ("post", "/api/team"), ("put", "/api/team/1")]:
        resp = getattr(client, method)(path, content=b"{bad", headers=headers)
        assert resp.status_code == 401, path
        assert resp.json() == {"error": "No token provided"}


def test_unparsable_body_with_token_gets_400(client, auth_headers):
    headers = {"Content-Type": "application/json", **auth_headers}
    resp = client.post("/api/properties", content=b"{bad", headers=headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request body"}

    resp = client.put("/api/team/1", json=["not", "an", "object"], headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request body"}
    assert client.get("/api/properties").json() == []


def test_services_are_not_exposed_on_app_state(settings, store):
    app = create_app(settings=settings, store=store)
    for name in ("settings", "store", "token_service"):
        assert not hasattr(app.state, name)

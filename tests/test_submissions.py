from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from fitlead.db.session import Base, engine, gateway
from fitlead.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def admin_client() -> TestClient:
    client = TestClient(app)
    r = client.post("/api/auth/register", json={"email": "admin@example.com", "password": "secretpass"})
    assert r.json()["user"]["role"] == "admin"
    return client


def user_client() -> TestClient:
    client = TestClient(app)
    r = client.post("/api/auth/register", json={"email": "user@example.com", "password": "secretpass"})
    assert r.json()["user"]["role"] == "user"
    return client


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def submit(client: TestClient, **fields):
    body = {"name": "Anna", "phone": "123456789", "goal": "lose weight"}
    body.update(fields)
    return client.post("/api/submissions", json=body)


def test_public_create_and_admin_get():
    admin = admin_client()

    r = submit(TestClient(app), email="anna@example.com", trainer="Max", plan="monthly")
    assert r.status_code == 200
    created = r.json()["submission"]
    assert created["id"] > 0
    assert created["status"] == "new"
    assert created["message"] is None
    assert created["intent"] is None
    assert created["created_at"] and created["updated_at"]

    got = admin.get(f"/api/submissions/{created['id']}")
    assert got.status_code == 200
    assert got.json()["submission"] == created


def test_create_requires_name_phone_goal():
    client = TestClient(app)
    for missing in ("name", "phone", "goal"):
        r = submit(client, **{missing: ""})
        assert r.status_code == 400
        assert r.json() == {"error": "Required fields: name, phone, goal"}

    r = client.post("/api/submissions", json={"name": "Anna", "phone": "1"})
    assert r.status_code == 400
    assert gateway.fetch_one("SELECT COUNT(*) AS n FROM submissions")["n"] == 0


def test_list_is_newest_first():
    admin = admin_client()
    ids = [submit(admin, name=f"Lead {i}").json()["submission"]["id"] for i in range(3)]

    r = admin.get("/api/submissions")
    assert r.status_code == 200
    assert [s["id"] for s in r.json()["submissions"]] == list(reversed(ids))


def test_get_unknown_is_404():
    admin = admin_client()
    r = admin.get("/api/submissions/999")
    assert r.status_code == 404
    assert r.json() == {"error": "Not found"}


def test_update_status_only():
    admin = admin_client()
    created = submit(admin).json()["submission"]

    r = admin.put(f"/api/submissions/{created['id']}", json={"status": "contacted", "unknown": "ignored"})
    assert r.status_code == 200
    updated = r.json()["submission"]
    assert updated["status"] == "contacted"
    for field in ("name", "phone", "email", "goal", "message", "trainer", "plan", "intent", "created_at"):
        assert updated[field] == created[field]
    assert parse_ts(updated["updated_at"]) > parse_ts(created["updated_at"])


def test_update_rejects_empty_patch_and_unknown_id():
    admin = admin_client()
    created = submit(admin).json()["submission"]

    r = admin.put(f"/api/submissions/{created['id']}", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "No fields to update"}

    r = admin.put(f"/api/submissions/{created['id']}", json={"unknown": "x"})
    assert r.status_code == 400

    r = admin.put("/api/submissions/999", json={"status": "closed"})
    assert r.status_code == 404


def test_delete_is_idempotent():
    admin = admin_client()
    created = submit(admin).json()["submission"]

    r = admin.delete(f"/api/submissions/{created['id']}")
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert admin.get(f"/api/submissions/{created['id']}").status_code == 404

    r = admin.delete(f"/api/submissions/{created['id']}")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_admin_routes_forbid_anonymous_and_plain_users():
    admin_client()
    created = submit(TestClient(app)).json()["submission"]
    sid = created["id"]

    for client in (TestClient(app), user_client()):
        assert client.get("/api/submissions").status_code == 403
        assert client.get(f"/api/submissions/{sid}").status_code == 403
        r = client.put(f"/api/submissions/{sid}", json={"status": "hacked"})
        assert r.status_code == 403
        assert r.json() == {"error": "Forbidden"}
        assert client.delete(f"/api/submissions/{sid}").status_code == 403
        assert client.get("/api/visits").status_code == 403

    row = gateway.fetch_one("SELECT status FROM submissions WHERE id = :id", {"id": sid})
    assert row == {"status": "new"}


def test_logout_revokes_admin_access():
    admin = admin_client()
    assert admin.get("/api/submissions").status_code == 200
    admin.post("/api/auth/logout")
    assert admin.get("/api/submissions").status_code == 403

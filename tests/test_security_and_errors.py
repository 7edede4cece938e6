import dataclasses
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, update

from fitlead.core.settings import settings
from fitlead.db.gateway import Gateway
from fitlead.db.session import Base, engine, gateway, get_gateway
from fitlead.main import app
from fitlead.models.auth_session import AuthSession
from fitlead.schemas.auth import SessionUser
from fitlead.security.session_store import DatabaseSessionStore, InMemorySessionStore, build_session_store
from fitlead.services.identity import bootstrap_admin, login


def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean():
    reset_db()
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


def broken_gateway() -> Gateway:
    return Gateway(create_engine("sqlite:////nonexistent-dir/fitlead.db"))


def test_storage_failure_is_a_generic_500():
    app.dependency_overrides[get_gateway] = broken_gateway
    client = TestClient(app)

    r = client.post("/api/submissions", json={"name": "A", "phone": "1", "goal": "g"})
    assert r.status_code == 500
    assert r.json() == {"error": "Server error"}


def test_non_json_body_is_a_400():
    client = TestClient(app)
    r = client.post("/api/submissions", content="name=A", headers={"content-type": "text/plain"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_expired_session_is_dropped():
    store = DatabaseSessionStore(gateway)
    bootstrap_admin(gateway, "boss@example.com", "secretpass")
    user, record = login(gateway, store, "boss@example.com", "secretpass")
    assert store.get(record.id) is not None

    table = AuthSession.__table__
    past = datetime.now(tz=timezone.utc) - timedelta(minutes=1)
    gateway.execute(update(table).values(expires_at=past).where(table.c.id == record.id))

    assert store.get(record.id) is None
    assert gateway.fetch_one("SELECT id FROM auth_sessions WHERE id = :id", {"id": record.id}) is None


def test_purge_expired_sessions():
    store = DatabaseSessionStore(gateway)
    bootstrap_admin(gateway, "boss@example.com", "secretpass")
    _, stale = login(gateway, store, "boss@example.com", "secretpass")
    _, fresh = login(gateway, store, "boss@example.com", "secretpass")

    table = AuthSession.__table__
    past = datetime.now(tz=timezone.utc) - timedelta(seconds=1)
    gateway.execute(update(table).values(expires_at=past).where(table.c.id == stale.id))

    assert store.purge_expired() == 1
    assert store.get(fresh.id) is not None


def test_in_memory_store_lifecycle():
    store = build_session_store("memory", gateway)
    assert isinstance(store, InMemorySessionStore)

    record = store.create(SessionUser(id=1, email="a@example.com", role="admin"))
    assert store.get(record.id).user.email == "a@example.com"
    store.destroy(record.id)
    store.destroy(record.id)
    assert store.get(record.id) is None

    # Nothing is shared with a new instance, as after a restart
    other = store.create(SessionUser(id=1, email="a@example.com", role="admin"))
    assert InMemorySessionStore().get(other.id) is None


def test_unknown_session_backend_is_rejected():
    with pytest.raises(ValueError):
        build_session_store("redis", gateway)


def test_bootstrap_admin_is_created_once_and_can_log_in():
    assert bootstrap_admin(gateway, "boss@example.com", "secretpass") is True
    assert bootstrap_admin(gateway, "boss@example.com", "other") is False
    assert bootstrap_admin(gateway, None, None) is False

    client = TestClient(app)
    r = client.post("/api/auth/login", json={"email": "boss@example.com", "password": "secretpass"})
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "admin"
    assert client.get("/api/submissions").status_code == 200

    # An admin already exists, so self-registration yields a plain user
    r = TestClient(app).post("/api/auth/register", json={"email": "first@example.com", "password": "x"})
    assert r.json()["user"]["role"] == "user"


def test_session_cookie_attributes():
    client = TestClient(app)
    r = client.post("/api/auth/register", json={"email": "a@example.com", "password": "secretpass"})
    cookie = r.headers["set-cookie"].lower()
    assert cookie.startswith(f"{settings.session_cookie_name}=")
    assert "httponly" in cookie
    assert f"max-age={settings.session_ttl_hours * 3600}" in cookie

    r = client.post("/api/auth/logout")
    assert f"{settings.session_cookie_name}=" in r.headers["set-cookie"]


def test_in_memory_store_expiry_and_purge():
    store = InMemorySessionStore()
    stale = store.create(SessionUser(id=1, email="a@example.com", role="admin"))
    gone = store.create(SessionUser(id=2, email="b@example.com", role="user"))
    fresh = store.create(SessionUser(id=3, email="c@example.com", role="user"))

    past = datetime.now(tz=timezone.utc) - timedelta(seconds=1)
    for record in (stale, gone):
        store._records[record.id] = dataclasses.replace(record, expires_at=past)

    assert store.get(gone.id) is None
    assert store.purge_expired() == 1
    assert store.get(stale.id) is None
    assert store.get(fresh.id).user.email == "c@example.com"


def test_startup_creates_tables_purges_sessions_and_bootstraps_admin(monkeypatch):
    store = DatabaseSessionStore(gateway)
    stale = store.create(SessionUser(id=99, email="old@example.com", role="user"))
    table = AuthSession.__table__
    past = datetime.now(tz=timezone.utc) - timedelta(minutes=1)
    gateway.execute(update(table).values(expires_at=past).where(table.c.id == stale.id))

    monkeypatch.setattr(settings, "admin_email", "boss@example.com")
    monkeypatch.setattr(settings, "admin_password", "secretpass")

    with TestClient(app) as client:
        assert gateway.fetch_one("SELECT id FROM auth_sessions WHERE id = :id", {"id": stale.id}) is None
        r = client.post("/api/auth/login", json={"email": "boss@example.com", "password": "secretpass"})
        assert r.status_code == 200
        assert r.json()["user"]["role"] == "admin"

    # Running startup again does not duplicate the admin
    with TestClient(app):
        pass
    assert gateway.fetch_one("SELECT COUNT(*) AS n FROM users")["n"] == 1


def test_startup_creates_missing_tables():
    Base.metadata.drop_all(bind=engine)
    with TestClient(app) as client:
        assert client.post("/api/submissions", json={"name": "A", "phone": "1", "goal": "g"}).status_code == 200

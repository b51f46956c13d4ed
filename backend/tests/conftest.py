import os

# Settings are read once at import: keep the app engine off the real database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.pop("REDIS_URL", None)

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from agenda.database import get_db, init_db, make_engine, make_session_factory
from agenda.models import Availability, EventTypes, Tenants


WEDNESDAY = "2024-06-05"  # weekday 3, America/Caracas is UTC-4 all year


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'agenda.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tenant(db) -> Tenants:
    obj = Tenants(slug="acme", name="Acme Studio", email="owner@acme.test", timezone="America/Caracas")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def other_tenant(db) -> Tenants:
    obj = Tenants(slug="globex", name="Globex", timezone="America/Caracas")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def event_type(db, tenant) -> EventTypes:
    """30 minutes + 10 minutes buffer."""
    obj = EventTypes(
        tenant_id=tenant.id,
        slug="intro",
        name="Intro call",
        duration_min=30,
        buffer_min=10,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def add_availability(db, tenant_id: int, weekday: int, start_min: int, end_min: int) -> None:
    db.add(Availability(tenant_id=tenant_id, weekday=weekday, start_min=start_min, end_min=end_min))
    db.commit()


@pytest.fixture
def wednesday_morning(db, tenant):
    """Wed 09:00-10:00 local."""
    add_availability(db, tenant.id, 3, 540, 600)


@pytest.fixture
def calendar_sync(monkeypatch):
    mock = Mock(return_value={"ok": True})
    monkeypatch.setattr("agenda.routers.deps.sync_booking_to_google", mock)
    return mock


@pytest.fixture
def client(session_factory, calendar_sync):
    from agenda.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()

import os

# Point the app's own engine at SQLite before app modules read settings.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient  # fake http client that calls FastAPI routes without a real server
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.api.routes import health
from app.core.security import create_access_token
from app.db import bootstrap
from app.db.base import Base
from app.main import app
from app.models import ClassGroup, Location, School, Subject, Teacher, TimeSlot, User, UserRole

SCHOOL_ID = "school-1"
OTHER_SCHOOL_ID = "school-2"
MONDAY = "2024-06-03"
TUESDAY = "2024-06-04"


@pytest.fixture()
def engine():
    test_engine = create_engine(  # isolated in-memory DB shared by the app and the test
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory, engine, monkeypatch):
    # Startup schema check and readiness probe inspect the same database the routes use.
    monkeypatch.setattr(bootstrap, "engine", engine)
    monkeypatch.setattr(health, "engine", engine)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def seed(db_session):
    """One configured school (term 2024/1) with master data and users, plus a second school."""
    db_session.add_all(
        [
            School(id=SCHOOL_ID, name="Riverside School", academic_year="2024", current_semester=1),
            School(id=OTHER_SCHOOL_ID, name="Hillside School", academic_year="2024", current_semester=1),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            Teacher(id="T1", school_id=SCHOOL_ID, name="Anong"),
            Teacher(id="T2", school_id=SCHOOL_ID, name="Boonmee"),
            Teacher(id="T3", school_id=SCHOOL_ID, name="Chalerm"),
            Teacher(id="T4", school_id=SCHOOL_ID, name="Duangjai"),
            Teacher(id="T9", school_id=SCHOOL_ID, name="Zed Retired", is_active=False),
            ClassGroup(id="CG1", school_id=SCHOOL_ID, name="M.1/1", grade_level="M.1"),
            ClassGroup(id="CG2", school_id=SCHOOL_ID, name="M.1/2", grade_level="M.1"),
            ClassGroup(id="CG3", school_id=SCHOOL_ID, name="M.2/1", grade_level="M.2"),
            Location(id="L1", school_id=SCHOOL_ID, name="Science Lab"),
            Location(id="L2", school_id=SCHOOL_ID, name="Room 201"),
            TimeSlot(id="P1", school_id=SCHOOL_ID, period=1, start_time="08:30", end_time="09:20"),
            TimeSlot(id="P2", school_id=SCHOOL_ID, period=2, start_time="09:20", end_time="10:10"),
            TimeSlot(id="P3", school_id=SCHOOL_ID, period=3, start_time="10:10", end_time="11:00"),
            Subject(code="MATH101", school_id=SCHOOL_ID, name="Mathematics"),
            Subject(code="SCI101", school_id=SCHOOL_ID, name="Science"),
            User(id="admin-1", name="School Admin", role=UserRole.admin, school_id=SCHOOL_ID),
            User(id="viewer-1", name="School Viewer", role=UserRole.viewer, school_id=SCHOOL_ID),
            User(id="admin-2", name="Other Admin", role=UserRole.admin, school_id=OTHER_SCHOOL_ID),
            User(id="sysadmin", name="System Admin", role=UserRole.super, school_id=None),
        ]
    )
    db_session.commit()
    return SimpleNamespace(
        school_id=SCHOOL_ID,
        base=f"/api/schools/{SCHOOL_ID}",
        admin=auth_headers("admin-1"),
        viewer=auth_headers("viewer-1"),
        other_admin=auth_headers("admin-2"),
        sysadmin=auth_headers("sysadmin"),
    )


def entry_payload(**overrides) -> dict:
    payload = {
        "day": "Monday",
        "timeSlotId": "P1",
        "classGroupId": None,
        "subjectCode": "MATH101",
        "customActivity": None,
        "teacherIds": [],
        "locationId": None,
    }
    payload.update(overrides)
    return payload


def create_entry(client, seed, **overrides) -> dict:
    response = client.post(f"{seed.base}/schedule", json=entry_payload(**overrides), headers=seed.admin)
    assert response.status_code == 201, response.text
    return response.json()["item"]

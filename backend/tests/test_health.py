from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from app.api.routes import health


def test_health_endpoints(client):
    live = client.get("/api/health")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    payload = ready.json()
    assert payload["status"] == "ok"
    assert payload["database"]["schema_ok"] is True
    assert payload["database"]["missing_tables"] == []


def test_readiness_reports_schema_gaps(client, monkeypatch):
    stale = create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    with stale.begin() as connection:
        connection.execute(text("CREATE TABLE schools (id VARCHAR(36) PRIMARY KEY, academic_year VARCHAR(20))"))
    monkeypatch.setattr(health, "engine", stale)

    ready = client.get("/api/health/ready")
    assert ready.status_code == 503
    database = ready.json()["database"]
    assert database["missing_columns"] == {"schools": ["current_semester"]}
    assert set(database["missing_tables"]) == {"schedule_entries", "substitutions", "attendance_logs"}

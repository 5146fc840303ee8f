"""Root, health, readiness and metrics endpoints plus the response headers every call carries."""

from unittest.mock import patch

from app.middleware.prometheus_middleware import normalize_endpoint
from app.routes.v1 import instructors as instructors_routes


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["docs"] == "/docs"
    assert body["version"] == "1.0.0"


def test_health(client):
    for path in ("/health", "/api/health"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["timestamp"].endswith("Z")
        assert response.headers["Cache-Control"] == "no-store"


def test_ready(client):
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_reports_database_failure(client, db):
    with patch.object(db, "execute", side_effect=RuntimeError("database down")):
        response = client.get("/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "db_not_ready"}


def test_request_ids(client):
    response = client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Instance-ID"]
    assert response.headers["X-Process-Time"].endswith("ms")


def test_generated_request_id_is_in_error_body(client):
    response = client.get("/api/v1/students/missing")

    assert response.status_code == 404
    assert response.json()["request_id"] == response.headers["X-Request-ID"]


def test_prometheus_metrics(client):
    client.get("/api/v1/instructors")

    response = client.get("/metrics/prometheus", params={"refresh": "1"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "swimschool_http_requests_total" in response.text
    assert 'endpoint="/api/v1/instructors"' in response.text


def test_unexpected_errors_are_wrapped(client):
    with patch.object(
        instructors_routes.InstructorService,
        "get_all_instructors",
        side_effect=RuntimeError("boom"),
    ):
        response = client.get("/api/v1/instructors")

    assert response.status_code == 500
    assert response.json()["detail"] == "An error occurred during get all instructors"


def test_normalize_endpoint():
    assert normalize_endpoint("/api/v1/lessons/01K2K8CVN3A55280PFKJD9YHKV") == "/api/v1/lessons/:id"
    assert normalize_endpoint("/api/v1/students/0501234567/lessons") == "/api/v1/students/:id/lessons"
    assert normalize_endpoint("/api/v1/instructors/availability") == "/api/v1/instructors/availability"

# backend/tests/routes/test_app.py
"""Application shell: health, metrics, request ids and error envelopes."""

from tests._helpers import MENTEE_ID, UNKNOWN_ID, auth_headers


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_metrics_exposes_prometheus_text(client):
    client.get("/api/v1/sessions", headers=auth_headers(MENTEE_ID))
    response = client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "mentorship_http_requests_total" in response.text


def test_request_id_is_generated_and_echoed(client):
    generated = client.get("/api/v1/sessions", headers=auth_headers(MENTEE_ID))
    assert generated.headers.get("X-Request-ID")

    echoed = client.get(
        "/api/v1/sessions", headers={**auth_headers(MENTEE_ID), "X-Request-ID": "req-123"}
    )
    assert echoed.headers["X-Request-ID"] == "req-123"


def test_problem_body_carries_request_id(client):
    response = client.get(
        f"/api/v1/sessions/{UNKNOWN_ID}",
        headers={**auth_headers(MENTEE_ID), "X-Request-ID": "req-404"},
    )
    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "SESSION_NOT_FOUND"
    assert body["request_id"] == "req-404"
    assert body["instance"] == f"/api/v1/sessions/{UNKNOWN_ID}"


def test_blank_identity_header_is_unauthenticated(client):
    response = client.get("/api/v1/sessions", headers={"X-User-Id": "   "})
    assert response.status_code == 401

"""Tests for infrastructure endpoints."""

from marketplace.core.constants import API_VERSION


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "marketplace-api"
    assert data["version"] == API_VERSION
    assert data["timestamp"].endswith("Z")


def test_health_lite(client):
    response = client.get("/api/v1/health/lite")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_prometheus_exposes_booking_metrics(client, marketplace, payload_for):
    client.post("/api/v1/bookings", json=payload_for(marketplace))

    response = client.get("/metrics/prometheus")

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
    body = response.text
    assert "marketplace_bookings_created_total" in body
    assert "marketplace_service_operations_total" in body


def test_unknown_route_uses_problem_envelope(client):
    response = client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["title"] == "Not Found"

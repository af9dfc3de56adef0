"""Sanity tests for the health endpoint."""

from fastapi.testclient import TestClient

from imagehost.api.routes import HEALTH_TEXT


def test_health_returns_text(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == HEALTH_TEXT
    assert response.headers["content-type"].startswith("text/plain")


def test_health_ignores_origin(client: TestClient) -> None:
    response = client.get("/", headers={"Origin": "http://evil.test"})

    assert response.status_code == 200


def test_metrics_exposes_counters(client: TestClient) -> None:
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "image_uploads_total" in response.text

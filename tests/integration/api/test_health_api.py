"""Integration tests for the health probes and app wiring."""

from fastapi.testclient import TestClient


def test_liveness(client: TestClient) -> None:
    response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_readiness_local(client: TestClient) -> None:
    body = client.get("/health/ready").json()

    assert body["status"] == "ready"
    assert body["object_storage"] is False
    assert body["checks"]["database"]["status"] == "healthy"
    assert body["checks"]["uploads"]["status"] == "healthy"


def test_readiness_reports_object_storage(remote_client: TestClient) -> None:
    assert remote_client.get("/health/ready").json()["object_storage"] is True


def test_correlation_id_is_echoed(client: TestClient) -> None:
    response = client.get("/api/tracks", headers={"X-Correlation-ID": "req-123"})

    assert response.headers["X-Correlation-ID"] == "req-123"


def test_unknown_route_uses_json(client: TestClient) -> None:
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_missing_upload_file_uses_json(client: TestClient) -> None:
    response = client.get("/uploads/123_missing.mp3")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"

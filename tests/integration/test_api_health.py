from fastapi.testclient import TestClient

from src.app import app


client = TestClient(app)


def test_health() -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "food_delivery_backend"}


def test_unknown_route_is_not_found() -> None:
    assert client.post("/api/notifications/unknown", json={}).status_code == 404

from fastapi.testclient import TestClient


def test_health_check(client: TestClient):
    response = client.get("/api/utils/health-check/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_unknown_route_uses_error_envelope(client: TestClient):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found"}

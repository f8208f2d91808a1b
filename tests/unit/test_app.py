def test_root_returns_message(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Org Chart API"


def test_health_returns_status(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] in ("healthy", "degraded")
    assert "version" in data
    assert data["version"] == "0.1.0"
    assert "services" in data


def test_openapi_lists_hierarchy_route(client):
    response = client.get("/openapi.json")
    assert response.status_code == 200
    assert "/api/v1/employees/{employee_id}/hierarchy" in response.json()["paths"]

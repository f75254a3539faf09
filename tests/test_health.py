from app.core.config import settings

API = settings.API_V1_STR


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["status"] in ("healthy", "degraded")


def test_unknown_route_envelope(client):
    response = client.get(f"{API}/nowhere")
    assert response.status_code == 404
    assert response.json() == {
        "ok": False,
        "message": "Route not found",
        "method": "GET",
        "path": f"{API}/nowhere",
    }


def test_non_numeric_id_is_a_validation_error(client):
    response = client.get(f"{API}/properties/abc")
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "property_id"

def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Image Queue API"}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_openapi_under_api_prefix(client):
    response = client.get("/api/openapi.json")
    assert response.status_code == 200
    assert "/api/airtable/queue/add" in response.json()["paths"]


def test_malformed_json_is_bad_request(client):
    response = client.post(
        "/api/airtable/queue/status", content="{not json", headers={"content-type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}

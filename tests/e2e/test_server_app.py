from fastapi.testclient import TestClient

import api_server


def test_app_serves_hello_with_cors():
    client = TestClient(api_server.create_app())
    response = client.get("/api/hello", headers={"Origin": "http://localhost:3000"})
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_preflight_for_upload():
    client = TestClient(api_server.create_app())
    response = client.options(
        "/api/check-english",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert "POST" in response.headers["access-control-allow-methods"]

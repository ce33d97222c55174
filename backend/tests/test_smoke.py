"""Minimal smoke tests.

Proves the app boots, the webhook receiver mirrors an event, and the REST
collections respond.
"""

from fastapi import FastAPI
from starlette.testclient import TestClient

from app.main import app
from tests.conftest import clerk_event, sign_webhook, user_data


def test_app_starts():
    """The FastAPI app object can be imported and is a FastAPI instance."""
    assert isinstance(app, FastAPI)


def test_health_endpoint(client: TestClient):
    """GET / returns 200 with app info."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "app" in data
    assert "version" in data
    assert data["status"] == "running"


def test_openapi_lists_routes(client: TestClient):
    paths = client.get("/openapi.json").json()["paths"]
    assert "/api/webhooks/clerk" in paths
    assert "/api/auth/verify-email" in paths
    assert "/v1/users/" in paths
    assert "/v1/payment_attempts/" in paths


def test_webhook_to_rest_round_trip(client: TestClient, test_settings):
    """A signed user.created delivery becomes visible through /v1/users/."""
    body, headers = sign_webhook(clerk_event("user.created", user_data()))
    assert client.post("/api/webhooks/clerk", content=body, headers=headers).status_code == 200

    users = client.get("/v1/users/").json()
    assert [u["external_id"] for u in users] == ["user_1"]


def test_create_user(authed_client: TestClient):
    """POST /v1/users/ creates a user."""
    response = authed_client.post(
        "/v1/users/",
        json={"external_id": "smoke-user-001", "email": "smoke@example.com"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["external_id"] == "smoke-user-001"
    assert "id" in data


def test_cors_preflight(client: TestClient):
    response = client.options(
        "/v1/users/",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200

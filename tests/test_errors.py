"""
Tests for health checks and the shared error envelope.
"""
from crosscareers.core import config
from crosscareers.core.errors import BadRequest, _error_body


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "CrossCareers API running"


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert "timestamp" in body


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}


def test_stack_only_in_development(client, headers, monkeypatch):
    monkeypatch.setattr(config, "ENVIRONMENT", "development")
    response = client.get("/resume/999", headers=headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Resume not found"
    assert "stack" in response.json()

    monkeypatch.setattr(config, "ENVIRONMENT", "production")
    response = client.get("/resume/999", headers=headers)
    assert "stack" not in response.json()


def test_error_body_details():
    try:
        raise BadRequest("Nope", details={"field": "x"})
    except BadRequest as e:
        body = _error_body(e.message, e.details)
    assert body == {"success": False, "message": "Nope", "details": {"field": "x"}}


def test_invalid_bearer_token(client):
    response = client.get("/auth/get-profile", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["success"] is False

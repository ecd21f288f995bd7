from __future__ import annotations

from onboarding.core.config import settings


def test_health_returns_status_and_services(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] in ("healthy", "degraded")
    assert "version" in data
    assert set(data["services"]) == {"azure_functions", "directory_search", "azure_ad"}


def test_health_without_functions_is_degraded(client, monkeypatch):
    monkeypatch.setattr(settings, "AZURE_FUNCTION_BASE_URL", "")
    monkeypatch.setattr(settings, "DIRECTORY_SEARCH_URL", "")

    data = client.get("/health").json()

    assert data["status"] == "degraded"
    assert data["services"]["azure_functions"] == "not_configured"
    assert data["services"]["directory_search"] == "not_configured"
    assert data["services"]["azure_ad"] == "configured"


def test_health_with_functions_is_healthy(client, function_settings):
    data = client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["services"]["azure_functions"] == "configured"
    assert data["services"]["directory_search"] == "configured"


def test_readiness_reports_initialized_clients(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["ready"] is True


def test_health_protected_requires_auth(client):
    response = client.get("/health/protected")
    assert response.status_code == 401


def test_health_protected_with_auth(authenticated_client):
    response = authenticated_client.get("/health/protected")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "user" in data

from __future__ import annotations

import asyncio
import json

import google.auth
import pytest
import structlog
from fastapi.testclient import TestClient

from agent_router.app import create_app
from agent_router.core.auth import SharedSecretGatekeeper
from agent_router.core.logging import bind_request_context
from agent_router.core.registry import Registry, RegistryError
from agent_router.core.settings import ConfigurationError, Settings, get_settings, reset_settings
from agent_router.infrastructure import FirestoreDocumentStore, WorkflowExecutionsClient

from conftest import REGISTRY_DATA


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MOCK_GCP_SERVICES", "true")
    monkeypatch.setenv("GOVERNOR_KEY", "from-env")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("LOG_FORMAT", "json")

    settings = Settings(_env_file=None)

    assert settings.mock_gcp_services is True
    assert settings.governor_key == "from-env"
    assert settings.port == 9000
    assert settings.log_format == "json"
    assert settings.firestore_collection == "executions"
    assert settings.cors_allow_origin == "http://localhost:3000"


def test_get_settings_is_cached_until_reset(monkeypatch):
    reset_settings()
    first = get_settings()
    assert get_settings() is first
    reset_settings()
    assert get_settings() is not first
    reset_settings()


@pytest.mark.parametrize(("key", "allowed"), [("s3cret", True), ("S3CRET", False), ("", False), (None, False)])
def test_gatekeeper_requires_exact_match(key, allowed):
    assert SharedSecretGatekeeper("s3cret").is_authorized(key) is allowed


def test_app_loads_registry_file_in_mock_mode(tmp_path):
    path = tmp_path / "registry.json"
    path.write_text(json.dumps(REGISTRY_DATA), encoding="utf-8")
    settings = Settings(_env_file=None, mock_gcp_services=True, governor_key="k", registry_path=path)

    with TestClient(create_app(settings)) as client:
        headers = {"X-GOVERNOR-KEY": "k"}
        body = {"project_slot": 3, "agent_id": "register-agent", "mode": "async", "payload": {}}
        response = client.post("/v1/route", json=body, headers=headers)
        assert response.status_code == 200
        status = client.get(response.json()["status_url"], headers=headers).json()

    assert status["status"] == "ACTIVE"


def test_app_refuses_to_start_without_registry(tmp_path):
    settings = Settings(_env_file=None, mock_gcp_services=True, registry_path=tmp_path / "missing.json")
    with pytest.raises(RegistryError):
        create_app(settings)


def test_live_mode_without_project_refuses_to_start():
    settings = Settings(
        _env_file=None,
        mock_gcp_services=False,
        google_cloud_project=None,
        gcp_access_token="tok",
    )
    with pytest.raises(ConfigurationError, match="GOOGLE_CLOUD_PROJECT"):
        create_app(settings, registry=Registry.from_mapping(REGISTRY_DATA))


def test_live_mode_uses_project_from_default_credentials(monkeypatch):
    class Credentials:
        valid = True
        token = "adc-token"

        def refresh(self, request):
            raise AssertionError("valid credentials are not refreshed")

    monkeypatch.setattr(google.auth, "default", lambda scopes=None: (Credentials(), "adc-project"))
    settings = Settings(_env_file=None, mock_gcp_services=False, google_cloud_project=None, gcp_access_token=None)

    app = create_app(settings, registry=Registry.from_mapping(REGISTRY_DATA))
    services = app.state.services
    try:
        assert isinstance(services.store, FirestoreDocumentStore)
        assert "/projects/adc-project/" in services.store._documents_url
        assert any(isinstance(resource, WorkflowExecutionsClient) for resource in services._owned)
    finally:
        asyncio.run(services.aclose())


def test_request_context_is_reset_per_request():
    structlog.contextvars.bind_contextvars(stale="value")

    request_id = bind_request_context()

    assert structlog.contextvars.get_contextvars() == {"request_id": request_id}
    assert bind_request_context("req-9") == "req-9"
    assert structlog.contextvars.get_contextvars() == {"request_id": "req-9"}
    structlog.contextvars.clear_contextvars()

from __future__ import annotations

import asyncio

import google.auth
import httpx
import pytest
from google.auth.exceptions import DefaultCredentialsError

from agent_router.core.settings import ConfigurationError
from agent_router.infrastructure import GoogleCredentialsAuth, StaticTokenAuth, resolve_gcp_auth
from agent_router.infrastructure.gcp_auth import CLOUD_PLATFORM_SCOPE


class FakeCredentials:
    """Mimics google-auth credentials: ``valid``, ``token`` and ``refresh``."""

    def __init__(self, *, valid: bool = False) -> None:
        self.valid = valid
        self.token = "initial-token" if valid else None
        self.refreshes = 0

    def refresh(self, request) -> None:
        self.refreshes += 1
        self.token = f"fresh-token-{self.refreshes}"
        self.valid = True


def _send(auth: httpx.Auth, handler) -> httpx.Response:
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await client.get("https://firestore.googleapis.com/v1/x", auth=auth)

    return asyncio.run(scenario())


def test_expired_credentials_are_refreshed_before_sending():
    credentials = FakeCredentials(valid=False)
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return httpx.Response(200)

    _send(GoogleCredentialsAuth(credentials), handler)

    assert credentials.refreshes == 1
    assert seen == ["Bearer fresh-token-1"]


def test_valid_credentials_are_reused():
    credentials = FakeCredentials(valid=True)
    auth = GoogleCredentialsAuth(credentials)
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return httpx.Response(200)

    _send(auth, handler)
    _send(auth, handler)

    assert credentials.refreshes == 0
    assert seen == ["Bearer initial-token", "Bearer initial-token"]


def test_unauthorized_response_triggers_one_refresh_and_retry():
    credentials = FakeCredentials(valid=True)
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        if request.headers["Authorization"] == "Bearer initial-token":
            return httpx.Response(401)
        return httpx.Response(200)

    response = _send(GoogleCredentialsAuth(credentials), handler)

    assert response.status_code == 200
    assert seen == ["Bearer initial-token", "Bearer fresh-token-1"]


def test_static_token_is_sent_verbatim():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return httpx.Response(200)

    _send(StaticTokenAuth("tok"), handler)
    assert seen == ["Bearer tok"]


def test_resolve_prefers_explicit_access_token(monkeypatch):
    def fail(**kwargs):
        raise AssertionError("default credentials must not be consulted")

    monkeypatch.setattr(google.auth, "default", fail)
    auth, project = resolve_gcp_auth("tok", "demo")
    assert isinstance(auth, StaticTokenAuth)
    assert project == "demo"


def test_resolve_uses_default_credentials_and_their_project(monkeypatch):
    calls = []

    def fake_default(scopes=None):
        calls.append(scopes)
        return FakeCredentials(valid=True), "detected-project"

    monkeypatch.setattr(google.auth, "default", fake_default)

    auth, project = resolve_gcp_auth(None, None)
    assert isinstance(auth, GoogleCredentialsAuth)
    assert project == "detected-project"
    assert calls == [[CLOUD_PLATFORM_SCOPE]]

    _, project = resolve_gcp_auth(None, "configured")
    assert project == "configured"


def test_missing_default_credentials_is_a_configuration_error(monkeypatch):
    def no_credentials(scopes=None):
        raise DefaultCredentialsError("Could not automatically determine credentials")

    monkeypatch.setattr(google.auth, "default", no_credentials)
    with pytest.raises(ConfigurationError, match="No Google Cloud credentials"):
        resolve_gcp_auth(None, "demo")

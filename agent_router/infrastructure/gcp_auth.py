"""Google Cloud credentials for the Firestore and Workflow Executions adapters.

Credentials come from Application Default Credentials (``google.auth.default``)
and are refreshed whenever they expire or a request comes back 401.
``GCP_ACCESS_TOKEN`` is only honoured as a fixed override for local use.
"""
from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Generator
from typing import Any

import google.auth
import httpx
from google.auth.exceptions import DefaultCredentialsError
from google.auth.transport.requests import Request as GoogleAuthRequest

from agent_router.core.logging import get_logger
from agent_router.core.settings import ConfigurationError

logger = get_logger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class StaticTokenAuth(httpx.Auth):
    """Sends a fixed bearer token; it is never refreshed."""

    def __init__(self, token: str) -> None:
        self._token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self._token}"
        yield request


class GoogleCredentialsAuth(httpx.Auth):
    """Bearer auth backed by google-auth credentials."""

    def __init__(self, credentials: Any) -> None:
        self._credentials = credentials
        self._lock = asyncio.Lock()

    def _refresh(self) -> None:
        self._credentials.refresh(GoogleAuthRequest())
        logger.info("gcp_credentials_refreshed")

    def _apply(self, request: httpx.Request) -> None:
        request.headers["Authorization"] = f"Bearer {self._credentials.token}"

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if not self._credentials.valid:
            self._refresh()
        self._apply(request)
        response = yield request
        if response.status_code == 401:
            self._refresh()
            self._apply(request)
            yield request

    async def async_auth_flow(self, request: httpx.Request) -> AsyncGenerator[httpx.Request, httpx.Response]:
        if not self._credentials.valid:
            async with self._lock:
                if not self._credentials.valid:
                    # google-auth refreshes over blocking HTTP
                    await asyncio.to_thread(self._refresh)
        self._apply(request)
        response = yield request
        if response.status_code == 401:
            # token revoked or expired early
            async with self._lock:
                await asyncio.to_thread(self._refresh)
            self._apply(request)
            yield request


def resolve_gcp_auth(access_token: str | None, project_id: str | None) -> tuple[httpx.Auth, str | None]:
    """Return request auth and the project id to use.

    ``project_id`` falls back to the project reported by the default
    credentials.  Raises :class:`ConfigurationError` when no credentials
    can be found.
    """
    if access_token:
        return StaticTokenAuth(access_token), project_id

    try:
        credentials, detected_project = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    except DefaultCredentialsError as exc:
        raise ConfigurationError(f"No Google Cloud credentials available: {exc}") from exc

    logger.info("gcp_credentials_loaded", project=project_id or detected_project)
    return GoogleCredentialsAuth(credentials), project_id or detected_project


__all__ = ["CLOUD_PLATFORM_SCOPE", "GoogleCredentialsAuth", "StaticTokenAuth", "resolve_gcp_auth"]

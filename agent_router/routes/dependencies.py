"""FastAPI dependencies: services, request ids, the shared-secret check and the body."""
from __future__ import annotations

from typing import Any

from fastapi import Depends, Header, Request

from agent_router.application import RouterServices
from agent_router.core.auth import GOVERNOR_KEY_HEADER
from agent_router.core.errors import InvalidBody, Unauthorized
from agent_router.core.logging import bind_request_context, get_logger

logger = get_logger(__name__)


def get_services(request: Request) -> RouterServices:
    """Return the services assembled by ``create_app``."""

    return request.app.state.services


async def get_request_id(request: Request) -> str:
    request_id = bind_request_context()
    request.state.request_id = request_id
    return request_id


async def require_governor_key(
    request: Request,
    request_id: str = Depends(get_request_id),
    governor_key: str | None = Header(default=None, alias=GOVERNOR_KEY_HEADER),
    services: RouterServices = Depends(get_services),
) -> None:
    if not services.gatekeeper.is_authorized(governor_key):
        logger.warning("unauthorized_access_attempt", path=request.url.path)
        raise Unauthorized()


async def json_object_body(request: Request) -> dict[str, Any]:
    """Parse the request body; anything but a JSON object is rejected.

    Declared after ``require_governor_key`` so unauthenticated requests are
    refused before their body is looked at.
    """
    try:
        body = await request.json()
    except ValueError as exc:
        logger.warning("malformed_request", path=request.url.path, error=str(exc))
        raise InvalidBody() from exc
    if not isinstance(body, dict):
        logger.warning("malformed_request", path=request.url.path, error=f"body is {type(body).__name__}")
        raise InvalidBody()
    return body

"""Error envelope and exception handlers for the HTTP layer."""
from __future__ import annotations

import uuid

from fastapi import Request
from fastapi.responses import JSONResponse

from agent_router.core.errors import RouterError
from agent_router.core.logging import get_logger

logger = get_logger(__name__)


def _request_id(req: Request) -> str:
    return getattr(req.state, "request_id", None) or str(uuid.uuid4())


def error_response(*, status_code: int, code: str, message: str, request_id: str) -> JSONResponse:
    payload = {"ok": False, "error": message, "code": code, "request_id": request_id}
    return JSONResponse(status_code=int(status_code), content=payload)


async def router_error_handler(req: Request, exc: RouterError) -> JSONResponse:
    message = exc.message
    if exc.status_code >= 500:
        logger.error("request_failed", path=req.url.path, code=exc.code, error=exc.message)
        message = f"Internal Server Error: {exc.message}"
    return error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=message,
        request_id=_request_id(req),
    )


async def unhandled_error_handler(req: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=req.url.path, error=str(exc), type=type(exc).__name__)
    return error_response(
        status_code=500,
        code="internal",
        message=f"Internal Server Error: {exc}",
        request_id=_request_id(req),
    )

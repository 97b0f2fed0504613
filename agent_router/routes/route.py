from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Response

from agent_router.application import RouterServices
from agent_router.core.auth import GOVERNOR_KEY_HEADER
from agent_router.core.logging import get_logger

from agent_router.routes.dependencies import get_request_id, get_services, json_object_body, require_governor_key

router = APIRouter(tags=["route"])
logger = get_logger(__name__)


@router.options("/route", status_code=204)
async def route_preflight(services: RouterServices = Depends(get_services)) -> Response:
    return Response(
        status_code=204,
        headers={
            "Access-Control-Allow-Origin": services.settings.cors_allow_origin,
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
            "Access-Control-Allow-Headers": f"Content-Type, {GOVERNOR_KEY_HEADER}",
        },
    )


@router.post("/route", dependencies=[Depends(require_governor_key)])
async def route_request(
    background_tasks: BackgroundTasks,
    body: dict = Depends(json_object_body),
    request_id: str = Depends(get_request_id),
    services: RouterServices = Depends(get_services),
) -> dict:
    """Validate the request, dispatch it and return the execution handle.

    Backend calls scheduled by the strategy run after this response is sent.
    """
    logger.info("incoming_route_request")
    result = await services.router.route(body, request_id, background_tasks)
    return {
        "ok": True,
        "request_id": request_id,
        "execution_id": result.execution_id,
        "project_slot": result.project_slot,
        "agent_id": result.agent_id,
        "firestore_path": result.firestore_path,
        "status_url": result.status_url,
    }

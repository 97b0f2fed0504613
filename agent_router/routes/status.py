from __future__ import annotations

from fastapi import APIRouter, Depends

from agent_router.application import RouterServices
from agent_router.core.logging import get_logger

from agent_router.routes.dependencies import get_request_id, get_services, require_governor_key

router = APIRouter(tags=["status"], dependencies=[Depends(require_governor_key)])
logger = get_logger(__name__)


@router.get("/status/{execution_id}")
async def get_execution_status(
    execution_id: str,
    request_id: str = Depends(get_request_id),
    services: RouterServices = Depends(get_services),
) -> dict:
    logger.info("status_check", execution_id=execution_id)
    view = await services.status.get_status(execution_id)
    return {
        "ok": True,
        "request_id": request_id,
        "execution_id": execution_id,
        "status": view.status,
        "progress": view.progress,
    }

from __future__ import annotations

from fastapi import APIRouter, Depends

from agent_router.application import RouterServices
from agent_router.core.logging import get_logger

from agent_router.routes.dependencies import get_request_id, get_services, require_governor_key

router = APIRouter(tags=["registry"], dependencies=[Depends(require_governor_key)])
logger = get_logger(__name__)


@router.get("/registry")
async def get_registry(
    request_id: str = Depends(get_request_id),
    services: RouterServices = Depends(get_services),
) -> dict:
    logger.info("registry_request")
    return {"ok": True, "request_id": request_id, "registry": services.registry.enabled_agents()}

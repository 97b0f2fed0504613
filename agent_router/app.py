from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from agent_router.application import RouterServices, build_services
from agent_router.core.errors import RouterError
from agent_router.core.logging import configure_logging, get_logger
from agent_router.core.registry import Registry
from agent_router.core.settings import Settings, get_settings
from agent_router.infrastructure import DocumentStore, WorkflowsClient
from agent_router.routes import health, registry as registry_routes, route, status
from agent_router.routes.errors import router_error_handler, unhandled_error_handler

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    registry: Registry | None = None,
    store: DocumentStore | None = None,
    workflows: WorkflowsClient | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the router app; collaborators not passed in are created from settings.

    Raises ``RegistryError`` when the registry cannot be loaded, so the
    process refuses to start.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    services: RouterServices = build_services(
        settings,
        registry=registry,
        store=store,
        workflows=workflows,
        http_client=http_client,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: ANN202
        logger.info("router_started", environment=settings.environment, port=settings.port)
        if settings.mock_gcp_services:
            logger.warning("running_with_mock_gcp_services")
        else:
            logger.info("using_google_cloud", project=settings.google_cloud_project)
        try:
            yield
        finally:
            await services.aclose()

    app = FastAPI(title="MVP Router API", version="0.1.0", lifespan=lifespan)
    app.state.services = services

    app.add_exception_handler(RouterError, router_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health.router)
    app.include_router(route.router, prefix="/v1")
    app.include_router(registry_routes.router, prefix="/v1")
    app.include_router(status.router, prefix="/v1")

    return app

"""Dispatch router: validate, resolve the agent, hand off to its strategy."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, assert_never

from agent_router.core.errors import ValidationError
from agent_router.core.logging import get_logger
from agent_router.core.registry import HttpBackend, InternalBackend, Registry, StubBackend, WorkflowBackend
from agent_router.core.validation import parse_route_request, resolve_agent
from agent_router.domain import RouteResult
from agent_router.workers.background import TaskScheduler

from .strategies import HttpStrategy, InternalStrategy, StubStrategy, WorkflowStrategy

logger = get_logger(__name__)


class DispatchRouter:
    """Coordinates one ``POST /v1/route`` request.

    The router performs no writes itself; every record is created and
    advanced by the strategy that owns the backend.
    """

    def __init__(
        self,
        registry: Registry,
        collection: str,
        *,
        stub: StubStrategy,
        http: HttpStrategy,
        internal: InternalStrategy,
        workflow: WorkflowStrategy,
    ) -> None:
        self._registry = registry
        self._collection = collection
        self._stub = stub
        self._http = http
        self._internal = internal
        self._workflow = workflow

    async def route(self, body: Mapping[str, Any], request_id: str, background: TaskScheduler) -> RouteResult:
        try:
            request = parse_route_request(body)
            agent = resolve_agent(self._registry, request)
        except ValidationError as exc:
            logger.warning("route_rejected", reason=type(exc).__name__, error=str(exc))
            raise

        backend = agent.backend
        logger.info(
            "dispatching",
            project_slot=request.project_slot,
            agent_id=request.agent_id,
            backend=type(backend).__name__,
            workflow_stub=agent.workflow_stub,
        )

        if isinstance(backend, StubBackend):
            execution_id = await self._stub.dispatch(request, request_id, backend, background)
        elif isinstance(backend, HttpBackend):
            execution_id = await self._http.dispatch(request, request_id, backend, background)
        elif isinstance(backend, InternalBackend):
            execution_id = await self._internal.dispatch(request, request_id, backend, background)
        elif isinstance(backend, WorkflowBackend):
            execution_id = await self._workflow.dispatch(request, request_id, backend, background)
        else:
            assert_never(backend)

        return RouteResult(
            execution_id=execution_id,
            project_slot=request.project_slot,
            agent_id=request.agent_id,
            firestore_path=f"{self._collection}/{execution_id}",
        )

"""Backend dispatch strategies.

Each strategy owns the execution records it creates: it writes the
initial ``queued`` document and performs the single follow-up update.
A failed initial write propagates to the caller; a failed follow-up
update is logged and swallowed, leaving the record ``queued``.
"""
from __future__ import annotations

import json
import uuid
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from agent_router.core.auth import GOVERNOR_KEY_HEADER
from agent_router.core.errors import HttpBackendError, InternalCommandError, WorkflowSubmissionError
from agent_router.core.logging import get_logger
from agent_router.core.registry import HttpBackend, InternalBackend, StubBackend, WorkflowBackend
from agent_router.domain import ExecutionRecord, ExecutionStatus, RouteRequest, utc_now_iso
from agent_router.infrastructure import DocumentStore, WorkflowsClient
from agent_router.workers.background import TaskScheduler, spawn

logger = get_logger(__name__)

InternalCommand = Callable[[], Awaitable[dict[str, Any]]]


def new_execution_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4()}"


class _RecordWriter:
    """Shared persistence helpers for the strategies."""

    def __init__(self, store: DocumentStore, collection: str) -> None:
        self._store = store
        self._collection = collection

    async def _create(self, record: ExecutionRecord) -> None:
        await self._store.set(self._collection, record.execution_id, record.to_document())
        logger.info(
            "execution_created",
            execution_id=record.execution_id,
            status=str(record.status),
            agent_id=record.agent_id,
        )

    async def _finish(self, execution_id: str, fields: dict[str, Any]) -> None:
        try:
            await self._store.update(self._collection, execution_id, fields)
        except Exception as exc:
            # the route response is already out; the record stays queued
            logger.error(
                "execution_update_failed",
                execution_id=execution_id,
                status=fields.get("status"),
                error=str(exc),
            )
            return
        logger.info("execution_updated", execution_id=execution_id, status=fields.get("status"))


class StubStrategy(_RecordWriter):
    """Writes a queued record and nothing else."""

    prefix = "stub"

    async def dispatch(
        self,
        request: RouteRequest,
        request_id: str,
        backend: StubBackend,
        background: TaskScheduler,
    ) -> str:
        execution_id = new_execution_id(self.prefix)
        await self._create(ExecutionRecord.queued(execution_id, request, request_id))
        logger.info("stub_execution_created", execution_id=execution_id, target=backend.target)
        return execution_id


class HttpStrategy(_RecordWriter):
    """POSTs the payload to a remote backend after the response is sent."""

    prefix = "http"

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        *,
        http_client: httpx.AsyncClient,
        governor_key: str,
    ) -> None:
        super().__init__(store, collection)
        self._http = http_client
        self._governor_key = governor_key

    async def dispatch(
        self,
        request: RouteRequest,
        request_id: str,
        backend: HttpBackend,
        background: TaskScheduler,
    ) -> str:
        execution_id = new_execution_id(self.prefix)
        await self._create(ExecutionRecord.queued(execution_id, request, request_id, workflow_stub=backend.url))
        spawn(background, "http_backend_call", execution_id, self.complete, execution_id, backend.url, request.payload)
        return execution_id

    async def _call_backend(self, url: str, payload: Any) -> Any:
        try:
            response = await self._http.post(
                url,
                content=json.dumps(payload),
                headers={GOVERNOR_KEY_HEADER: self._governor_key, "Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise HttpBackendError(str(exc) or type(exc).__name__) from exc
        try:
            return response.json()
        except ValueError:
            return response.text

    async def complete(self, execution_id: str, url: str, payload: Any) -> None:
        try:
            result = await self._call_backend(url, payload)
        except HttpBackendError as exc:
            logger.error("http_execution_failed", execution_id=execution_id, url=url, error=exc.message)
            await self._finish(
                execution_id,
                {"status": ExecutionStatus.ORACLE_ERROR.value, "error": exc.message, "completed_at": utc_now_iso()},
            )
            return

        logger.info("http_execution_succeeded", execution_id=execution_id, url=url)
        await self._finish(
            execution_id,
            {"status": ExecutionStatus.COMPLETE.value, "result": result, "completed_at": utc_now_iso()},
        )


class InternalStrategy(_RecordWriter):
    """Runs a named in-process command (``internal://<command>``) inline."""

    prefix = "cmd"

    def __init__(self, store: DocumentStore, collection: str, *, commands: Mapping[str, InternalCommand]) -> None:
        super().__init__(store, collection)
        self._commands = dict(commands)

    async def dispatch(
        self,
        request: RouteRequest,
        request_id: str,
        backend: InternalBackend,
        background: TaskScheduler,
    ) -> str:
        execution_id = new_execution_id(self.prefix)
        workflow_stub = f"internal://{backend.command}"
        await self._create(ExecutionRecord.queued(execution_id, request, request_id, workflow_stub=workflow_stub))

        command = self._commands.get(backend.command)
        if command is None:
            logger.warning("unknown_internal_command", execution_id=execution_id, command=backend.command)
            await self._finish(
                execution_id,
                {
                    "status": ExecutionStatus.UNKNOWN_COMMAND.value,
                    "error": f"Unknown internal command: {backend.command}",
                    "completed_at": utc_now_iso(),
                },
            )
            return execution_id

        try:
            result = await command()
        except Exception as exc:
            message = exc.message if isinstance(exc, InternalCommandError) else str(exc)
            logger.error("internal_command_failed", execution_id=execution_id, command=backend.command, error=message)
            await self._finish(execution_id, {"status": ExecutionStatus.INTERNAL_ERROR.value, "error": message})
            return execution_id

        await self._finish(
            execution_id,
            {"status": ExecutionStatus.COMPLETE.value, "result": result, "completed_at": utc_now_iso()},
        )
        return execution_id


class WorkflowStrategy(_RecordWriter):
    """Submits the payload to the workflow-execution service."""

    prefix = "exec"

    def __init__(self, store: DocumentStore, collection: str, *, workflows: WorkflowsClient) -> None:
        super().__init__(store, collection)
        self._workflows = workflows

    async def dispatch(
        self,
        request: RouteRequest,
        request_id: str,
        backend: WorkflowBackend,
        background: TaskScheduler,
    ) -> str:
        execution_id = new_execution_id(self.prefix)
        record = ExecutionRecord.queued(execution_id, request, request_id, workflow_execution_name=None)
        try:
            await self._create(record)
        except Exception as exc:
            # without a record no status can ever be polled, so the request fails
            logger.error("workflow_record_write_failed", execution_id=execution_id, error=str(exc))
            raise
        spawn(background, "workflow_submission", execution_id, self.submit, execution_id, backend.resource, request.payload)
        return execution_id

    async def submit(self, execution_id: str, resource: str, payload: Any) -> None:
        try:
            execution = await self._workflows.create_execution(resource, json.dumps(payload))
        except Exception as exc:
            message = exc.message if isinstance(exc, WorkflowSubmissionError) else str(exc)
            logger.error("workflow_submission_failed", execution_id=execution_id, resource=resource, error=message)
            await self._finish(
                execution_id,
                {"status": ExecutionStatus.WORKFLOW_ERROR.value, "error_details": message},
            )
            return

        logger.info("workflow_execution_started", execution_id=execution_id, workflow_execution_name=execution.name)
        await self._finish(
            execution_id,
            {
                "status": execution.state or ExecutionStatus.ACTIVE.value,
                "workflow_execution_name": execution.name,
            },
        )

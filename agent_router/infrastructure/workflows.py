"""Integration with the Google Cloud Workflow Executions API."""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Protocol

import httpx

from agent_router.core.errors import WorkflowSubmissionError

WORKFLOW_EXECUTIONS_API_BASE = "https://workflowexecutions.googleapis.com/v1"


@dataclass(slots=True)
class WorkflowExecution:
    """Handle returned by the workflow service for a submitted execution."""

    name: str
    state: str | None = None


class WorkflowsClient(Protocol):
    """Contract for submitting workflow executions."""

    async def create_execution(self, parent: str, argument: str) -> WorkflowExecution:
        """Start an execution of the workflow at ``parent`` with a JSON ``argument``."""


class MockWorkflowsClient:
    """Stand-in used when ``MOCK_GCP_SERVICES`` is enabled."""

    async def create_execution(self, parent: str, argument: str) -> WorkflowExecution:
        return WorkflowExecution(name=f"{parent}/executions/mock_exec_{uuid.uuid4()}", state="ACTIVE")


class WorkflowExecutionsClient:
    """REST client for ``projects/*/locations/*/workflows/*`` executions."""

    def __init__(
        self,
        *,
        auth: httpx.Auth | None = None,
        api_base: str = WORKFLOW_EXECUTIONS_API_BASE,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_base = api_base.rstrip("/")
        self._auth = auth
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    async def create_execution(self, parent: str, argument: str) -> WorkflowExecution:
        url = f"{self._api_base}/{parent.strip('/')}/executions"
        try:
            kwargs = {"auth": self._auth} if self._auth is not None else {}
            response = await self._client.post(url, json={"argument": argument}, **kwargs)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise WorkflowSubmissionError(
                f"HTTP {exc.response.status_code} from workflow service: {exc.response.text[:200]}".strip()
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise WorkflowSubmissionError(f"Workflow submission failed: {exc}") from exc

        name = body.get("name") if isinstance(body, dict) else None
        if not name:
            raise WorkflowSubmissionError("Workflow service response did not include an execution name")
        return WorkflowExecution(name=str(name), state=body.get("state"))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["MockWorkflowsClient", "WorkflowExecution", "WorkflowExecutionsClient", "WorkflowsClient"]

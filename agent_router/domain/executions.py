"""Domain entities for dispatched executions."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""

    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ExecutionStatus(StrEnum):
    """Statuses written by this service.

    The workflow strategy may also store whatever state the workflow
    service reports, so readers must treat ``status`` as an open string.
    """

    QUEUED = "queued"
    COMPLETE = "complete"
    ACTIVE = "ACTIVE"
    ORACLE_ERROR = "oracle_error"
    INTERNAL_ERROR = "internal_error"
    UNKNOWN_COMMAND = "unknown_command"
    WORKFLOW_ERROR = "workflow_error"


@dataclass(frozen=True, slots=True)
class RouteRequest:
    """A validated ``POST /v1/route`` body."""

    project_slot: int
    agent_id: str
    mode: str
    payload: Any


@dataclass(frozen=True, slots=True)
class RouteResult:
    execution_id: str
    project_slot: int
    agent_id: str
    firestore_path: str

    @property
    def status_url(self) -> str:
        return f"/v1/status/{self.execution_id}"


@dataclass(slots=True)
class ExecutionRecord:
    """Initial document written for every dispatched request."""

    execution_id: str
    project_slot: int
    agent_id: str
    mode: str
    request_id: str
    status: str = ExecutionStatus.QUEUED
    progress: float = 0
    created_at: str = field(default_factory=utc_now_iso)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def queued(cls, execution_id: str, request: RouteRequest, request_id: str, **extra: Any) -> "ExecutionRecord":
        return cls(
            execution_id=execution_id,
            project_slot=request.project_slot,
            agent_id=request.agent_id,
            mode=request.mode,
            request_id=request_id,
            extra=extra,
        )

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "project_slot": self.project_slot,
            "agent_id": self.agent_id,
            "status": str(self.status),
            "progress": self.progress,
            "created_at": self.created_at,
            "request_id": self.request_id,
            "mode": self.mode,
        }
        document.update(self.extra)
        return document


@dataclass(frozen=True, slots=True)
class ExecutionStatusView:
    """What status polling exposes: nothing beyond status and progress."""

    status: str | None
    progress: float = 0

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "ExecutionStatusView":
        return cls(status=document.get("status"), progress=document.get("progress") or 0)


@dataclass(slots=True)
class CommanderState:
    """Singleton snapshot written by the ``commander_boot`` internal command."""

    DOCUMENT_ID = "current"
    AVAILABLE_COMMANDS = ("boot", "status", "list_agents", "dispatch")

    registry_summary: dict[str, list[str]]
    available_commands: list[str] = field(default_factory=lambda: list(CommanderState.AVAILABLE_COMMANDS))
    status: str = "online"
    updated_at: str = field(default_factory=utc_now_iso)
    boot_time: str = field(default_factory=utc_now_iso)

    def to_document(self) -> dict[str, Any]:
        return {
            "updated_at": self.updated_at,
            "boot_time": self.boot_time,
            "registry_summary": {slot: list(agents) for slot, agents in self.registry_summary.items()},
            "available_commands": list(self.available_commands),
            "status": self.status,
        }

"""Error taxonomy shared by the router, strategies and adapters."""
from __future__ import annotations


class RouterError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    code = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ----------------------------------------------------------------------
# validation (client-caused, raised before any write)
# ----------------------------------------------------------------------
class ValidationError(RouterError):
    status_code = 400
    code = "invalid_argument"


class MissingFields(ValidationError):
    code = "missing_fields"

    def __init__(self) -> None:
        super().__init__("Missing required fields: project_slot, agent_id, mode, payload")


class InvalidSlot(ValidationError):
    code = "invalid_slot"

    def __init__(self) -> None:
        super().__init__("project_slot must be an integer between 1 and 9")


class UnsupportedMode(ValidationError):
    code = "unsupported_mode"

    def __init__(self) -> None:
        super().__init__("Only async mode is supported")


class SlotNotFound(ValidationError):
    status_code = 404
    code = "slot_not_found"

    def __init__(self, project_slot: int) -> None:
        super().__init__(f"Project slot {project_slot} not found")


class AgentNotFound(ValidationError):
    status_code = 404
    code = "agent_not_found"

    def __init__(self, agent_id: str, project_slot: int) -> None:
        super().__init__(f"Agent '{agent_id}' not found in project slot {project_slot}")


class AgentDisabled(ValidationError):
    status_code = 403
    code = "agent_disabled"

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Agent '{agent_id}' is disabled")


class InvalidBody(ValidationError):
    def __init__(self) -> None:
        super().__init__("Request body must be a JSON object")


class Unauthorized(RouterError):
    status_code = 401
    code = "unauthorized"

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class ExecutionNotFound(RouterError):
    status_code = 404
    code = "not_found"

    def __init__(self, execution_id: str) -> None:
        super().__init__("Execution not found")
        self.execution_id = execution_id


# ----------------------------------------------------------------------
# persistence
# ----------------------------------------------------------------------
class StoreError(RouterError):
    """Raised when the document store rejects or cannot serve a call."""

    code = "store_error"


# ----------------------------------------------------------------------
# dispatch (captured into the execution record, never raised to clients)
# ----------------------------------------------------------------------
class DispatchError(RouterError):
    code = "dispatch_error"


class HttpBackendError(DispatchError):
    code = "http_backend_error"


class WorkflowSubmissionError(DispatchError):
    code = "workflow_submission_error"


class InternalCommandError(DispatchError):
    code = "internal_command_error"

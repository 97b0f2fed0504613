"""Domain layer definitions."""

from .executions import (
    CommanderState,
    ExecutionRecord,
    ExecutionStatus,
    ExecutionStatusView,
    RouteRequest,
    RouteResult,
    utc_now_iso,
)

__all__ = [
    "CommanderState",
    "ExecutionRecord",
    "ExecutionStatus",
    "ExecutionStatusView",
    "RouteRequest",
    "RouteResult",
    "utc_now_iso",
]

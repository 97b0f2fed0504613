"""Detached completion work scheduled after the route response.

Strategies never await their backend call on the request path.  They hand
a coroutine function to a scheduler (FastAPI's ``BackgroundTasks`` in the
HTTP layer) and the completion runs afterwards, correlated with the
request only by ``execution_id``.
"""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from agent_router.core.logging import get_logger

logger = get_logger(__name__)


class TaskScheduler(Protocol):
    """Anything with Starlette's ``BackgroundTasks.add_task`` signature."""

    def add_task(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None: ...


async def run_detached(
    label: str,
    execution_id: str,
    func: Callable[..., Awaitable[None]],
    *args: Any,
) -> None:
    """Run one completion coroutine; nothing escapes into the server."""

    try:
        await func(*args)
    except Exception as exc:
        logger.error("background_task_failed", task=label, execution_id=execution_id, error=str(exc))


def spawn(
    scheduler: TaskScheduler,
    label: str,
    execution_id: str,
    func: Callable[..., Awaitable[None]],
    *args: Any,
) -> None:
    scheduler.add_task(run_detached, label, execution_id, func, *args)
    logger.debug("background_task_scheduled", task=label, execution_id=execution_id)

"""Route request validation against the static registry."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from agent_router.core.errors import (
    AgentDisabled,
    AgentNotFound,
    InvalidSlot,
    MissingFields,
    SlotNotFound,
    UnsupportedMode,
)
from agent_router.core.registry import AgentConfig, Registry
from agent_router.domain import RouteRequest

SUPPORTED_MODES = frozenset({"async"})
MIN_SLOT = 1
MAX_SLOT = 9


def _coerce_slot(value: Any) -> int | None:
    # bool is an int subclass but never a valid slot
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def parse_route_request(body: Mapping[str, Any]) -> RouteRequest:
    """Check field presence, slot range and mode, in that order."""

    project_slot = body.get("project_slot")
    agent_id = body.get("agent_id")
    mode = body.get("mode")
    # payload may be any JSON value (0, {}, null); only an absent key is missing
    if not project_slot or not agent_id or not mode or "payload" not in body:
        raise MissingFields()

    slot = _coerce_slot(project_slot)
    if slot is None or not MIN_SLOT <= slot <= MAX_SLOT:
        raise InvalidSlot()

    if not isinstance(mode, str) or mode not in SUPPORTED_MODES:
        raise UnsupportedMode()

    return RouteRequest(project_slot=slot, agent_id=str(agent_id), mode=str(mode), payload=body["payload"])


def resolve_agent(registry: Registry, request: RouteRequest) -> AgentConfig:
    """Look up slot, then agent, then check the agent is enabled."""

    agents = registry.slot(request.project_slot)
    if agents is None:
        raise SlotNotFound(request.project_slot)

    agent = agents.get(request.agent_id)
    if agent is None:
        raise AgentNotFound(request.agent_id, request.project_slot)

    if not agent.enabled:
        raise AgentDisabled(request.agent_id)
    return agent

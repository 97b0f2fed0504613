"""Static agent registry: ``slot -> agent_id -> AgentConfig``.

The registry is loaded once at start-up from a JSON or YAML document and
never mutated afterwards.  Each agent's ``workflow_stub`` is classified
into a backend variant while loading so request handling never has to
re-parse the scheme.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from agent_router.core.logging import get_logger

logger = get_logger(__name__)

STUB_SCHEME = "stub://"
HTTP_SCHEMES = ("http://", "https://")
INTERNAL_SCHEME = "internal://"


class RegistryError(RuntimeError):
    """Raised when the registry source cannot be read or has the wrong shape."""


@dataclass(frozen=True, slots=True)
class StubBackend:
    target: str


@dataclass(frozen=True, slots=True)
class HttpBackend:
    url: str


@dataclass(frozen=True, slots=True)
class InternalBackend:
    command: str


@dataclass(frozen=True, slots=True)
class WorkflowBackend:
    resource: str


Backend = StubBackend | HttpBackend | InternalBackend | WorkflowBackend


def classify_backend(workflow_stub: str) -> Backend:
    """Resolve a ``workflow_stub`` string into its backend variant."""

    if workflow_stub.startswith(STUB_SCHEME):
        return StubBackend(target=workflow_stub)
    if workflow_stub.startswith(HTTP_SCHEMES):
        return HttpBackend(url=workflow_stub)
    if workflow_stub.startswith(INTERNAL_SCHEME):
        return InternalBackend(command=workflow_stub[len(INTERNAL_SCHEME):])
    return WorkflowBackend(resource=workflow_stub)


@dataclass(frozen=True, slots=True)
class AgentConfig:
    """One dispatchable agent.  ``raw`` keeps the source mapping verbatim."""

    agent_id: str
    enabled: bool
    workflow_stub: str
    backend: Backend
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, agent_id: str, data: Mapping[str, Any]) -> "AgentConfig":
        if not isinstance(data, Mapping):
            raise RegistryError(f"Agent {agent_id!r} must be a mapping")
        stub = data.get("workflow_stub")
        if not isinstance(stub, str) or not stub:
            raise RegistryError(f"Agent {agent_id!r} is missing a workflow_stub")
        enabled = data.get("enabled", False)
        if not isinstance(enabled, bool):
            raise RegistryError(f"Agent {agent_id!r} has a non-boolean 'enabled' flag")
        return cls(
            agent_id=agent_id,
            enabled=enabled,
            workflow_stub=stub,
            backend=classify_backend(stub),
            raw=MappingProxyType(dict(data)),
        )

    def to_dict(self) -> dict[str, Any]:
        return dict(self.raw)


class Registry:
    """Immutable view over the loaded slots."""

    def __init__(self, slots: Mapping[str, Mapping[str, AgentConfig]]) -> None:
        self._slots = MappingProxyType({key: MappingProxyType(dict(agents)) for key, agents in slots.items()})

    @classmethod
    def from_mapping(cls, data: Any) -> "Registry":
        if not isinstance(data, Mapping):
            raise RegistryError("Registry root must be a mapping of slot -> agents")
        slots: dict[str, dict[str, AgentConfig]] = {}
        for slot_key, agents in data.items():
            if not isinstance(agents, Mapping):
                raise RegistryError(f"Slot {slot_key!r} must be a mapping of agent_id -> config")
            slots[str(slot_key)] = {
                str(agent_id): AgentConfig.from_mapping(str(agent_id), config)
                for agent_id, config in agents.items()
            }
        return cls(slots)

    def __len__(self) -> int:
        return len(self._slots)

    def slot(self, project_slot: int) -> Mapping[str, AgentConfig] | None:
        return self._slots.get(str(project_slot))

    def enabled_agents(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Every slot, keeping only enabled agents (empty slots stay as ``{}``)."""

        return {
            slot: {agent_id: agent.to_dict() for agent_id, agent in agents.items() if agent.enabled}
            for slot, agents in self._slots.items()
        }

    def enabled_summary(self) -> dict[str, list[str]]:
        """Slots with at least one enabled agent, mapped to their agent ids."""

        summary: dict[str, list[str]] = {}
        for slot, agents in self._slots.items():
            for agent_id, agent in agents.items():
                if agent.enabled:
                    summary.setdefault(slot, []).append(agent_id)
        return summary


def _parse(path: Path, text: str) -> Any:
    if path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    return json.loads(text)


def load_registry(path: Path | str) -> Registry:
    """Read and validate the registry file; raises :class:`RegistryError`."""

    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
        data = _parse(source, text)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("registry_load_failed", path=str(source), error=str(exc))
        raise RegistryError(f"Failed to load registry from {source}: {exc}") from exc

    registry = Registry.from_mapping(data)
    logger.info("registry_loaded", path=str(source), slots=len(registry))
    return registry

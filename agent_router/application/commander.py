"""``internal://commander_boot``: snapshot enabled agents into commander state."""
from __future__ import annotations

from typing import Any

from agent_router.core.errors import InternalCommandError, StoreError
from agent_router.core.logging import get_logger
from agent_router.core.registry import Registry
from agent_router.domain import CommanderState
from agent_router.infrastructure import DocumentStore

logger = get_logger(__name__)

COMMAND_NAME = "commander_boot"
BOOT_MESSAGE = "Commander Booted Successfully"


class CommanderBoot:
    """Overwrites ``<collection>/current`` with the enabled-agent summary."""

    def __init__(self, registry: Registry, store: DocumentStore, collection: str = "commander_state") -> None:
        self._registry = registry
        self._store = store
        self._collection = collection

    async def __call__(self) -> dict[str, Any]:
        state = CommanderState(registry_summary=self._registry.enabled_summary())
        try:
            await self._store.set(self._collection, CommanderState.DOCUMENT_ID, state.to_document())
        except StoreError as exc:
            raise InternalCommandError(exc.message) from exc
        logger.info(
            "commander_state_updated",
            path=f"{self._collection}/{CommanderState.DOCUMENT_ID}",
            slots=len(state.registry_summary),
        )
        return {
            "registry": state.registry_summary,
            "commands": list(state.available_commands),
            "message": BOOT_MESSAGE,
        }

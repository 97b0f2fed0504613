"""Infrastructure layer for execution document persistence."""
from __future__ import annotations

import copy
from typing import Any, Protocol

from agent_router.core.errors import StoreError
from agent_router.core.logging import get_logger

logger = get_logger(__name__)


class DocumentStore(Protocol):
    """Persistence contract: documents addressed by collection and id."""

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or fully overwrite a document."""

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge top-level fields into an existing document."""

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return the document, or ``None`` when it does not exist."""


class InMemoryDocumentStore:
    """Simple in-memory store for mock mode and tests."""

    def __init__(self) -> None:
        self._documents: dict[tuple[str, str], dict[str, Any]] = {}

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._documents[(collection, doc_id)] = copy.deepcopy(data)
        logger.debug("mock_store_set", path=f"{collection}/{doc_id}")

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        document = self._documents.get((collection, doc_id))
        if document is None:
            raise StoreError(f"No document to update: {collection}/{doc_id}")
        document.update(copy.deepcopy(fields))
        logger.debug("mock_store_update", path=f"{collection}/{doc_id}", fields=sorted(fields))

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        document = self._documents.get((collection, doc_id))
        return copy.deepcopy(document) if document is not None else None

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def documents(self, collection: str) -> dict[str, dict[str, Any]]:
        return {
            doc_id: copy.deepcopy(document)
            for (name, doc_id), document in self._documents.items()
            if name == collection
        }

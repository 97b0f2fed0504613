"""Status polling for dispatched executions."""
from __future__ import annotations

from agent_router.core.errors import ExecutionNotFound
from agent_router.domain import ExecutionStatusView
from agent_router.infrastructure import DocumentStore


class StatusQuery:
    def __init__(self, store: DocumentStore, collection: str) -> None:
        self._store = store
        self._collection = collection

    async def get_status(self, execution_id: str) -> ExecutionStatusView:
        document = await self._store.get(self._collection, execution_id)
        if document is None:
            raise ExecutionNotFound(execution_id)
        return ExecutionStatusView.from_document(document)

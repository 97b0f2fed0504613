"""Wiring of the router's collaborators.

Everything request handling needs is constructed here once and passed in
explicitly; nothing is read from module globals at request time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from agent_router.core.auth import SharedSecretGatekeeper
from agent_router.core.logging import get_logger
from agent_router.core.registry import Registry, load_registry
from agent_router.core.settings import ConfigurationError, Settings
from agent_router.infrastructure import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    MockWorkflowsClient,
    WorkflowExecutionsClient,
    WorkflowsClient,
    resolve_gcp_auth,
)

from .commander import COMMAND_NAME, CommanderBoot
from .dispatch import DispatchRouter
from .status import StatusQuery
from .strategies import HttpStrategy, InternalStrategy, StubStrategy, WorkflowStrategy

logger = get_logger(__name__)


@dataclass
class RouterServices:
    settings: Settings
    registry: Registry
    store: DocumentStore
    gatekeeper: SharedSecretGatekeeper
    router: DispatchRouter
    status: StatusQuery
    _owned: list[Any] = field(default_factory=list)

    async def aclose(self) -> None:
        """Close HTTP clients created by :func:`build_services`."""

        for resource in self._owned:
            await resource.aclose()
        self._owned.clear()


def _default_store(
    settings: Settings,
    project_id: str | None,
    auth: httpx.Auth | None,
    owned: list[Any],
) -> DocumentStore:
    if settings.mock_gcp_services:
        return InMemoryDocumentStore()
    if not project_id:
        raise ConfigurationError(
            "GOOGLE_CLOUD_PROJECT is not set and the default credentials name no project; "
            "set it or enable MOCK_GCP_SERVICES"
        )
    store = FirestoreDocumentStore(
        project_id,
        database=settings.firestore_database,
        auth=auth,
        emulator_host=settings.firestore_emulator_host,
    )
    owned.append(store)
    return store


def _default_workflows(settings: Settings, auth: httpx.Auth | None, owned: list[Any]) -> WorkflowsClient:
    if settings.mock_gcp_services:
        return MockWorkflowsClient()
    client = WorkflowExecutionsClient(auth=auth, timeout=settings.backend_timeout_s)
    owned.append(client)
    return client


def build_services(
    settings: Settings,
    *,
    registry: Registry | None = None,
    store: DocumentStore | None = None,
    workflows: WorkflowsClient | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> RouterServices:
    """Assemble the router.

    Raises ``RegistryError`` if the registry is unusable and
    ``ConfigurationError`` if Google Cloud clients are needed but cannot be
    configured.
    """

    owned: list[Any] = []
    if registry is None:
        registry = load_registry(settings.registry_path)

    auth: httpx.Auth | None = None
    project_id = settings.google_cloud_project
    if not settings.mock_gcp_services and (store is None or workflows is None):
        auth, project_id = resolve_gcp_auth(settings.gcp_access_token, project_id)
    if store is None:
        store = _default_store(settings, project_id, auth, owned)
    if workflows is None:
        workflows = _default_workflows(settings, auth, owned)
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=settings.backend_timeout_s)
        owned.append(http_client)

    collection = settings.firestore_collection
    commander = CommanderBoot(registry, store, settings.commander_collection)
    router = DispatchRouter(
        registry,
        collection,
        stub=StubStrategy(store, collection),
        http=HttpStrategy(store, collection, http_client=http_client, governor_key=settings.governor_key),
        internal=InternalStrategy(store, collection, commands={COMMAND_NAME: commander}),
        workflow=WorkflowStrategy(store, collection, workflows=workflows),
    )

    return RouterServices(
        settings=settings,
        registry=registry,
        store=store,
        gatekeeper=SharedSecretGatekeeper(settings.governor_key),
        router=router,
        status=StatusQuery(store, collection),
        _owned=owned,
    )

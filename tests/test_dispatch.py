from __future__ import annotations

import asyncio

import httpx
import pytest
from fastapi import BackgroundTasks

from agent_router.application import CommanderBoot, DispatchRouter, InternalStrategy, StubStrategy
from agent_router.application.commander import COMMAND_NAME
from agent_router.application.strategies import HttpStrategy, WorkflowStrategy
from agent_router.core.errors import (
    AgentDisabled,
    AgentNotFound,
    InternalCommandError,
    InvalidSlot,
    MissingFields,
    SlotNotFound,
    StoreError,
    UnsupportedMode,
)
from agent_router.core.validation import parse_route_request
from agent_router.infrastructure import InMemoryDocumentStore, MockWorkflowsClient


class FailingCommanderStore(InMemoryDocumentStore):
    async def set(self, collection, doc_id, data):
        if collection == "commander_state":
            raise StoreError("commander state unavailable")
        await super().set(collection, doc_id, data)


def _body(**overrides):
    body = {"project_slot": 1, "agent_id": "audit-agent", "mode": "async", "payload": {"a": 1}}
    body.update(overrides)
    return body


def _build_router(registry, store, *, handler=None, commands=None):
    if handler is None:
        handler = lambda request: httpx.Response(200, json={"ok": True})  # noqa: E731
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    if commands is None:
        commands = {COMMAND_NAME: CommanderBoot(registry, store)}
    return DispatchRouter(
        registry,
        "executions",
        stub=StubStrategy(store, "executions"),
        http=HttpStrategy(store, "executions", http_client=http_client, governor_key="k"),
        internal=InternalStrategy(store, "executions", commands=commands),
        workflow=WorkflowStrategy(store, "executions", workflows=MockWorkflowsClient()),
    )


@pytest.mark.parametrize(
    ("body", "error"),
    [
        ({"agent_id": "a", "mode": "async", "payload": 1}, MissingFields),
        (_body(mode=""), MissingFields),
        (_body(project_slot=-1, mode="sync"), InvalidSlot),
        (_body(project_slot=9.5), InvalidSlot),
        (_body(mode="sync"), UnsupportedMode),
        (_body(mode=["async"]), UnsupportedMode),
    ],
)
def test_parse_route_request_errors(body, error):
    with pytest.raises(error):
        parse_route_request(body)


def test_parse_route_request_keeps_payload_verbatim():
    request = parse_route_request(_body(project_slot=9, payload=[1, None]))
    assert request.project_slot == 9
    assert request.payload == [1, None]


@pytest.mark.parametrize(
    ("body", "error"),
    [
        (_body(project_slot=4), SlotNotFound),
        (_body(agent_id="nobody"), AgentNotFound),
        (_body(agent_id="forge-agent"), AgentDisabled),
    ],
)
def test_route_rejects_unresolvable_agents_without_writes(registry, body, error):
    store = InMemoryDocumentStore()
    router = _build_router(registry, store)
    with pytest.raises(error):
        asyncio.run(router.route(body, "req-1", BackgroundTasks()))
    assert store.documents("executions") == {}


def test_stub_route_writes_queued_record(registry):
    store = InMemoryDocumentStore()
    router = _build_router(registry, store)
    background = BackgroundTasks()

    result = asyncio.run(router.route(_body(), "req-1", background))

    assert result.firestore_path == f"executions/{result.execution_id}"
    assert background.tasks == []
    record = store.documents("executions")[result.execution_id]
    assert record["status"] == "queued"
    assert record["progress"] == 0
    assert record["request_id"] == "req-1"
    assert record["created_at"].endswith("Z")


def test_http_completion_runs_only_when_background_tasks_run(registry):
    store = InMemoryDocumentStore()
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text="plain text result")

    router = _build_router(registry, store, handler=handler)
    background = BackgroundTasks()

    async def scenario():
        result = await router.route(_body(project_slot=2, agent_id="oracle-agent"), "req-2", background)
        before = await store.get("executions", result.execution_id)
        await background()
        after = await store.get("executions", result.execution_id)
        return before, after

    before, after = asyncio.run(scenario())
    assert before["status"] == "queued"
    assert len(calls) == 1
    assert after["status"] == "complete"
    assert after["result"] == "plain text result"


def test_workflow_route_defers_submission(registry):
    store = InMemoryDocumentStore()
    router = _build_router(registry, store)
    background = BackgroundTasks()

    async def scenario():
        result = await router.route(_body(project_slot=3, agent_id="register-agent"), "req-3", background)
        before = await store.get("executions", result.execution_id)
        await background()
        after = await store.get("executions", result.execution_id)
        return before, after

    before, after = asyncio.run(scenario())
    assert before["status"] == "queued"
    assert before["workflow_execution_name"] is None
    assert after["status"] == "ACTIVE"
    assert "/executions/mock_exec_" in after["workflow_execution_name"]


def test_commander_store_failure_marks_internal_error(registry):
    store = FailingCommanderStore()
    router = _build_router(registry, store)

    result = asyncio.run(
        router.route(_body(project_slot=9, agent_id="commander-agent"), "req-4", BackgroundTasks())
    )

    record = store.documents("executions")[result.execution_id]
    assert record["status"] == "internal_error"
    assert record["error"] == "commander state unavailable"


def test_failing_internal_command_marks_internal_error(registry):
    async def explode():
        raise RuntimeError("boom")

    store = InMemoryDocumentStore()
    router = _build_router(registry, store, commands={COMMAND_NAME: explode})
    result = asyncio.run(
        router.route(_body(project_slot=9, agent_id="commander-agent"), "req-5", BackgroundTasks())
    )
    assert store.documents("executions")[result.execution_id]["status"] == "internal_error"


def test_commander_boot_overwrites_current_document(registry):
    store = InMemoryDocumentStore()
    boot = CommanderBoot(registry, store)

    async def scenario():
        await store.set("commander_state", "current", {"status": "stale", "extra": True})
        return await boot()

    result = asyncio.run(scenario())
    state = store.documents("commander_state")["current"]
    assert "extra" not in state
    assert state["status"] == "online"
    assert result["commands"] == ["boot", "status", "list_agents", "dispatch"]


def test_commander_boot_wraps_store_failures(registry):
    boot = CommanderBoot(registry, FailingCommanderStore())
    with pytest.raises(InternalCommandError, match="commander state unavailable"):
        asyncio.run(boot())

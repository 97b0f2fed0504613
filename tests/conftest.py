from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import agent_router...` works when running `pytest` from repo root.
sys.path.append(str(Path(__file__).resolve().parents[1]))

from agent_router.core.registry import Registry
from agent_router.core.settings import Settings

GOVERNOR_KEY = "test-governor-key"

REGISTRY_DATA = {
    "1": {
        "audit-agent": {"enabled": True, "workflow_stub": "stub://audit", "owner": "audit-team"},
        "forge-agent": {"enabled": False, "workflow_stub": "stub://forge"},
    },
    "2": {
        "oracle-agent": {"enabled": True, "workflow_stub": "https://oracle.example.com/api/oracle_execute"},
    },
    "3": {
        "register-agent": {
            "enabled": True,
            "workflow_stub": "projects/demo/locations/us-central1/workflows/register",
        },
    },
    "5": {
        "sleeper-agent": {"enabled": False, "workflow_stub": "stub://sleeper"},
    },
    "9": {
        "commander-agent": {"enabled": True, "workflow_stub": "internal://commander_boot"},
        "mystery-agent": {"enabled": True, "workflow_stub": "internal://self_destruct"},
    },
}


@pytest.fixture()
def registry() -> Registry:
    return Registry.from_mapping(REGISTRY_DATA)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        governor_key=GOVERNOR_KEY,
        mock_gcp_services=True,
        firestore_collection="executions",
        commander_collection="commander_state",
    )

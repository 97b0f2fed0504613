#!/usr/bin/env python
from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import uvicorn

from agent_router.app import create_app
from agent_router.core.logging import get_logger
from agent_router.core.registry import RegistryError
from agent_router.core.settings import ConfigurationError, get_settings


def main() -> int:
    settings = get_settings()
    try:
        app = create_app(settings)
    except (RegistryError, ConfigurationError) as exc:
        get_logger("serve").error("startup_aborted", error=str(exc))
        return 1

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower(), log_config=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Application services."""

from .commander import CommanderBoot
from .dispatch import DispatchRouter
from .services import RouterServices, build_services
from .status import StatusQuery
from .strategies import HttpStrategy, InternalStrategy, StubStrategy, WorkflowStrategy

__all__ = [
    "CommanderBoot",
    "DispatchRouter",
    "HttpStrategy",
    "InternalStrategy",
    "RouterServices",
    "StatusQuery",
    "StubStrategy",
    "WorkflowStrategy",
    "build_services",
]

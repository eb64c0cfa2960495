"""Update pipeline for compose stacks running inside LXC containers.

This module provides container enumeration, update detection, the
stop/start/prune applier and the per-container orchestrator.
"""

from .applier import UpdateApplier
from .detector import UpdateDetector
from .exceptions import CommandExecutionError, EnumerationError, StackRefreshError
from .executor import CommandExecutor, EnvironmentEnumerator, LxcExecutor
from .models import (
    CommandResult,
    EnvironmentOutcome,
    PipelineState,
    RunReport,
    UpdateDecision,
)
from .orchestrator import UpdateOrchestrator
from .settings import UpdaterSettings

__all__ = [
    "CommandExecutionError",
    "CommandExecutor",
    "CommandResult",
    "EnumerationError",
    "EnvironmentEnumerator",
    "EnvironmentOutcome",
    "LxcExecutor",
    "PipelineState",
    "RunReport",
    "StackRefreshError",
    "UpdateApplier",
    "UpdateDecision",
    "UpdateDetector",
    "UpdateOrchestrator",
    "UpdaterSettings",
]

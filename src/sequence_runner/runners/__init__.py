"""
Runners layer - Execution engines for work items.

Runners own the pending queue and the run state, move items through their
lifecycle and report progress through event hooks. Presentation is left to
optional delegates.
"""

from .base import PresentationDelegate, RunnerEvents, RunnerOptions, RunnerProtocol, RunnerResult
from .registry import (
    RunnerFactoryConfig,
    RunnerRegistry,
    UnknownImplementationError,
    create_runner,
    default_registry,
)
from .sequential import RunnerStateError, SequentialRunner
from .steps import StepOutcome, StepStatus, invoke_step

__all__ = [
    "PresentationDelegate",
    "RunnerEvents",
    "RunnerOptions",
    "RunnerProtocol",
    "RunnerResult",
    "RunnerFactoryConfig",
    "RunnerRegistry",
    "UnknownImplementationError",
    "create_runner",
    "default_registry",
    "RunnerStateError",
    "SequentialRunner",
    "StepOutcome",
    "StepStatus",
    "invoke_step",
]

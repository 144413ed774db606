"""
Runner registry - Builds runners from configuration.

Maps stable identifiers to runner classes and delegate factories so that
runners can be declared in YAML (see ``features`` in config.yaml) and
constructed by name.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..constants import DEFAULT_DELEGATE, DEFAULT_IMPLEMENTATION
from ..work import WorkItem
from .base import PresentationDelegate, RunnerEvents, RunnerOptions
from .sequential import SequentialRunner

logger = logging.getLogger(__name__)

RunnerClass = type[SequentialRunner]
DelegateFactory = Callable[[], PresentationDelegate]


class UnknownImplementationError(KeyError):
    """Raised when a runner or delegate name is not registered."""

    def __init__(self, kind: str, name: str, available: Sequence[str]):
        self.kind = kind
        self.name = name
        self.available = list(available)
        super().__init__(f"Unknown {kind}: {name!r} (available: {', '.join(self.available) or 'none'})")

    def __str__(self) -> str:
        return self.args[0]


@dataclass
class RunnerFactoryConfig:
    """Everything needed to construct (and optionally start) a runner."""

    implementation: str | RunnerClass = DEFAULT_IMPLEMENTATION
    options: RunnerOptions = field(default_factory=RunnerOptions)
    events: RunnerEvents | None = None
    # Instance, class/factory, registered name, or None for no delegate
    delegate: PresentationDelegate | DelegateFactory | str | None = None
    # Items to initialize the runner with right away
    data: list[WorkItem] | None = None


class RunnerRegistry:
    """Explicit name -> constructor table for runners and delegates."""

    def __init__(self):
        self._runners: dict[str, RunnerClass] = {}
        self._delegates: dict[str, DelegateFactory] = {}

    def register(self, name: str, runner_cls: RunnerClass) -> None:
        """Register a runner implementation under a name."""
        self._runners[name] = runner_cls

    def register_delegate(self, name: str, factory: DelegateFactory) -> None:
        """Register a delegate class or zero-argument factory under a name."""
        self._delegates[name] = factory

    @property
    def runner_names(self) -> list[str]:
        return sorted(self._runners)

    @property
    def delegate_names(self) -> list[str]:
        return sorted(self._delegates)

    def resolve(self, implementation: str | RunnerClass) -> RunnerClass:
        if not isinstance(implementation, str):
            return implementation
        if implementation not in self._runners:
            raise UnknownImplementationError("runner", implementation, self.runner_names)
        return self._runners[implementation]

    def resolve_delegate(self, delegate: Any) -> PresentationDelegate | None:
        """Turn a delegate reference (name, class, factory or instance) into an instance."""
        if isinstance(delegate, str):
            if delegate not in self._delegates:
                raise UnknownImplementationError("delegate", delegate, self.delegate_names)
            delegate = self._delegates[delegate]
        if inspect.isclass(delegate) or (callable(delegate) and not hasattr(delegate, "show")):
            delegate = delegate()
        return delegate

    def create(self, config: RunnerFactoryConfig) -> SequentialRunner:
        """
        Construct a runner from a factory config.

        Args:
            config: Factory configuration

        Returns:
            The runner, already initialized when ``config.data`` is set

        Raises:
            UnknownImplementationError: If a runner or delegate name is unknown
        """
        runner_cls = self.resolve(config.implementation)
        delegate = self.resolve_delegate(config.delegate)
        runner = runner_cls(config.options, config.events, delegate)
        logger.debug(f"Created {runner_cls.__name__} (delegate: {type(delegate).__name__ if delegate else 'none'})")

        if config.data is not None:
            runner.initialize(config.data)
        return runner


_default_registry: RunnerRegistry | None = None


def default_registry() -> RunnerRegistry:
    """Process-wide registry holding the built-in runners and delegates."""
    global _default_registry
    if _default_registry is None:
        from ..delegates import ConsoleDelegate

        registry = RunnerRegistry()
        registry.register(DEFAULT_IMPLEMENTATION, SequentialRunner)
        registry.register("runner", SequentialRunner)
        registry.register_delegate(DEFAULT_DELEGATE, ConsoleDelegate)
        _default_registry = registry
    return _default_registry


def create_runner(config: RunnerFactoryConfig) -> SequentialRunner:
    """Construct a runner through the default registry."""
    return default_registry().create(config)

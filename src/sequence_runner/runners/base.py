"""Base runner classes and protocols."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, Protocol

from ..constants import DEFAULT_AUTO_START_DELAY

if TYPE_CHECKING:
    from ..work import RunState, WorkItem

# Result of a delegate step: None when done synchronously, an awaitable when deferred
StepResult = Awaitable[Any] | None

_OPTION_ALIASES = {
    "priorityBased": "priority_based",
    "skipAllowed": "skip_allowed",
    "autoStart": "auto_start",
    "autoStartDelay": "auto_start_delay",
}


@dataclass(frozen=True)
class RunnerOptions:
    """Configuration of one run. Immutable once handed to a runner."""

    # Reserved; queue order is always the order fixed at initialize time
    sequential: bool = True
    # Sort items by priority (highest first) before running
    priority_based: bool = False
    # Whether skip_current() is permitted
    skip_allowed: bool = True
    # Start consuming the queue right after initialize
    auto_start: bool = True
    # Milliseconds before the first item starts
    auto_start_delay: float = DEFAULT_AUTO_START_DELAY
    # Implementation-specific settings
    extras: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict | None) -> RunnerOptions:
        """Create options from a mapping (snake_case or camelCase keys)."""
        known = {f.name for f in fields(cls)} - {"extras"}
        kwargs: dict[str, Any] = {}
        extras = dict((data or {}).get("extras") or {})
        for key, value in (data or {}).items():
            if key == "extras":
                continue
            key = _OPTION_ALIASES.get(key, key)
            if key in known:
                kwargs[key] = value
            else:
                extras[key] = value
        return cls(extras=extras, **kwargs)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up an implementation-specific setting."""
        return self.extras.get(key, default)


@dataclass
class RunnerEvents:
    """
    Event hooks for runner progress reporting.

    Allows callers to observe a run without coupling the runner to a UI.
    All hooks are optional - if None, no call is made. Hooks fire
    synchronously at the point of transition and their exceptions are
    not caught by the runner.
    """

    # Run lifecycle
    on_initialize: Callable[[list[WorkItem], RunState], None] | None = None  # items, state
    on_finish: Callable[[list[WorkItem], RunState], None] | None = None  # items, state

    # Item lifecycle
    on_current_start: Callable[[WorkItem], None] | None = None
    on_current_complete: Callable[[WorkItem], None] | None = None
    on_current_skip: Callable[[WorkItem], None] | None = None

    # Forwarded from the delegate, never emitted by the runner itself
    on_interaction: Callable[[str, Any], None] | None = None  # type, data

    on_error: Callable[[str, WorkItem | None], None] | None = None  # message, item


@dataclass
class RunnerResult:
    """Summary of a finished run."""

    success: bool
    total: int = 0
    items_completed: int = 0
    items_skipped: int = 0
    # Wall-clock seconds from initialize to finish
    elapsed: float = 0.0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def completion_ratio(self) -> float:
        """Share of items that completed (1.0 for an empty run)."""
        if self.total == 0:
            return 1.0
        return self.items_completed / self.total


class PresentationDelegate(Protocol):
    """
    Protocol for presentation delegates.

    A delegate presents work items; the runner never assumes one exists.
    Every step may return None (done) or an awaitable (deferred).
    Optional steps - ``update_content(item)``, ``skip()`` and
    ``finish(state)`` - are looked up at call time; a missing one counts
    as an immediate success.
    """

    def initialize(
        self,
        options: RunnerOptions,
        on_interaction: Callable[[str, Any], None] | None = None,
    ) -> StepResult: ...

    def show(self, item: WorkItem, options: RunnerOptions) -> StepResult: ...

    def hide(self) -> StepResult: ...

    def destroy(self) -> StepResult: ...


class RunnerProtocol(Protocol):
    """Protocol for item runners."""

    async def run(self, items: Sequence[WorkItem]) -> RunnerResult:
        """
        Execute a run over the given items.

        Args:
            items: The work items to process

        Returns:
            RunnerResult with execution summary
        """
        ...

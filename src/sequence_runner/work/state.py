"""Run state definitions."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from .items import WorkItem


class RunPhase(Enum):
    """Coarse lifecycle state of a runner."""

    INITIALIZED = "initialized"
    PROCESSING = "processing"
    COMPLETED = "completed"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class RunError:
    """An informational error recorded during a run."""

    message: str
    item: WorkItem | None = None


@dataclass
class RunState:
    """
    Mutable state of one run, owned exclusively by the runner.

    Every item handed to ``initialize`` sits in exactly one of
    ``pending``, ``current``, ``completed`` or ``skipped``.
    """

    total: int = 0
    processed: int = 0
    remaining: int = 0
    # Number of items started so far
    run_index: int = 0
    current: WorkItem | None = None
    pending: deque[WorkItem] = field(default_factory=deque)
    completed: list[WorkItem] = field(default_factory=list)
    skipped: list[WorkItem] = field(default_factory=list)
    errors: list[RunError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    phase: RunPhase = RunPhase.INITIALIZED

    def copy(self) -> RunState:
        """Return a defensive copy: containers are copied, items are shared."""
        return RunState(
            total=self.total,
            processed=self.processed,
            remaining=self.remaining,
            run_index=self.run_index,
            current=self.current,
            pending=deque(self.pending),
            completed=list(self.completed),
            skipped=list(self.skipped),
            errors=list(self.errors),
            warnings=list(self.warnings),
            phase=self.phase,
        )

    def all_items(self) -> list[WorkItem]:
        """All items across the partition, current item included."""
        current = [self.current] if self.current is not None else []
        return [*self.pending, *current, *self.completed, *self.skipped]

    def is_consistent(self) -> bool:
        """Check the counter invariant ``total == processed + remaining``."""
        return self.total == self.processed + self.remaining

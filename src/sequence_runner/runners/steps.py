"""
Delegate step outcomes.

A delegate step either finishes while it is being called or hands back an
awaitable that settles later on the event loop. Both are wrapped into a
StepOutcome so the runner routes every step through the same continuation.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from enum import Enum
from typing import Any


class StepStatus(Enum):
    """Tag of a step outcome."""

    RESOLVED = "resolved"
    FAILED = "failed"
    PENDING = "pending"


class StepOutcome:
    """Tagged result of calling one delegate step."""

    def __init__(
        self,
        status: StepStatus,
        error: BaseException | None = None,
        future: asyncio.Future | None = None,
    ):
        self.status = status
        self.error = error
        self.future = future

    @property
    def is_pending(self) -> bool:
        return self.status is StepStatus.PENDING

    def when_settled(self, callback: Callable[[BaseException | None], None]) -> None:
        """
        Call ``callback(error)`` once the step has settled.

        Resolved and failed outcomes call back immediately; pending ones call
        back from the future's done-callback. ``error`` is None on success.
        """
        if self.future is None:
            callback(self.error)
            return

        def _done(future: asyncio.Future) -> None:
            if future.cancelled():
                callback(asyncio.CancelledError("delegate step was cancelled"))
            else:
                callback(future.exception())

        self.future.add_done_callback(_done)


RESOLVED = StepOutcome(StepStatus.RESOLVED)


def invoke_step(
    step: Callable[..., Any] | None,
    *args: Any,
    loop: asyncio.AbstractEventLoop | None = None,
) -> StepOutcome:
    """
    Call a delegate step and tag its result.

    Args:
        step: Bound delegate method, or None when the delegate lacks it
        *args: Arguments for the step
        loop: Loop used to schedule awaitable results

    Returns:
        StepOutcome; a missing step counts as resolved
    """
    if step is None:
        return RESOLVED

    try:
        result = step(*args)
    except Exception as e:
        return StepOutcome(StepStatus.FAILED, error=e)

    if not inspect.isawaitable(result):
        return RESOLVED

    future = asyncio.ensure_future(result, loop=loop or asyncio.get_running_loop())
    return StepOutcome(StepStatus.PENDING, future=future)

"""Sequential runner - Processes work items one at a time."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Sequence

from ..work import RunError, RunPhase, RunState, WorkItem
from .base import PresentationDelegate, RunnerEvents, RunnerOptions, RunnerResult
from .steps import StepOutcome, StepStatus, invoke_step

logger = logging.getLogger(__name__)


class RunnerStateError(RuntimeError):
    """Raised when the runner reaches a state its transitions cannot produce."""


class SequentialRunner:
    """
    Sequential item runner.

    Owns the pending queue and the run state, moves one item at a time
    through start -> complete | skip, and finalizes once the queue drains.
    A presentation delegate, when present, is called at each transition;
    its steps may finish synchronously or return awaitables.

    Scheduling is cooperative on an asyncio event loop. Timers and delegate
    continuations capture the run generation when they are scheduled and do
    nothing once reset(), initialize() or destroy() has started a new one.
    """

    def __init__(
        self,
        options: RunnerOptions | dict | None = None,
        events: RunnerEvents | None = None,
        delegate: PresentationDelegate | type | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        """
        Initialize the runner.

        Args:
            options: Run configuration (a mapping is converted)
            events: Optional event hooks
            delegate: Presentation delegate instance, or a class to instantiate
            loop: Event loop for timers and deferred steps; defaults to the
                running loop, so without it the runner must be driven from a
                coroutine
        """
        if isinstance(options, dict):
            options = RunnerOptions.from_dict(options)
        self.options = options or RunnerOptions()
        self.events = events or RunnerEvents()
        self.loop = loop

        self._generation = 0
        self._timers: set[asyncio.TimerHandle] = set()
        self._finalizing = False
        self._started_at: float | None = None
        self._finished: asyncio.Future | None = None

        self.state = self.create_state()
        self.reset()

        if inspect.isclass(delegate):
            delegate = delegate()
        self.delegate: PresentationDelegate | None = delegate

    # -- overridable hooks -------------------------------------------------

    def create_state(self) -> RunState:
        return RunState()

    def enhance_data(self, items: list[WorkItem]) -> list[WorkItem]:
        """Transform items before ordering. Identity by default."""
        return items

    def sort_by_priority(self, items: list[WorkItem]) -> list[WorkItem]:
        """Stable sort, highest priority first."""
        return sorted(items, key=lambda item: item.effective_priority, reverse=True)

    def validate_data(self, items: list[WorkItem]) -> list[WorkItem]:
        items = self.enhance_data(items)
        if self.options.priority_based:
            items = self.sort_by_priority(items)
        return items

    # -- run lifecycle -----------------------------------------------------

    def initialize(self, items: Sequence[WorkItem]) -> RunState:
        """
        Start a new run over the given items.

        Calling again restarts: continuations of the previous run are dropped.
        With a delegate the first item is scheduled once the delegate has
        initialized, whatever ``auto_start`` says; without one ``auto_start``
        decides whether the queue starts on its own.

        Args:
            items: Work items, in input order

        Returns:
            Point-in-time snapshot of the new run state

        Raises:
            RunnerStateError: If a timer is needed and there is neither a
                running loop nor a loop passed to the runner
        """
        validated = self.validate_data(list(items))
        self.reset()

        for item in validated:
            item.is_processed = False
            item.is_skipped = False
            item.processing_start_time = None
            item.processing_end_time = None

        self.state.total = len(validated)
        self.state.remaining = len(validated)
        self.state.pending.extend(validated)
        self.state.phase = RunPhase.PROCESSING
        self._started_at = time.monotonic()
        snapshot = self.state.copy()

        logger.debug(f"Run initialized with {len(validated)} items")
        if self.events.on_initialize:
            self.events.on_initialize(validated, snapshot)

        if self.delegate is not None:
            outcome = invoke_step(
                self.delegate.initialize, self.options, self.events.on_interaction, loop=self.loop
            )
            self._after(outcome, "Delegate initialize error", self._schedule_first)
        else:
            self._auto_start()

        return snapshot

    async def run(self, items: Sequence[WorkItem]) -> RunnerResult:
        """
        Run all items and wait for the run to finish.

        With ``auto_start`` disabled the first item is still started, after
        the delegate has initialized.

        Args:
            items: Work items to process

        Returns:
            RunnerResult with execution summary

        Raises:
            Exception: Whatever an event hook raised while the run was
                advancing on its own
            asyncio.CancelledError: If a delegate step was cancelled
        """
        self._finished = self._get_loop().create_future()
        self.initialize(items)
        return await self._finished

    async def wait_finished(self) -> RunnerResult:
        """Wait for the current run to finish."""
        if self._finished is None or self._finished.done():
            self._finished = self._get_loop().create_future()
            if self.state.phase is RunPhase.COMPLETED:
                self._finished.set_result(self._build_result(self.state))
        return await asyncio.shield(self._finished)

    def has_more(self) -> bool:
        """True while items are waiting in the pending queue."""
        return bool(self.state.pending)

    def advance_or_finalize(self) -> bool:
        """
        Start the next pending item, or finalize once the queue has drained.

        Does nothing while an item is current.

        Returns:
            True if an item was started
        """
        if self.state.current is not None:
            logger.debug(f"{self.state.current.label} is still current, not advancing")
            return False
        if self.has_more():
            self._start(self.state.pending.popleft())
            return True
        self.try_finalize_runner()
        return False

    def run_next(self) -> None:
        """Advance to the next item (finalizing when none are left)."""
        self.advance_or_finalize()

    def get_current(self) -> WorkItem | None:
        return self.state.current

    def complete_current(self) -> None:
        """Mark the current item processed and move on."""
        item = self.state.current
        if item is None:
            self.try_finalize_runner()
            return

        generation = self._generation

        item.is_processed = True
        item.processing_end_time = time.time()
        self.state.processed += 1
        self.state.remaining -= 1
        self.state.current = None
        self.state.completed.append(item)

        logger.debug(f"Completed {item.label}")
        if self.events.on_current_complete:
            self.events.on_current_complete(item)

        outcome = self._invoke("update_content", item)
        self._after(outcome, "Delegate update content error", self._continue, item, generation)

    def skip_current(self) -> None:
        """Mark the current item skipped and move on, if skipping is allowed."""
        if not self.options.skip_allowed:
            logger.debug("Skipping is disabled for this runner")
            return

        item = self.state.current
        if item is None:
            self.try_finalize_runner()
            return
        if item.skipable is False:
            logger.debug(f"{item.label} is not skipable")
            return

        generation = self._generation

        item.is_skipped = True
        item.processing_end_time = time.time()
        self.state.processed += 1
        self.state.remaining -= 1
        self.state.current = None
        self.state.skipped.append(item)

        logger.debug(f"Skipped {item.label}")
        if self.events.on_current_skip:
            self.events.on_current_skip(item)

        outcome = self._invoke("skip")
        self._after(outcome, "Delegate skip error", self._continue, item, generation)

    def try_finalize_runner(self) -> None:
        """Finish the run once the queue is drained and no item is current."""
        if self.has_more() or self.state.current is not None:
            return
        if self.state.phase is not RunPhase.PROCESSING or self._finalizing:
            return

        self._finalizing = True
        outcome = self._invoke("finish", self.state.copy())
        self._after(outcome, "Delegate finish error", self._hide_delegate)

    def add_error(self, message: str, item: WorkItem | None = None) -> None:
        """Record an error. Errors never stop the run."""
        self.state.errors.append(RunError(message, item))
        logger.error(message)
        if self.events.on_error:
            self.events.on_error(message, item)

    def get_state(self) -> RunState:
        """Defensive copy of the live state."""
        return self.state.copy()

    def reset(self) -> None:
        """Start a fresh state and drop every scheduled continuation."""
        self._generation += 1
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()
        self._finalizing = False
        self.state = self.create_state()

    def destroy(self) -> None:
        """Tear down the run and the delegate."""
        pending_result = None
        if self._finished is not None and not self._finished.done():
            pending_result = self._build_result(self.state, success=False)

        self.reset()
        self.state.phase = RunPhase.DESTROYED

        delegate, self.delegate = self.delegate, None
        if delegate is not None:
            outcome = invoke_step(getattr(delegate, "destroy", None), loop=self.loop)
            self._after(outcome, "Delegate destroy error", lambda: None)

        if pending_result is not None:
            self._finished.set_result(pending_result)

    # -- internals ---------------------------------------------------------

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self.loop is not None:
            return self.loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise RunnerStateError(
                "No running event loop: pass loop= to the runner or drive it from a coroutine"
            ) from e

    def _invoke(self, step_name: str, *args) -> StepOutcome:
        step = getattr(self.delegate, step_name, None) if self.delegate is not None else None
        return invoke_step(step, *args, loop=self.loop)

    def _after(
        self,
        outcome: StepOutcome,
        error_message: str,
        then: Callable[[], None],
        item: WorkItem | None = None,
        generation: int | None = None,
    ) -> None:
        """
        Record a failed step, then continue - unless the run has moved on.

        ``generation`` defaults to the current one; callers that fire hooks
        before the step pass the generation read before those hooks ran.
        A cancelled step drops the continuation and cancels a waiting run().
        """
        if generation is None:
            generation = self._generation

        def _settled(error: BaseException | None) -> None:
            if generation != self._generation:
                logger.debug(f"Dropping stale continuation after '{error_message}' step")
                return
            if isinstance(error, asyncio.CancelledError):
                logger.debug(f"'{error_message}' step was cancelled, stopping the run")
                if self._finished is not None and not self._finished.done():
                    self._finished.cancel()
                return
            try:
                if error is not None:
                    self.add_error(f"{error_message}: {error}", item)
                then()
            except Exception as e:
                self._fail_run(e)
                raise

        outcome.when_settled(_settled)

    def _schedule(self, delay_ms: float, callback: Callable[[], None]) -> None:
        generation = self._generation

        def _fire() -> None:
            self._timers.discard(handle)
            if generation != self._generation:
                return
            try:
                callback()
            except Exception as e:
                self._fail_run(e)
                raise

        handle = self._get_loop().call_later(max(delay_ms, 0) / 1000, _fire)
        self._timers.add(handle)

    def _fail_run(self, error: Exception) -> None:
        """Hand a hook exception raised inside a continuation to the awaiting run()."""
        if self._finished is not None and not self._finished.done():
            self._finished.set_exception(error)

    def _auto_start(self) -> None:
        driven = self._finished is not None and not self._finished.done()
        if not (self.options.auto_start or driven):
            logger.debug("Auto start disabled, waiting for run_next()")
            return
        self._schedule_first()

    def _schedule_first(self) -> None:
        self._schedule(self.options.auto_start_delay, self.advance_or_finalize)

    def _start(self, item: WorkItem) -> None:
        item.processing_start_time = time.time()
        self.state.current = item
        self.state.run_index += 1

        logger.debug(f"Starting {item.label} ({self.state.run_index}/{self.state.total})")
        if self.events.on_current_start:
            self.events.on_current_start(item)

        # The hook may already have completed or skipped the item
        if self.state.current is not item:
            return

        if self.delegate is None:
            self._complete_after_duration(item)
            return

        outcome = invoke_step(self.delegate.show, item, self.options, loop=self.loop)
        if outcome.is_pending or outcome.status is StepStatus.FAILED:
            self._after(outcome, "Delegate show error", lambda: self._complete_if_current(item), item)
        elif item.duration:
            self._schedule(item.duration, lambda: self._complete_if_current(item))
        else:
            logger.debug(f"{item.label} waits for an explicit complete_current()")

    def _complete_after_duration(self, item: WorkItem) -> None:
        if item.duration:
            self._schedule(item.duration, lambda: self._complete_if_current(item))
            return
        message = f"{item.label} has no delegate and no duration; it waits for complete_current()"
        logger.warning(message)
        self.state.warnings.append(message)

    def _complete_if_current(self, item: WorkItem) -> None:
        if self.state.current is item:
            self.complete_current()
        else:
            logger.debug(f"{item.label} already left the current slot")

    def _continue(self) -> None:
        if self.state.phase is RunPhase.PROCESSING:
            self.advance_or_finalize()

    def _hide_delegate(self) -> None:
        outcome = self._invoke("hide")
        self._after(outcome, "Delegate hide error", self._finalize_runner)

    def _finalize_runner(self) -> None:
        if self.state.pending:
            raise RunnerStateError(f"Finalizing with {len(self.state.pending)} items still pending")

        self.state.phase = RunPhase.COMPLETED
        snapshot = self.state.copy()
        items = [*self.state.completed, *self.state.skipped]

        logger.info(
            f"Run finished: {len(snapshot.completed)} completed, "
            f"{len(snapshot.skipped)} skipped, {len(snapshot.errors)} errors"
        )
        if self._finished is not None and not self._finished.done():
            self._finished.set_result(self._build_result(snapshot))
        if self.events.on_finish:
            self.events.on_finish(items, snapshot)

    def _build_result(self, state: RunState, success: bool | None = None) -> RunnerResult:
        elapsed = time.monotonic() - self._started_at if self._started_at is not None else 0.0
        return RunnerResult(
            success=not state.errors if success is None else success,
            total=state.total,
            items_completed=len(state.completed),
            items_skipped=len(state.skipped),
            elapsed=elapsed,
            errors=[error.message for error in state.errors],
            warnings=list(state.warnings),
        )

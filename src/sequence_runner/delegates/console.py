"""Console delegate - Presents work items on a Rich console."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from rich.console import Console
from rich.markup import escape

from ..runners.base import RunnerOptions
from ..work import RunState, WorkItem


class ConsoleDelegate:
    """
    Presentation delegate that prints item progress.

    ``show`` is a coroutine: it holds each item on screen for the item's
    ``duration`` (milliseconds) and then lets the runner complete it.
    """

    def __init__(self, console: Console | None = None, speed: float = 1.0):
        """
        Args:
            console: Console to print to (a new one by default)
            speed: Playback speed factor; 2.0 halves every hold time
        """
        self.console = console or Console()
        self.speed = speed
        self.on_interaction: Callable[[str, Any], None] | None = None
        self._index = 0

    def initialize(
        self,
        options: RunnerOptions,
        on_interaction: Callable[[str, Any], None] | None = None,
    ) -> None:
        self.on_interaction = on_interaction
        self._index = 0
        if options.priority_based:
            self.console.print("[dim]Items ordered by priority[/dim]")

    async def show(self, item: WorkItem, options: RunnerOptions) -> None:
        self._index += 1
        self.console.print(f"  [{self._index}] {escape(item.label)}...")
        if item.duration:
            await asyncio.sleep(item.duration / 1000 / self.speed)
        if self.on_interaction:
            self.on_interaction("shown", item)

    def update_content(self, item: WorkItem) -> None:
        elapsed_ms = 0.0
        if item.processing_start_time is not None and item.processing_end_time is not None:
            elapsed_ms = (item.processing_end_time - item.processing_start_time) * 1000
        self.console.print(f"  [green]✓[/green] {escape(item.label)} [dim]({elapsed_ms:.0f}ms)[/dim]")

    def skip(self) -> None:
        self.console.print("  [yellow]↷ skipped[/yellow]")

    def finish(self, state: RunState) -> None:
        self.console.print(
            f"\n[bold]Done:[/bold] {len(state.completed)} completed, {len(state.skipped)} skipped"
        )

    def hide(self) -> None:
        pass

    def destroy(self) -> None:
        self.on_interaction = None

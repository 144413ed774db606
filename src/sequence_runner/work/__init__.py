"""
Work layer - Item and run-state definitions.

Items and run state are DATA STRUCTURES that describe the work.
They do NOT execute anything - that's the runner's job.
"""

from .items import ItemsFileError, WorkItem, load_items
from .state import RunError, RunPhase, RunState

__all__ = [
    "WorkItem",
    "ItemsFileError",
    "load_items",
    "RunError",
    "RunPhase",
    "RunState",
]

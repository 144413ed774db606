"""Work item definitions."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from ..constants import DEFAULT_PRIORITY

# camelCase spellings accepted in item files
_ITEM_ALIASES = {
    "isProcessed": "is_processed",
    "isSkipped": "is_skipped",
    "processingStartTime": "processing_start_time",
    "processingEndTime": "processing_end_time",
}


class ItemsFileError(ValueError):
    """Raised when an items file does not hold a list of item mappings."""


@dataclass(eq=False)
class WorkItem:
    """
    One unit of sequenced work.

    Items are data - the caller creates them, the runner moves them through
    pending -> current -> completed | skipped and stamps the timestamps.
    Equality is identity so an item can be tracked across collections.
    """

    priority: float | None = DEFAULT_PRIORITY
    # Item-level override: False forbids skipping this item
    skipable: bool | None = None
    # Fallback auto-advance delay in milliseconds
    duration: float | None = None
    name: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    # Runtime state (set by runner)
    is_processed: bool = False
    is_skipped: bool = False
    processing_start_time: float | None = None
    processing_end_time: float | None = None

    @property
    def effective_priority(self) -> float:
        """Priority used for ordering; a missing priority counts as the default."""
        return DEFAULT_PRIORITY if self.priority is None else self.priority

    @property
    def label(self) -> str:
        """Human-readable label for logs and console output."""
        if self.name:
            return self.name
        return str(self.data.get("id", "item"))

    @classmethod
    def from_dict(cls, data: dict) -> WorkItem:
        """Create an item from a mapping; unknown keys go to the extension bag."""
        known = {f.name for f in fields(cls)} - {"data"}
        kwargs: dict[str, Any] = {}
        extra = dict(data.get("data") or {})
        for key, value in data.items():
            if key == "data":
                continue
            key = _ITEM_ALIASES.get(key, key)
            if key in known:
                kwargs[key] = value
            else:
                extra[key] = value
        return cls(data=extra, **kwargs)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "priority": self.priority,
            "skipable": self.skipable,
            "duration": self.duration,
            "is_processed": self.is_processed,
            "is_skipped": self.is_skipped,
            "processing_start_time": self.processing_start_time,
            "processing_end_time": self.processing_end_time,
            "data": dict(self.data),
        }


def load_items(path: Path) -> list[WorkItem]:
    """
    Load work items from a YAML file.

    Accepts either a top-level list of item mappings or a mapping with an
    ``items`` list.

    Args:
        path: Path to the YAML file

    Returns:
        Items in file order

    Raises:
        ItemsFileError: If the file does not describe a list of mappings
    """
    with open(path) as f:
        raw = yaml.safe_load(f)

    if isinstance(raw, dict):
        raw = raw.get("items")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ItemsFileError(f"{path}: expected a list of items")

    items = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ItemsFileError(f"{path}: item {idx} is not a mapping")
        items.append(WorkItem.from_dict(entry))
    return items

"""
Delegates layer - Presentation of work items.

Delegates show items to a user. Runners call them at each transition and
never depend on one being present.
"""

from .console import ConsoleDelegate

__all__ = ["ConsoleDelegate"]

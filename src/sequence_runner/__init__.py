"""
Sequence Runner (seqr) - Sequential work-item processing engine

Consumes an ordered set of work items one at a time:
- Optional priority ordering (stable, highest first)
- Pluggable presentation delegates (sync or async steps)
- Duration-based auto-advance when nothing drives completion
- Progress, skip and error reporting through event hooks
"""

__version__ = "0.1.0"
__package_name__ = "sequence-runner"
__short_name__ = "seqr"

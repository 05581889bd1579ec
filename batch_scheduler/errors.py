from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .conflicts import ConflictReport


class BatchSchedulingError(Exception):
    """Base class for every error raised by the scheduling engine."""


class InvalidIntervalError(BatchSchedulingError, ValueError):
    """Raised when an interval does not start strictly before it ends."""

    def __init__(self, start: datetime, end: datetime) -> None:
        super().__init__(f"Start time must be before end time (start={start.isoformat()}, end={end.isoformat()}).")
        self.start = start
        self.end = end


class SchedulingConflictError(BatchSchedulingError):
    """Raised by the write-path gate when a proposed batch collides with existing ones."""

    def __init__(self, report: "ConflictReport", message: str) -> None:
        super().__init__(message)
        self.report = report


class SnapshotError(BatchSchedulingError):
    pass


class PolicyError(BatchSchedulingError, ValueError):
    pass

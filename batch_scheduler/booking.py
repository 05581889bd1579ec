from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from .errors import InvalidIntervalError


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidIntervalError(self.start, self.end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return has_time_overlap(self.start, self.end, other.start, other.end)

    def intersection(self, other: "TimeInterval") -> "TimeInterval | None":
        return overlap_range(self.start, self.end, other.start, other.end)


def has_time_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Return True when two batch windows would occupy the equipment at the same time.

    A batch holds its equipment from ``start`` up to but not including ``end``.
    One batch may begin the moment the previous one finishes, so back-to-back
    runs such as 08:00-16:00 and 16:00-20:00 are not a double booking.
    """
    return start_a < end_b and end_a > start_b


def overlap_range(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> TimeInterval | None:
    """Return the shared part of two intervals, or None when they do not overlap."""
    if not has_time_overlap(start_a, end_a, start_b, end_b):
        return None

    shared_start = max(start_a, start_b)
    shared_end = min(end_a, end_b)
    # Only reachable with an unvalidated, zero-length input.
    if shared_start >= shared_end:
        return None
    return TimeInterval(shared_start, shared_end)

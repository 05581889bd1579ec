from __future__ import annotations

from datetime import datetime

from .conflicts import ConflictReport

_MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_clock_time(value: datetime) -> str:
    """Render ``value`` as a 12-hour clock time, e.g. ``8:00 AM``."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {meridiem}"


def format_date_time(value: datetime) -> str:
    """Render ``value`` as ``Jul 24, 8:00 AM``."""
    return f"{_MONTH_ABBREVIATIONS[value.month - 1]} {value.day}, {format_clock_time(value)}"


def format_time_range(start: datetime, end: datetime) -> str:
    """Render a time range, collapsing the end to a clock time when both bounds share a calendar day."""
    if start.date() == end.date():
        return f"{format_date_time(start)} - {format_clock_time(end)}"
    return f"{format_date_time(start)} - {format_date_time(end)}"


def format_conflict_message(report: ConflictReport) -> str:
    """Build the one-line message shown next to a booking form.

    Returns an empty string when there is nothing to report; callers should
    still gate on ``report.has_conflicts`` rather than on the empty string.
    A single conflict names the colliding batch and its full time range, more
    than one collapses into a count.
    """
    if not report.has_conflicts:
        return ""

    if len(report.conflicts) == 1:
        batch = report.conflicts[0].batch
        return f'Scheduling conflict detected with "{batch.product_name}" ({format_time_range(batch.start, batch.end)})'

    return (
        f"{len(report.conflicts)} scheduling conflicts detected. "
        "Please adjust the time or choose different equipment."
    )


def describe_conflicts(report: ConflictReport) -> list[str]:
    """One line per colliding batch, naming it and the window it shares with the request."""
    return [
        f'"{conflict.batch.product_name}" ({conflict.batch.batch_id}): '
        f"overlap {format_time_range(conflict.overlap_start, conflict.overlap_end)}"
        for conflict in report.conflicts
    ]

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Collection, Iterable
import logging

from .booking import TimeInterval, has_time_overlap, overlap_range
from .errors import InvalidIntervalError, SchedulingConflictError
from .models import Batch, BatchStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictDetail:
    batch: Batch
    overlap: TimeInterval

    @property
    def overlap_start(self) -> datetime:
        return self.overlap.start

    @property
    def overlap_end(self) -> datetime:
        return self.overlap.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "batch": self.batch.to_dict(),
            "overlap_start": self.overlap.start.isoformat(),
            "overlap_end": self.overlap.end.isoformat(),
        }


@dataclass(frozen=True)
class ConflictReport:
    conflicts: tuple[ConflictDetail, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0

    def __len__(self) -> int:
        return len(self.conflicts)

    def __iter__(self):
        return iter(self.conflicts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_conflicts": self.has_conflicts,
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
        }


def detect_conflicts(
    equipment_id: str,
    start: datetime,
    end: datetime,
    batches: Iterable[Batch],
    exclude_id: str | None = None,
    *,
    ignore_statuses: Collection[BatchStatus] = (),
) -> ConflictReport:
    """Collect every batch on ``equipment_id`` whose time range overlaps ``[start, end)``.

    Conflicts are returned in the same relative order as ``batches``. The batch
    whose id equals ``exclude_id`` (the one being edited) is never reported.
    Statuses are not considered unless ``ignore_statuses`` names some, in which
    case batches in those statuses are dropped before the equipment filter.

    Raises InvalidIntervalError when ``start`` is not strictly before ``end``.
    """
    equipment_id = _require_equipment_id(equipment_id)
    _require_valid_interval(start, end)

    candidates = _filter_candidates(batches, equipment_id, exclude_id, ignore_statuses)
    report = _collect_conflicts(start, end, candidates)
    logger.debug(
        "Checked %s %s-%s: %d conflict(s)",
        equipment_id,
        start.isoformat(),
        end.isoformat(),
        len(report),
    )
    return report


def ensure_no_conflicts(
    equipment_id: str,
    start: datetime,
    end: datetime,
    batches: Iterable[Batch],
    exclude_id: str | None = None,
    *,
    ignore_statuses: Collection[BatchStatus] = (),
) -> ConflictReport:
    """Re-run detection right before a write and refuse the write on any conflict."""
    from .reporting import format_conflict_message

    report = detect_conflicts(
        equipment_id,
        start,
        end,
        batches,
        exclude_id,
        ignore_statuses=ignore_statuses,
    )
    if report.has_conflicts:
        message = format_conflict_message(report)
        logger.info("Rejected booking on %s: %s", equipment_id, message)
        raise SchedulingConflictError(report, message)
    return report


class ConflictIndex:
    """Snapshot of batches pre-indexed by equipment id for repeated queries.

    Each equipment keeps its batches sorted by start time so a query only
    walks the batches that start before the candidate ends. Results are
    identical to ``detect_conflicts`` over the same snapshot, in snapshot order.
    """

    def __init__(self, batches: Iterable[Batch]) -> None:
        self._entries: dict[str, list[tuple[datetime, int, Batch]]] = {}
        for position, batch in enumerate(batches):
            self._entries.setdefault(batch.equipment_id, []).append((batch.start, position, batch))

        self._starts: dict[str, list[datetime]] = {}
        for equipment_id, entries in self._entries.items():
            entries.sort(key=lambda entry: (entry[0], entry[1]))
            self._starts[equipment_id] = [entry[0] for entry in entries]

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    @property
    def equipment_ids(self) -> list[str]:
        return sorted(self._entries)

    def batches_for(self, equipment_id: str) -> list[Batch]:
        entries = self._entries.get(equipment_id, [])
        return [batch for _, _, batch in sorted(entries, key=lambda entry: entry[1])]

    def detect(
        self,
        equipment_id: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
        *,
        ignore_statuses: Collection[BatchStatus] = (),
    ) -> ConflictReport:
        equipment_id = _require_equipment_id(equipment_id)
        _require_valid_interval(start, end)

        entries = self._entries.get(equipment_id)
        if not entries:
            return ConflictReport()

        # Batches at or past this cut start no earlier than the candidate ends.
        cut = bisect_left(self._starts[equipment_id], end)
        hits = [
            (position, batch)
            for _, position, batch in entries[:cut]
            if batch.end > start and batch.batch_id != exclude_id and batch.status not in ignore_statuses
        ]
        hits.sort(key=lambda hit: hit[0])
        return _collect_conflicts(start, end, [batch for _, batch in hits])


def _filter_candidates(
    batches: Iterable[Batch],
    equipment_id: str,
    exclude_id: str | None,
    ignore_statuses: Collection[BatchStatus],
) -> list[Batch]:
    candidates = batches
    if ignore_statuses:
        candidates = [batch for batch in candidates if batch.status not in ignore_statuses]
    return [batch for batch in candidates if batch.equipment_id == equipment_id and batch.batch_id != exclude_id]


def _collect_conflicts(start: datetime, end: datetime, candidates: Iterable[Batch]) -> ConflictReport:
    conflicts: list[ConflictDetail] = []
    for batch in candidates:
        if not has_time_overlap(start, end, batch.start, batch.end):
            continue
        overlap = overlap_range(start, end, batch.start, batch.end)
        if overlap is not None:
            conflicts.append(ConflictDetail(batch=batch, overlap=overlap))
    return ConflictReport(tuple(conflicts))


def _require_valid_interval(start: datetime, end: datetime) -> None:
    if start >= end:
        raise InvalidIntervalError(start, end)


def _require_equipment_id(equipment_id: str | None) -> str:
    if equipment_id is None or not str(equipment_id).strip():
        raise ValueError("equipment_id must not be empty")
    return str(equipment_id)

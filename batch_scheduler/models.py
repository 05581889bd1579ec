from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .booking import TimeInterval
from .errors import InvalidIntervalError


class BatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class BatchPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


@dataclass(frozen=True)
class Batch:
    batch_id: str
    equipment_id: str
    product_name: str
    start: datetime
    end: datetime
    status: BatchStatus = BatchStatus.SCHEDULED
    priority: BatchPriority | None = None
    batch_size: float | None = None
    operator: str | None = None
    recipe_id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidIntervalError(self.start, self.end)

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "batch_id": self.batch_id,
            "equipment_id": self.equipment_id,
            "product_name": self.product_name,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "status": self.status.value,
        }
        if self.priority is not None:
            payload["priority"] = self.priority.value
        if self.batch_size is not None:
            payload["batch_size"] = self.batch_size
        for key in ("operator", "recipe_id", "notes"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        if self.created_at is not None:
            payload["created_at"] = self.created_at.isoformat()
        if self.updated_at is not None:
            payload["updated_at"] = self.updated_at.isoformat()
        return payload

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Batch":
        # "id"/"start_time"/"end_time" are the field names used by the scheduler frontend.
        batch_id = data.get("batch_id", data.get("id"))
        start = data.get("start", data.get("start_time"))
        end = data.get("end", data.get("end_time"))
        if batch_id is None or start is None or end is None:
            raise ValueError("batch requires batch_id, start and end")

        priority = data.get("priority")
        batch_size = data.get("batch_size")
        return Batch(
            batch_id=str(batch_id),
            equipment_id=str(data["equipment_id"]),
            product_name=str(data.get("product_name", "")),
            start=parse_timestamp(start),
            end=parse_timestamp(end),
            status=BatchStatus(str(data.get("status", BatchStatus.SCHEDULED.value))),
            priority=BatchPriority(str(priority)) if priority is not None else None,
            batch_size=float(batch_size) if batch_size is not None else None,
            operator=_optional_str(data.get("operator")),
            recipe_id=_optional_str(data.get("recipe_id")),
            notes=_optional_str(data.get("notes")),
            created_at=parse_timestamp(data["created_at"]) if data.get("created_at") is not None else None,
            updated_at=parse_timestamp(data["updated_at"]) if data.get("updated_at") is not None else None,
        )


def parse_timestamp(value: Any) -> datetime:
    """Accept datetimes as-is and ISO-8601 strings (including a trailing "Z")."""
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _optional_str(value: Any) -> str | None:
    return str(value) if value is not None else None

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any
import logging
import math

import yaml

from .errors import PolicyError
from .models import Batch, BatchPriority, BatchStatus, parse_timestamp

logger = logging.getLogger(__name__)

MODE_CREATE = "create"
MODE_EDIT = "edit"
PAST_START_MODES = ("allow", "create", "always")


@dataclass(frozen=True)
class BookingPolicy:
    """Form-level rules applied before a batch is handed to conflict detection."""

    require_operator: bool = False
    require_batch_size: bool = False
    past_start: str = "create"
    lock_equipment_on_edit: bool = True
    ignored_statuses: frozenset[BatchStatus] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.past_start not in PAST_START_MODES:
            raise PolicyError(f"past_start must be one of {', '.join(PAST_START_MODES)}")

    def rejects_past_start(self, mode: str) -> bool:
        if self.past_start == "always":
            return True
        return self.past_start == "create" and mode == MODE_CREATE

    def to_dict(self) -> dict[str, Any]:
        return {
            "require_operator": self.require_operator,
            "require_batch_size": self.require_batch_size,
            "past_start": self.past_start,
            "lock_equipment_on_edit": self.lock_equipment_on_edit,
            "ignored_statuses": sorted(status.value for status in self.ignored_statuses),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "BookingPolicy":
        unknown = set(data) - {
            "require_operator",
            "require_batch_size",
            "past_start",
            "lock_equipment_on_edit",
            "ignored_statuses",
        }
        if unknown:
            raise PolicyError(f"Unknown policy keys: {', '.join(sorted(unknown))}")

        try:
            ignored = frozenset(BatchStatus(str(value)) for value in data.get("ignored_statuses") or [])
        except ValueError as error:
            raise PolicyError(f"Invalid status in ignored_statuses: {error}") from error

        return BookingPolicy(
            require_operator=bool(data.get("require_operator", False)),
            require_batch_size=bool(data.get("require_batch_size", False)),
            past_start=str(data.get("past_start", "create")),
            lock_equipment_on_edit=bool(data.get("lock_equipment_on_edit", True)),
            ignored_statuses=ignored,
        )


DEFAULT_POLICY = BookingPolicy()


def load_policy(path: str | Path | None) -> BookingPolicy:
    """Read a policy YAML file; a missing path or empty file yields the defaults."""
    if path is None:
        return DEFAULT_POLICY

    policy_path = Path(path)
    try:
        payload = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Policy file %s not found, using defaults", policy_path)
        return DEFAULT_POLICY
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as error:
        raise PolicyError(f"Failed to read policy file: {policy_path}") from error

    if payload is None:
        return DEFAULT_POLICY
    if not isinstance(payload, dict):
        raise PolicyError("top-level policy YAML is not a mapping")
    return BookingPolicy.from_dict(payload)


@dataclass(frozen=True)
class BatchDraft:
    """Form input for a batch that is being created or edited."""

    equipment_id: str = ""
    product_name: str = ""
    start: datetime | None = None
    end: datetime | None = None
    batch_size: Any = None
    priority: BatchPriority = BatchPriority.NORMAL
    operator: str = ""
    recipe_id: str = ""
    notes: str = ""

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "BatchDraft":
        start = data.get("start", data.get("start_time"))
        end = data.get("end", data.get("end_time"))
        priority = data.get("priority")
        return BatchDraft(
            equipment_id=str(data.get("equipment_id") or "").strip(),
            product_name=str(data.get("product_name") or ""),
            start=parse_timestamp(start) if start else None,
            end=parse_timestamp(end) if end else None,
            batch_size=data.get("batch_size"),
            priority=BatchPriority(str(priority)) if priority else BatchPriority.NORMAL,
            operator=str(data.get("operator") or ""),
            recipe_id=str(data.get("recipe_id") or ""),
            notes=str(data.get("notes") or ""),
        )

    def to_batch(self, batch_id: str, now: datetime, original: Batch | None = None) -> Batch:
        """Build the Batch this draft describes; call only after validation passed."""
        if self.start is None or self.end is None:
            raise ValueError("start and end are required")
        return Batch(
            batch_id=batch_id,
            equipment_id=self.equipment_id,
            product_name=self.product_name.strip(),
            start=self.start,
            end=self.end,
            status=original.status if original is not None else BatchStatus.SCHEDULED,
            priority=self.priority,
            batch_size=_parse_batch_size(self.batch_size),
            operator=self.operator.strip() or None,
            recipe_id=self.recipe_id.strip() or None,
            notes=self.notes.strip() or None,
            created_at=original.created_at if original is not None else now,
            updated_at=now,
        )


def validate_batch_draft(
    draft: BatchDraft,
    policy: BookingPolicy = DEFAULT_POLICY,
    *,
    mode: str = MODE_CREATE,
    now: datetime | None = None,
    original: Batch | None = None,
) -> dict[str, str]:
    """Return field name -> error message for every rule the draft breaks."""
    if mode not in (MODE_CREATE, MODE_EDIT):
        raise ValueError(f"mode must be '{MODE_CREATE}' or '{MODE_EDIT}'")

    errors: dict[str, str] = {}
    if not draft.equipment_id:
        errors["equipment_id"] = "Equipment is required"
    elif (
        mode == MODE_EDIT
        and policy.lock_equipment_on_edit
        and original is not None
        and draft.equipment_id != original.equipment_id
    ):
        errors["equipment_id"] = "Equipment cannot be changed while editing a batch"

    if not draft.product_name.strip():
        errors["product_name"] = "Product name is required"
    if draft.start is None:
        errors["start_time"] = "Start time is required"
    if draft.end is None:
        errors["end_time"] = "End time is required"

    if draft.start is not None and draft.end is not None:
        if draft.end <= draft.start:
            errors["end_time"] = "End time must be after start time"
        effective_now = now or datetime.now(draft.start.tzinfo)
        if policy.rejects_past_start(mode) and draft.start < effective_now:
            errors["start_time"] = "Start time cannot be in the past"

    if _is_blank(draft.batch_size):
        if policy.require_batch_size:
            errors["batch_size"] = "Batch size is required"
    elif _parse_batch_size(draft.batch_size) is None:
        errors["batch_size"] = "Batch size must be a positive number"

    if policy.require_operator and not draft.operator.strip():
        errors["operator"] = "Operator is required"

    return errors


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_batch_size(value: Any) -> float | None:
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        size = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(size) or size <= 0:
        return None
    return size

from .booking import TimeInterval, has_time_overlap, overlap_range
from .conflicts import ConflictDetail, ConflictIndex, ConflictReport, detect_conflicts, ensure_no_conflicts
from .errors import (
	BatchSchedulingError,
	InvalidIntervalError,
	PolicyError,
	SchedulingConflictError,
	SnapshotError,
)
from .models import Batch, BatchPriority, BatchStatus
from .reporting import describe_conflicts, format_conflict_message, format_time_range
from .snapshot import load_batch_snapshot
from .validation import BatchDraft, BookingPolicy, load_policy, validate_batch_draft

__all__ = [
	"TimeInterval",
	"has_time_overlap",
	"overlap_range",
	"ConflictDetail",
	"ConflictIndex",
	"ConflictReport",
	"detect_conflicts",
	"ensure_no_conflicts",
	"BatchSchedulingError",
	"InvalidIntervalError",
	"PolicyError",
	"SchedulingConflictError",
	"SnapshotError",
	"Batch",
	"BatchPriority",
	"BatchStatus",
	"describe_conflicts",
	"format_conflict_message",
	"format_time_range",
	"load_batch_snapshot",
	"BatchDraft",
	"BookingPolicy",
	"load_policy",
	"validate_batch_draft",
]

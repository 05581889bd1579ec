from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import sys
import traceback

from batch_scheduler import (
    Batch,
    BatchPriority,
    BatchStatus,
    ConflictIndex,
    describe_conflicts,
    detect_conflicts,
    format_conflict_message,
    load_batch_snapshot,
)


def _sample_batches() -> list[Batch]:
    return [
        Batch(
            batch_id="batch-001",
            equipment_id="eq-001",
            product_name="Pharmaceutical Compound XR-25",
            start=datetime(2024, 7, 24, 8, 0, tzinfo=timezone.utc),
            end=datetime(2024, 7, 24, 16, 0, tzinfo=timezone.utc),
            status=BatchStatus.SCHEDULED,
            priority=BatchPriority.HIGH,
            batch_size=850,
            operator="Sarah Johnson",
        ),
        Batch(
            batch_id="batch-002",
            equipment_id="eq-003",
            product_name="Industrial Polymer P-402",
            start=datetime(2024, 7, 24, 6, 0, tzinfo=timezone.utc),
            end=datetime(2024, 7, 24, 14, 0, tzinfo=timezone.utc),
            status=BatchStatus.IN_PROGRESS,
            priority=BatchPriority.NORMAL,
            batch_size=450,
            operator="Mike Chen",
        ),
    ]


def main(argv: list[str]) -> int:
    print("[INFO] Batch Scheduler Quick Check")

    if len(argv) > 1:
        snapshot_path = Path(argv[1])
        batches = load_batch_snapshot(snapshot_path)
        print(f"[OK] Loaded snapshot: {snapshot_path.resolve()} ({len(batches)} batches)")
    else:
        batches = _sample_batches()
        print(f"[OK] Using built-in sample batches ({len(batches)} batches)")

    start = datetime(2024, 7, 24, 12, 0, tzinfo=timezone.utc)
    end = datetime(2024, 7, 24, 20, 0, tzinfo=timezone.utc)
    report = detect_conflicts("eq-001", start, end, batches)
    indexed = ConflictIndex(batches).detect("eq-001", start, end)
    if indexed != report:
        print("[ERROR] Indexed detection disagrees with linear detection.")
        return 1

    print(f"[OK] Candidate eq-001 {start.isoformat()} ~ {end.isoformat()}")
    print(f"[OK] Has conflicts: {report.has_conflicts}")
    for line in describe_conflicts(report):
        print(f"[OK]   {line}")
    if report.has_conflicts:
        print(f"[OK] Message: {format_conflict_message(report)}")

    print("[DONE] Quick check completed successfully.")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main(sys.argv))
    except Exception:
        print("[ERROR] Quick check failed.")
        traceback.print_exc()
        raise SystemExit(1)

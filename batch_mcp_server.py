from __future__ import annotations

from datetime import datetime
from pathlib import Path
import os

from mcp.server.fastmcp import FastMCP

from batch_scheduler import BatchStatus, detect_conflicts, load_batch_snapshot, load_policy
from batch_scheduler.logging_config import setup_logging
from batch_scheduler.reporting import describe_conflicts, format_conflict_message

mcp = FastMCP(
    "Batch Scheduler MCP Server",
    instructions="Check production batches for equipment double-booking against the current batch snapshot.",
    json_response=True,
)

DEFAULT_SNAPSHOT_PATH = Path(__file__).parent / "data" / "batches.yaml"


def _snapshot_path() -> Path:
    return Path(os.getenv("BATCH_SNAPSHOT_PATH", str(DEFAULT_SNAPSHOT_PATH)))


@mcp.resource("batch://statuses")
async def list_statuses() -> list[str]:
    """List batch lifecycle status values."""
    return [status.value for status in BatchStatus]


@mcp.tool()
def list_batches(equipment_id: str | None = None) -> list[dict]:
    """Return batches from the snapshot, optionally filtered by equipment."""
    batches = load_batch_snapshot(_snapshot_path())
    filtered = [batch for batch in batches if equipment_id is None or batch.equipment_id == equipment_id]
    return [batch.to_dict() for batch in filtered]


@mcp.tool()
def check_batch_conflicts(
    equipment_id: str,
    start_iso: str,
    end_iso: str,
    exclude_id: str | None = None,
) -> dict:
    """Check a proposed batch window on one piece of equipment.

    start_iso and end_iso are ISO-8601 timestamps. They must carry a UTC offset
    (e.g. 2024-07-24T12:00:00+00:00 or ...Z) when the snapshot does, and none
    when it does not. The bundled snapshot uses UTC offsets.
    """
    policy = load_policy(os.getenv("BATCH_POLICY_PATH"))
    try:
        report = detect_conflicts(
            equipment_id,
            datetime.fromisoformat(start_iso),
            datetime.fromisoformat(end_iso),
            load_batch_snapshot(_snapshot_path()),
            exclude_id,
            ignore_statuses=policy.ignored_statuses,
        )
    except TypeError as error:
        raise ValueError(
            "start_iso and end_iso must carry a UTC offset exactly when the batch snapshot does."
        ) from error
    return {
        **report.to_dict(),
        "message": format_conflict_message(report),
        "details": describe_conflicts(report),
    }


def main() -> None:
    setup_logging()
    mcp.run()


if __name__ == "__main__":
    main()

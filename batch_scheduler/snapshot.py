from __future__ import annotations

from pathlib import Path
from typing import Any
import logging

import yaml

from .errors import SnapshotError
from .models import Batch

logger = logging.getLogger(__name__)


def load_batch_snapshot(path: str | Path) -> list[Batch]:
    """Read a read-only snapshot of batches exported by the reservation store.

    The file holds either a YAML list of batch mappings or a mapping with a
    ``batches`` list. Any unreadable file or malformed row raises SnapshotError:
    a partial or empty snapshot would let conflicting bookings through.
    """
    snapshot_path = Path(path)
    try:
        payload = yaml.safe_load(snapshot_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as error:
        raise SnapshotError(f"Failed to read batch snapshot: {snapshot_path}") from error

    rows = parse_batch_rows(payload, source=snapshot_path.name)
    logger.debug("Loaded %d batch(es) from %s", len(rows), snapshot_path)
    return rows


def parse_batch_rows(payload: Any, source: str = "payload") -> list[Batch]:
    if payload is None:
        return []
    if isinstance(payload, dict):
        if "batches" not in payload:
            raise SnapshotError(f"{source}: mapping has no 'batches' key")
        payload = payload["batches"]
        if payload is None:
            return []
    if not isinstance(payload, list):
        raise SnapshotError(f"{source}: top-level batches value is not a list")

    batches: list[Batch] = []
    seen_ids: set[str] = set()
    for index, row in enumerate(payload):
        if not isinstance(row, dict):
            raise SnapshotError(f"{source}: row {index} is not a mapping")
        try:
            batch = Batch.from_dict(row)
        except (KeyError, TypeError, ValueError) as error:
            raise SnapshotError(f"{source}: row {index} is not a valid batch ({error})") from error
        if batch.batch_id in seen_ids:
            raise SnapshotError(f"{source}: duplicate batch_id {batch.batch_id!r}")
        seen_ids.add(batch.batch_id)
        batches.append(batch)
    return batches

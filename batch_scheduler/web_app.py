from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable
import logging
import os

from flask import Flask, jsonify, request

from .conflicts import ConflictReport, detect_conflicts
from .errors import InvalidIntervalError, SnapshotError
from .logging_config import setup_logging
from .models import Batch, BatchStatus, parse_timestamp
from .reporting import describe_conflicts, format_conflict_message
from .snapshot import parse_batch_rows
from .validation import MODE_CREATE, MODE_EDIT, BatchDraft, BookingPolicy, load_policy, validate_batch_draft

logger = logging.getLogger(__name__)


def create_app(
    policy: BookingPolicy | None = None,
    policy_path: str | Path | None = None,
    now_provider: Callable[[], datetime] | None = None,
) -> Flask:
    app = Flask(__name__)
    active_policy = policy or load_policy(policy_path)

    def _now() -> datetime | None:
        # None lets validation read the clock in the draft's own offset
        return now_provider() if now_provider is not None else None

    def _serialize_report(report: ConflictReport) -> dict[str, Any]:
        return {
            **report.to_dict(),
            "message": format_conflict_message(report),
            "details": describe_conflicts(report),
        }

    @app.after_request
    def add_cors_headers(response: Any) -> Any:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.get("/api/policy")
    def get_policy() -> Any:
        return jsonify({"ok": True, "policy": active_policy.to_dict()})

    @app.get("/api/batch-statuses")
    def get_batch_statuses() -> Any:
        return jsonify({"ok": True, "statuses": [status.value for status in BatchStatus]})

    @app.post("/api/conflicts/check")
    def check_conflicts() -> Any:
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"ok": False, "message": "Request body must be a JSON object."}), 400
        equipment_id = str(payload.get("equipment_id", "")).strip()
        if not equipment_id:
            return jsonify({"ok": False, "message": "equipment_id is required."}), 400

        try:
            start = parse_timestamp(payload.get("start", ""))
            end = parse_timestamp(payload.get("end", ""))
        except (TypeError, ValueError):
            return jsonify({"ok": False, "message": "start and end must be ISO-8601 timestamps."}), 400

        try:
            batches = parse_batch_rows(payload.get("batches", []), source="batches")
        except SnapshotError as error:
            return jsonify({"ok": False, "message": str(error)}), 400

        exclude_id = payload.get("exclude_id")
        try:
            report = detect_conflicts(
                equipment_id,
                start,
                end,
                batches,
                str(exclude_id) if exclude_id else None,
                ignore_statuses=active_policy.ignored_statuses,
            )
        except InvalidIntervalError as error:
            return jsonify({"ok": False, "error": "invalid_interval", "message": str(error)}), 400
        except TypeError:
            # naive and timezone-aware timestamps cannot be compared
            return jsonify({"ok": False, "message": "Timestamps must all carry a UTC offset or none may."}), 400

        return jsonify({"ok": True, **_serialize_report(report)})

    @app.post("/api/batches/validate")
    def validate_batch() -> Any:
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"ok": False, "message": "Request body must be a JSON object."}), 400
        mode = str(payload.get("mode", MODE_CREATE)).strip().lower()
        if mode not in (MODE_CREATE, MODE_EDIT):
            return jsonify({"ok": False, "message": "mode must be 'create' or 'edit'."}), 400

        batch_payload = payload.get("batch")
        if not isinstance(batch_payload, dict):
            return jsonify({"ok": False, "message": "batch is required."}), 400

        try:
            draft = BatchDraft.from_dict(batch_payload)
            batches = parse_batch_rows(payload.get("batches", []), source="batches")
            original = _resolve_original(payload, batches) if mode == MODE_EDIT else None
        except (SnapshotError, KeyError, TypeError, ValueError) as error:
            return jsonify({"ok": False, "message": str(error)}), 400

        if mode == MODE_EDIT and original is None:
            return jsonify({"ok": False, "message": "The batch being edited was not found."}), 404

        report = ConflictReport()
        try:
            errors = validate_batch_draft(draft, active_policy, mode=mode, now=_now(), original=original)
            if draft.equipment_id and draft.start is not None and draft.end is not None and draft.start < draft.end:
                report = detect_conflicts(
                    draft.equipment_id,
                    draft.start,
                    draft.end,
                    batches,
                    original.batch_id if original is not None else None,
                    ignore_statuses=active_policy.ignored_statuses,
                )
        except TypeError:
            return jsonify({"ok": False, "message": "Timestamps must all carry a UTC offset or none may."}), 400

        if errors or report.has_conflicts:
            logger.info(
                "Batch %s rejected on %s: %d field error(s), %d conflict(s)",
                mode,
                draft.equipment_id or "-",
                len(errors),
                len(report),
            )

        return jsonify(
            {
                "ok": not errors and not report.has_conflicts,
                "mode": mode,
                "errors": errors,
                **_serialize_report(report),
            }
        )

    return app


def _resolve_original(payload: dict[str, Any], batches: list[Batch]) -> Batch | None:
    original_payload = payload.get("original")
    if isinstance(original_payload, dict):
        return Batch.from_dict(original_payload)

    batch_id = str(payload.get("batch_id", "")).strip()
    if not batch_id:
        raise ValueError("edit mode requires the original batch or its batch_id.")
    return next((batch for batch in batches if batch.batch_id == batch_id), None)


if __name__ == "__main__":
    setup_logging()
    app = create_app(policy_path=os.getenv("BATCH_POLICY_PATH"))
    app.run(host="127.0.0.1", port=5000, debug=False)

"""Signed audit trail for user import runs.

Every build/report run appends one JSON line to ``import-events.jsonl``.
Lines carry an HMAC-SHA256 ``signature`` over their canonical JSON form
when ``AUDIT_LOG_SIGNING_KEY`` is set (load_settings() exports the Docker
secret into the environment), so tampering is detectable with
verify_audit_log().
"""
from __future__ import annotations
import hashlib
import hmac
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Literal, Optional

logger = logging.getLogger(__name__)

AUDIT_FILE_NAME = "import-events.jsonl"
AUDIT_LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"))
AUDIT_LOG_FILE = AUDIT_LOG_DIR / AUDIT_FILE_NAME

EventType = Literal["import_build", "import_report"]


def set_audit_log_dir(path: Path) -> None:
    """Point the audit trail at another directory (from settings)."""
    global AUDIT_LOG_DIR, AUDIT_LOG_FILE
    AUDIT_LOG_DIR = Path(path)
    AUDIT_LOG_FILE = AUDIT_LOG_DIR / AUDIT_FILE_NAME


def _signature(event: dict[str, Any]) -> Optional[str]:
    key = os.environ.get("AUDIT_LOG_SIGNING_KEY", "").strip()
    if not key:
        return None
    payload = json.dumps(event, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hmac.new(key.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def _append_line(line: str) -> None:
    AUDIT_LOG_DIR.mkdir(mode=0o700, parents=True, exist_ok=True)
    # Created owner-only; appends never widen the mode
    fd = os.open(AUDIT_LOG_FILE, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
    with os.fdopen(fd, "a", encoding="utf-8") as handle:
        handle.write(line + "\n")


def log_import_event(
    event_type: EventType,
    *,
    operator: str = "system",
    tenant_id: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> str:
    """Append one import run to the audit trail.

    Args:
        event_type: import_build or import_report
        operator: Who ran the import ("cli", "import-api", an X-Operator value)
        tenant_id: Target tenant, if any
        details: Counts, hash algorithm or the hard failure code
        success: False when the run aborted

    Returns:
        The run id written with the event
    """
    event = {
        "run_id": uuid.uuid4().hex,
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        "event_type": event_type,
        "operator": operator,
        "tenant_id": tenant_id,
        "success": success,
        "details": dict(details or {}),
    }
    signature = _signature(event)
    if signature is not None:
        event["signature"] = signature
    _append_line(json.dumps(event, ensure_ascii=False))
    logger.debug(f"Audit event {event['run_id']} ({event_type}) written to {AUDIT_LOG_FILE}")
    return event["run_id"]


def safe_log_import_event(event_type: EventType, **kwargs: Any) -> bool:
    """log_import_event() for request/CLI paths: failures are logged, not raised."""
    try:
        log_import_event(event_type, **kwargs)
    except Exception as e:
        logger.warning(f"Failed to log {event_type} audit event: {e}")
        return False
    return True


def _read_events() -> Iterator[Optional[dict[str, Any]]]:
    """Yield each non-blank line as a dict, or None when it is not valid JSON."""
    with AUDIT_LOG_FILE.open(encoding="utf-8") as handle:
        for raw in handle:
            if raw.isspace():
                continue
            try:
                yield json.loads(raw)
            except ValueError:
                yield None


def verify_audit_log() -> tuple[int, int]:
    """Recompute event signatures.

    Returns:
        (events, events with a valid signature); unsigned, corrupt or
        tampered lines count only toward the first number
    """
    if not AUDIT_LOG_FILE.exists():
        return 0, 0
    events = valid = 0
    for event in _read_events():
        events += 1
        if not isinstance(event, dict):
            continue
        stored = event.pop("signature", None)
        expected = _signature(event)
        if stored and expected and hmac.compare_digest(stored, expected):
            valid += 1
    return events, valid

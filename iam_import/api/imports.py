"""Dry-run user import API endpoints.

These endpoints build uploadAccount requests and import results exactly as
the import client would, without contacting the identity provider.

Architecture:
    POST /import/v1/users:build  ─┐
                                  ├──> core.user_import_builder ──> request / result JSON
    POST /import/v1/users:report ─┘

Binary fields (passwordHash, passwordSalt, hash.key, hash.saltSeparator)
travel as web-safe base64 strings and are decoded before validation.
"""

from __future__ import annotations
import logging
from typing import Any

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from iam_import.core import audit
from iam_import.core.encoding import decode_options_document, decode_user_document
from iam_import.core.exceptions import ErrorCode, UserImportError
from iam_import.core.models import HASH_ALGORITHMS
from iam_import.core.user_import_builder import UserImportBuilder
from iam_import.core.validators import validate_upload_account_user

bp = Blueprint("imports", __name__, url_prefix="/import/v1")

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Request Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _config():
    return current_app.config["IMPORT_CONFIG"]


def _json_body() -> dict:
    """Return the JSON object body or raise a 400."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object")
    return payload


def _builder_from_payload(payload: dict) -> UserImportBuilder:
    """Decode the users/options documents and run the builder."""
    users = payload.get("users")
    if not isinstance(users, list):
        raise UserImportError(ErrorCode.INVALID_ARGUMENT, '"users" must be an array of user records.')
    try:
        users = [decode_user_document(user) for user in users]
        options = decode_options_document(payload.get("options"))
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc

    cfg = _config()
    return UserImportBuilder(
        users,
        options,
        user_request_validator=validate_upload_account_user if cfg.validate_records else None,
        max_users=cfg.max_users,
    )


def _failed_uploads(payload: dict) -> list[dict[str, Any]]:
    failures = payload.get("failures", [])
    if not isinstance(failures, list):
        raise BadRequest('"failures" must be an array')
    for failure in failures:
        if not isinstance(failure, dict) or not isinstance(failure.get("index"), int):
            raise BadRequest('Each failure must be an object with an integer "index"')
    return failures


def _audit(event_type: audit.EventType, details: dict, success: bool = True) -> None:
    if not _config().audit_enabled:
        return
    audit.safe_log_import_event(
        event_type,
        operator=request.headers.get("X-Operator", "import-api"),
        tenant_id=request.headers.get("X-Tenant-Id"),
        details=details,
        success=success,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Error Handler
# ─────────────────────────────────────────────────────────────────────────────

@bp.errorhandler(UserImportError)
def handle_user_import_error(error: UserImportError):
    """Hard import failures (hash options, batch size) become 400 responses."""
    logger.warning(f"User import rejected: {error.code}: {error.message}")
    return jsonify({"error": error.to_dict()}), 400


# ─────────────────────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/users:build", methods=["POST"])
def build_request():
    """Build the uploadAccount request and the client-side result."""
    payload = _json_body()
    try:
        builder = _builder_from_payload(payload)
    except UserImportError as error:
        _audit("import_build", {"error": error.code}, success=False)
        raise
    result = builder.build_response([])
    _audit("import_build", {
        "accepted": len(builder.users),
        "rejected": result.failure_count,
        "hash_algorithm": builder.options.hash_algorithm,
    })
    return jsonify({"request": builder.build_request(), "result": result.to_dict()}), 200


@bp.route("/users:report", methods=["POST"])
def build_report():
    """Merge server-reported failures into the import result."""
    payload = _json_body()
    failures = _failed_uploads(payload)
    builder = _builder_from_payload(payload)
    if any(failure["index"] < 0 or failure["index"] >= len(builder.index_map) for failure in failures):
        raise BadRequest("Failure index out of range of the submitted users")
    result = builder.build_response(failures)
    _audit("import_report", {
        "success_count": result.success_count,
        "failure_count": result.failure_count,
    })
    return jsonify(result.to_dict()), 200


@bp.route("/algorithms", methods=["GET"])
def list_algorithms():
    """List the supported password hash algorithms."""
    return jsonify({"algorithms": list(HASH_ALGORITHMS)}), 200

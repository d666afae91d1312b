"""Command-line entry point for building user import requests offline.

Usage:
    iam-import build users.json --options options.json > request.json
    iam-import report users.json failures.json --options options.json

Input files are JSON. Users may be a list or ``{"users": [...]}``; binary
fields (passwordHash, passwordSalt, hash.key, hash.saltSeparator) are
web-safe base64 strings. Failures are the ``error`` array returned by the
uploadAccount endpoint: ``[{"index": 0, "message": "..."}]``.
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from iam_import.config import load_settings
from iam_import.core import audit
from iam_import.core.encoding import decode_options_document, decode_user_document
from iam_import.core.exceptions import UserImportError
from iam_import.core.user_import_builder import UserImportBuilder
from iam_import.core.validators import validate_upload_account_user

logger = logging.getLogger(__name__)

EXIT_HARD_FAILURE = 2


def _read_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _load_users(path: str) -> list:
    document = _read_json(path)
    if isinstance(document, dict):
        document = document.get("users")
    if not isinstance(document, list):
        raise ValueError(f"{path}: expected a list of users or an object with a 'users' list")
    return [decode_user_document(user) for user in document]


def _load_failures(path: str) -> list:
    document = _read_json(path)
    if isinstance(document, dict):
        document = document.get("error", [])
    if not isinstance(document, list):
        raise ValueError(f"{path}: expected a list of failures or an object with an 'error' list")
    return document


def _make_builder(args: argparse.Namespace, cfg) -> UserImportBuilder:
    users = _load_users(args.users)
    options = decode_options_document(_read_json(args.options)) if args.options else None
    return UserImportBuilder(
        users,
        options,
        user_request_validator=None if args.no_validate or not cfg.validate_records
        else validate_upload_account_user,
        max_users=cfg.max_users,
    )


def _emit(document: Any, output: Optional[str]) -> None:
    text = json.dumps(document, indent=2, sort_keys=True)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Bulk user import request builder")
    parser.add_argument("--operator", default="cli",
                        help="Operator identifier for audit logs (default: cli)")
    parser.add_argument("--no-validate", action="store_true",
                        help="Skip the per-user request validation")
    parser.add_argument("--output", "-o", help="Write JSON output to this file instead of stdout")

    sub = parser.add_subparsers(dest="cmd")

    sb = sub.add_parser("build", help="Build the uploadAccount request")
    sb.add_argument("users")
    sb.add_argument("--options")

    sr = sub.add_parser("report", help="Build the import result from server failures")
    sr.add_argument("users")
    sr.add_argument("failures")
    sr.add_argument("--options")

    args = parser.parse_args(argv)
    if not args.cmd:
        parser.print_help()
        return 1

    cfg = load_settings()
    logging.basicConfig(level=cfg.log_level, format="%(levelname)s %(name)s: %(message)s")
    audit.set_audit_log_dir(cfg.audit_log_dir)
    event_type = "import_build" if args.cmd == "build" else "import_report"

    try:
        builder = _make_builder(args, cfg)
        failures = _load_failures(args.failures) if args.cmd == "report" else []
        result = builder.build_response(failures)
    except UserImportError as e:
        print(f"[import] {e.code}: {e.message}", file=sys.stderr)
        if cfg.audit_enabled:
            audit.safe_log_import_event(event_type, operator=args.operator,
                                        details={"error": e.code}, success=False)
        return EXIT_HARD_FAILURE
    except (OSError, ValueError, KeyError, IndexError) as e:
        print(f"[import] Invalid input: {e}", file=sys.stderr)
        return EXIT_HARD_FAILURE

    if args.cmd == "build":
        _emit(builder.build_request(), args.output)
    else:
        _emit(result.to_dict(), args.output)

    for entry in result.errors:
        logger.warning(f"User at index {entry.index} not imported: {entry.error}")
    print(
        f"[import] {result.success_count} succeeded, {result.failure_count} failed",
        file=sys.stderr,
    )
    if cfg.audit_enabled:
        audit.safe_log_import_event(event_type, operator=args.operator, details={
            "success_count": result.success_count,
            "failure_count": result.failure_count,
            "hash_algorithm": builder.options.hash_algorithm,
        })
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MAX_USERS = 1000
DEFAULT_JSON_MAX_SIZE_BYTES = 1024 * 1024  # 1 MB
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets", file=sys.stderr)
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}", file=sys.stderr)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _get_bool(var_name: str, default: bool) -> bool:
    value = os.environ.get(var_name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(var_name: str, default: int) -> int:
    value = os.environ.get(var_name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be an integer, got {value!r}.")
    if parsed <= 0:
        raise RuntimeError(f"Environment variable {var_name} must be positive, got {parsed}.")
    return parsed


@dataclass
class ImportConfig:
    """User import configuration container."""
    # Batch
    max_users: int = DEFAULT_MAX_USERS
    validate_records: bool = True

    # HTTP surface
    json_max_size_bytes: int = DEFAULT_JSON_MAX_SIZE_BYTES

    # Logging
    log_level: str = "INFO"

    # Audit
    audit_enabled: bool = True
    audit_log_dir: Path = field(default_factory=lambda: Path(".runtime/audit"))
    audit_log_signing_key: str = ""

    @property
    def audit_signing_enabled(self) -> bool:
        return bool(self.audit_log_signing_key)


def load_settings() -> ImportConfig:
    """Load import settings from environment and /run/secrets."""
    audit_log_signing_key = _load_secret_from_file(
        "audit_log_signing_key",
        "AUDIT_LOG_SIGNING_KEY",
    ) or ""
    if audit_log_signing_key:
        os.environ["AUDIT_LOG_SIGNING_KEY"] = audit_log_signing_key

    log_level = os.environ.get("IMPORT_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if log_level not in LOG_LEVELS:
        raise RuntimeError(f"IMPORT_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}.")

    cfg = ImportConfig(
        max_users=_get_int("IMPORT_MAX_USERS", DEFAULT_MAX_USERS),
        validate_records=_get_bool("IMPORT_VALIDATE_RECORDS", True),
        json_max_size_bytes=_get_int("JSON_MAX_SIZE_BYTES", DEFAULT_JSON_MAX_SIZE_BYTES),
        log_level=log_level,
        audit_enabled=_get_bool("AUDIT_ENABLED", True),
        audit_log_dir=Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit")),
        audit_log_signing_key=audit_log_signing_key,
    )

    print(
        f"[settings] max_users={cfg.max_users}; validate_records={cfg.validate_records}; "
        f"audit={'signed' if cfg.audit_signing_enabled else 'unsigned'}",
        file=sys.stderr,
    )
    return cfg

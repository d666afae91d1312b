"""Flask application factory for the dry-run import API.

This module provides the create_app() factory function for initializing
the Flask application with its blueprints, error handlers and configuration.

Run with any WSGI server using the factory, e.g.:
    flask --app "iam_import.flask_app:create_app()" run
"""
from __future__ import annotations
import os
from typing import Optional

from flask import Flask

from iam_import.config import ImportConfig, load_settings
from iam_import.core import audit


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[ImportConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Import configuration (loaded from the environment when omitted)
    """
    if cfg is None:
        cfg = load_settings()

    app = Flask(__name__)
    app.config["IMPORT_CONFIG"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = cfg.json_max_size_bytes
    app.logger.setLevel(cfg.log_level)

    audit.set_audit_log_dir(cfg.audit_log_dir)
    if cfg.audit_log_signing_key:
        os.environ.setdefault("AUDIT_LOG_SIGNING_KEY", cfg.audit_log_signing_key)

    from iam_import.api import errors, health, imports

    app.register_blueprint(health.bp)
    app.register_blueprint(imports.bp)
    errors.register_error_handlers(app)

    print(f"[flask_app] Import API registered at {imports.bp.url_prefix}")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)

"""Liveness endpoint for the import API."""
from flask import Blueprint

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Report that the import API process is up."""
    return ("ok", 200, {"Content-Type": "text/plain"})

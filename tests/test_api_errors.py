from types import SimpleNamespace

import pytest
from flask import Flask, abort

from iam_import.api.errors import register_error_handlers
from iam_import.config import ImportConfig
from iam_import.flask_app import create_app


@pytest.fixture()
def flask_client():
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["MAX_CONTENT_LENGTH"] = 16
    app.logger = SimpleNamespace(error=lambda *args, **kwargs: None)

    register_error_handlers(app)

    @app.route("/form/error")
    def form_error():
        abort(400, "invalid payload")

    @app.route("/crash")
    def crash():
        raise RuntimeError("boom")

    @app.route("/upload", methods=["POST"])
    def upload():
        from flask import request
        return str(len(request.get_data()))

    return app.test_client()


def test_bad_request_returns_description(flask_client):
    response = flask_client.get("/form/error")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Bad Request", "message": "invalid payload"}


def test_not_found_is_json(flask_client):
    response = flask_client.get("/missing")
    assert response.status_code == 404
    assert response.get_json()["error"] == "Not Found"


def test_method_not_allowed_is_json(flask_client):
    response = flask_client.post("/form/error")
    assert response.status_code == 405
    assert response.get_json()["error"] == "Method Not Allowed"


def test_unhandled_exception_is_hidden(flask_client):
    response = flask_client.get("/crash")
    assert response.status_code == 500
    assert response.get_json() == {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred",
    }


def test_payload_too_large(flask_client):
    response = flask_client.post("/upload", data=b"x" * 64)
    assert response.status_code == 413
    assert response.get_json()["message"] == "Request payload exceeds maximum allowed size (16 bytes)"


def test_import_api_enforces_json_size_limit(audit_dir):
    cfg = ImportConfig(json_max_size_bytes=64, audit_log_dir=audit_dir)
    with create_app(cfg).test_client() as client:
        response = client.post("/import/v1/users:build", json={"users": [{"uid": "u" * 200}]})
    assert response.status_code == 413

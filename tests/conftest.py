"""Pytest shared fixtures for the user import tests."""
import pytest

from iam_import.config import ImportConfig
from iam_import.core import audit
from iam_import.flask_app import create_app


# ─────────────────────────────────────────────────────────────────────────────
# Audit Isolation
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def audit_dir(monkeypatch, tmp_path):
    """Keep every test's audit trail in its own temporary directory."""
    directory = tmp_path / "audit"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", directory)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", directory / "import-events.jsonl")
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-signing-key-for-audit-trail")
    monkeypatch.setenv("AUDIT_LOG_DIR", str(directory))
    return directory


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def import_config(audit_dir):
    return ImportConfig(
        max_users=5,
        validate_records=True,
        audit_log_dir=audit_dir,
        audit_log_signing_key="test-signing-key-for-audit-trail",
    )


@pytest.fixture()
def app(import_config):
    flask_app = create_app(import_config)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


# ─────────────────────────────────────────────────────────────────────────────
# Sample Data
# ─────────────────────────────────────────────────────────────────────────────
UTC_ENROLLMENT_TIME = "Tue, 15 Oct 2019 12:00:00 GMT"


@pytest.fixture()
def full_user():
    """A user record exercising every supported field."""
    return {
        "uid": "alice",
        "email": "alice@example.com",
        "emailVerified": True,
        "displayName": "Alice Smith",
        "phoneNumber": "+15555550100",
        "photoURL": "https://example.com/alice.png",
        "disabled": False,
        "metadata": {
            "creationTime": UTC_ENROLLMENT_TIME,
            "lastSignInTime": "2020-01-02T03:04:05Z",
        },
        "providerData": [
            {
                "uid": "google-alice",
                "providerId": "google.com",
                "email": "alice@gmail.com",
                "displayName": "Alice G",
                "photoURL": "https://example.com/g.png",
            }
        ],
        "customClaims": {"role": "analyst"},
        "passwordHash": b"\x01\x02\x03",
        "passwordSalt": b"salt",
        "tenantId": "tenant-1",
        "multiFactor": {
            "enrolledFactors": [
                {
                    "uid": "mfa-phone",
                    "factorId": "phone",
                    "phoneNumber": "+15555550101",
                    "displayName": "Work phone",
                    "enrollmentTime": UTC_ENROLLMENT_TIME,
                },
                {
                    "uid": "mfa-totp",
                    "factorId": "totp",
                    "sharedSecretKey": "JBSWY3DPEHPK3PXP",
                    "displayName": "Authenticator",
                },
            ]
        },
    }

"""Input validation helpers for user import data."""
from __future__ import annotations
import json
import re
from typing import Any
from urllib.parse import urlparse

from .encoding import parse_date_string, to_utc_string
from .exceptions import ErrorCode, UserImportError

UID_MAX_LENGTH = 128
CLAIMS_MAX_LENGTH = 1000

# Claims the identity provider sets itself on ID tokens
RESERVED_CLAIMS = frozenset({
    "acr", "amr", "at_hash", "aud", "auth_time", "azp", "cnf", "c_hash",
    "exp", "iat", "iss", "jti", "nbf", "nonce", "firebase", "sub",
})

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")
PHONE_NUMBER_PATTERN = re.compile(r"^\+[\d\s().\-/]*\d[\d\s().\-/]*$")


def is_bytes(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_uid(value: Any) -> bool:
    return is_non_empty_string(value) and len(value) <= UID_MAX_LENGTH


def is_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value))


def is_phone_number(value: Any) -> bool:
    """E.164-like: a leading '+' followed by digits and common separators."""
    return isinstance(value, str) and bool(PHONE_NUMBER_PATTERN.match(value))


def is_url(value: Any) -> bool:
    if not is_non_empty_string(value):
        return False
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def is_utc_date_string(value: Any) -> bool:
    """True when value is exactly an HTTP-date such as 'Tue, 15 Oct 2019 12:00:00 GMT'."""
    if not is_non_empty_string(value):
        return False
    parsed = parse_date_string(value)
    return parsed is not None and to_utc_string(parsed) == value


def is_iso_date_string(value: Any) -> bool:
    return is_non_empty_string(value) and parse_date_string(value) is not None


def _validate_custom_attributes(custom_attributes: Any) -> None:
    if not isinstance(custom_attributes, str):
        raise UserImportError(ErrorCode.INVALID_CLAIMS)
    try:
        claims = json.loads(custom_attributes)
    except ValueError as exc:
        raise UserImportError(ErrorCode.INVALID_CLAIMS, f"Invalid custom claims: {exc}") from exc
    if not isinstance(claims, dict):
        raise UserImportError(ErrorCode.INVALID_CLAIMS)
    if len(custom_attributes) > CLAIMS_MAX_LENGTH:
        raise UserImportError(
            ErrorCode.CLAIMS_TOO_LARGE,
            f"Developer claims payload should not exceed {CLAIMS_MAX_LENGTH} characters.",
        )
    reserved = sorted(RESERVED_CLAIMS.intersection(claims))
    if reserved:
        raise UserImportError(
            ErrorCode.FORBIDDEN_CLAIM,
            f'Developer claim "{reserved[0]}" is reserved and cannot be specified.',
        )


def validate_upload_account_user(user) -> None:
    """Validate a canonical upload user the way the upload endpoint does.

    Args:
        user: UploadAccountUser produced by the record normalizer

    Raises:
        UserImportError: On the first invalid field
    """
    if not is_uid(user.local_id):
        raise UserImportError(ErrorCode.INVALID_UID)
    if user.email is not None and not is_email(user.email):
        raise UserImportError(ErrorCode.INVALID_EMAIL)
    if user.email_verified is not None and not is_boolean(user.email_verified):
        raise UserImportError(ErrorCode.INVALID_EMAIL_VERIFIED)
    if user.display_name is not None and not isinstance(user.display_name, str):
        raise UserImportError(ErrorCode.INVALID_DISPLAY_NAME)
    if user.disabled is not None and not is_boolean(user.disabled):
        raise UserImportError(ErrorCode.INVALID_DISABLED_FIELD)
    if user.phone_number is not None and not is_phone_number(user.phone_number):
        raise UserImportError(ErrorCode.INVALID_PHONE_NUMBER)
    if user.photo_url is not None and not is_url(user.photo_url):
        raise UserImportError(ErrorCode.INVALID_PHOTO_URL)
    if user.custom_attributes is not None:
        _validate_custom_attributes(user.custom_attributes)
    if user.created_at is not None and not is_integer(user.created_at):
        raise UserImportError(ErrorCode.INVALID_CREATION_TIME)
    if user.last_login_at is not None and not is_integer(user.last_login_at):
        raise UserImportError(ErrorCode.INVALID_LAST_SIGN_IN_TIME)
    if user.tenant_id is not None and not is_non_empty_string(user.tenant_id):
        raise UserImportError(ErrorCode.INVALID_TENANT_ID)

    for provider in user.provider_user_info:
        if not is_non_empty_string(provider.provider_id):
            raise UserImportError(ErrorCode.INVALID_PROVIDER_ID)
        if not is_uid(provider.raw_id):
            raise UserImportError(
                ErrorCode.INVALID_PROVIDER_UID,
                f'The provider "uid" for "{provider.provider_id}" must be a valid non-empty string.',
            )
        if provider.email is not None and not is_email(provider.email):
            raise UserImportError(ErrorCode.INVALID_EMAIL)
        if provider.photo_url is not None and not is_url(provider.photo_url):
            raise UserImportError(ErrorCode.INVALID_PHOTO_URL)

    for factor in user.mfa_info:
        if factor.mfa_enrollment_id is not None and not is_non_empty_string(factor.mfa_enrollment_id):
            raise UserImportError(
                ErrorCode.INVALID_ENROLLED_FACTORS,
                'The second factor "uid" must be a valid non-empty string.',
            )
        if factor.totp_info is None and not is_phone_number(factor.phone_info):
            raise UserImportError(
                ErrorCode.INVALID_PHONE_NUMBER,
                f'The second factor "phoneNumber" for "{factor.mfa_enrollment_id}" must be a '
                "non-empty E.164 standard compliant identifier string.",
            )
        if factor.display_name is not None and not isinstance(factor.display_name, str):
            raise UserImportError(ErrorCode.INVALID_DISPLAY_NAME)
        if factor.enrolled_at is not None and not is_iso_date_string(factor.enrolled_at):
            raise UserImportError(ErrorCode.INVALID_ENROLLMENT_TIME)

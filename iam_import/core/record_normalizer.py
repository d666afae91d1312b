"""Client user record → uploadAccount user transformation.

Usage:
    upload_user = populate_upload_account_user(record)
    upload_user.to_dict()   # wire shape, absent fields omitted

Metadata timestamps are parsed permissively (an unparseable value is
dropped) while second factor enrollment times are strict and raise
INVALID_ENROLLMENT_TIME.
"""
from __future__ import annotations
import json
from typing import Any, Callable, Mapping, Optional, Union

from .encoding import parse_date_string, to_epoch_millis, to_iso_string, to_web_safe_base64
from .exceptions import ErrorCode, UserImportError
from .models import (
    AuthFactorInfo,
    MultiFactorInfoRequest,
    PhoneMultiFactorInfoRequest,
    ProviderUserInfo,
    TotpInfo,
    TotpMultiFactorInfoRequest,
    UploadAccountUser,
    UserImportRecord,
    UserMetadataRequest,
    UserProviderRequest,
    dump_descriptor,
)
from .validators import is_bytes, is_non_empty_string, is_utc_date_string

ValidatorFunction = Callable[[UploadAccountUser], None]


def _enrolled_at(multi_factor_info: Any) -> Optional[str]:
    enrollment_time = getattr(multi_factor_info, "enrollment_time", None)
    if enrollment_time is None:
        return None
    if not is_utc_date_string(enrollment_time):
        uid = getattr(multi_factor_info, "uid", None)
        raise UserImportError(
            ErrorCode.INVALID_ENROLLMENT_TIME,
            f'The second factor "enrollmentTime" for "{uid}" must be a valid '
            "UTC date string.",
        )
    # UTC date string (client format) → ISO date string (server format)
    return to_iso_string(parse_date_string(enrollment_time))


def convert_multi_factor_info_to_server_format(
    multi_factor_info: Union[MultiFactorInfoRequest, Mapping[str, Any]],
) -> AuthFactorInfo:
    """Convert a client second factor to its server representation.

    Raises:
        UserImportError: INVALID_ENROLLMENT_TIME or UNSUPPORTED_SECOND_FACTOR
    """
    if isinstance(multi_factor_info, Mapping):
        multi_factor_info = MultiFactorInfoRequest.from_dict(multi_factor_info)
    # Checked for every factor, before the factor type
    enrolled_at = _enrolled_at(multi_factor_info)

    if isinstance(multi_factor_info, PhoneMultiFactorInfoRequest):
        return AuthFactorInfo(
            mfa_enrollment_id=multi_factor_info.uid,
            display_name=multi_factor_info.display_name,
            phone_info=multi_factor_info.phone_number,
            enrolled_at=enrolled_at,
        )
    if isinstance(multi_factor_info, TotpMultiFactorInfoRequest):
        return AuthFactorInfo(
            mfa_enrollment_id=multi_factor_info.uid,
            display_name=multi_factor_info.display_name,
            totp_info=TotpInfo(shared_secret_key=multi_factor_info.shared_secret_key),
            enrolled_at=enrolled_at,
        )
    raise UserImportError(
        ErrorCode.UNSUPPORTED_SECOND_FACTOR,
        f'Unsupported second factor "{dump_descriptor(multi_factor_info)}" provided.',
    )


def _epoch_millis_or_none(value: Any) -> Optional[int]:
    if not is_non_empty_string(value):
        return None
    parsed = parse_date_string(value)
    return to_epoch_millis(parsed) if parsed is not None else None


def _provider_user_info(provider: Any) -> ProviderUserInfo:
    if isinstance(provider, Mapping):
        provider = UserProviderRequest.from_dict(provider)
    return ProviderUserInfo(
        provider_id=provider.provider_id,
        raw_id=provider.uid,
        email=provider.email,
        display_name=provider.display_name,
        photo_url=provider.photo_url,
    )


def populate_upload_account_user(
    user: Union[UserImportRecord, Mapping[str, Any]],
    user_validator: Optional[ValidatorFunction] = None,
) -> UploadAccountUser:
    """Convert a UserImportRecord to an UploadAccountUser.

    Args:
        user: Caller record (dataclass or camelCase mapping)
        user_validator: Optional hook run on the assembled record

    Returns:
        The canonical upload user

    Raises:
        UserImportError: When a field is invalid; the hook may raise anything
    """
    if isinstance(user, Mapping):
        user = UserImportRecord.from_dict(user)

    result = UploadAccountUser(
        local_id=user.uid,
        email=user.email,
        email_verified=user.email_verified,
        display_name=user.display_name,
        disabled=user.disabled,
        photo_url=user.photo_url,
        phone_number=user.phone_number,
        tenant_id=user.tenant_id,
    )
    if user.custom_claims is not None:
        result.custom_attributes = json.dumps(
            user.custom_claims, separators=(",", ":"), ensure_ascii=False
        )

    if user.password_hash is not None:
        if not is_bytes(user.password_hash):
            raise UserImportError(ErrorCode.INVALID_PASSWORD_HASH)
        result.password_hash = to_web_safe_base64(user.password_hash)
    if user.password_salt is not None:
        if not is_bytes(user.password_salt):
            raise UserImportError(ErrorCode.INVALID_PASSWORD_SALT)
        result.salt = to_web_safe_base64(user.password_salt)

    metadata = user.metadata
    if isinstance(metadata, Mapping):
        metadata = UserMetadataRequest.from_dict(metadata)
    if isinstance(metadata, UserMetadataRequest):
        result.created_at = _epoch_millis_or_none(metadata.creation_time)
        result.last_login_at = _epoch_millis_or_none(metadata.last_sign_in_time)

    if isinstance(user.provider_data, list):
        result.provider_user_info = [_provider_user_info(provider) for provider in user.provider_data]

    if user.multi_factor is not None and user.multi_factor.enrolled_factors:
        result.mfa_info = [
            convert_multi_factor_info_to_server_format(factor)
            for factor in user.multi_factor.enrolled_factors
        ]

    if user_validator is not None:
        user_validator(result)
    return result

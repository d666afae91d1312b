"""Data model for bulk user import requests and results.

Input records are accepted either as these dataclasses or as camelCase
mappings (the JSON shape callers usually hold) via the ``from_dict``
constructors. Output records carry every field as ``Optional`` and
``to_dict()`` drops absent values, so ``None`` never reaches the wire.
"""
from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

HASH_ALGORITHMS = (
    "SCRYPT",
    "STANDARD_SCRYPT",
    "HMAC_SHA512",
    "HMAC_SHA256",
    "HMAC_SHA1",
    "HMAC_MD5",
    "MD5",
    "PBKDF_SHA1",
    "BCRYPT",
    "PBKDF2_SHA256",
    "SHA512",
    "SHA256",
    "SHA1",
)


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


# ─────────────────────────────────────────────────────────────────────────────
# Input records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class UserMetadataRequest:
    """Sign-in metadata, both values formatted as date strings."""
    creation_time: Optional[str] = None
    last_sign_in_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserMetadataRequest":
        return cls(
            creation_time=data.get("creationTime"),
            last_sign_in_time=data.get("lastSignInTime"),
        )


@dataclass
class UserProviderRequest:
    """A linked identity provider entry (e.g. google.com)."""
    uid: Any = None
    provider_id: Any = None
    display_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProviderRequest":
        return cls(
            uid=data.get("uid"),
            provider_id=data.get("providerId"),
            display_name=data.get("displayName"),
            email=data.get("email"),
            phone_number=data.get("phoneNumber"),
            photo_url=data.get("photoURL"),
        )


@dataclass
class MultiFactorInfoRequest:
    """Enrolled second factor, discriminated by ``factor_id``.

    Tags without a dedicated subclass stay on this base class with the raw
    descriptor kept in ``extra`` so the converter can report it.
    """
    factor_id: Any = None
    uid: Optional[str] = None
    display_name: Optional[str] = None
    enrollment_time: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "MultiFactorInfoRequest":
        factor_id = data.get("factorId")
        common = dict(
            uid=data.get("uid"),
            display_name=data.get("displayName"),
            enrollment_time=data.get("enrollmentTime"),
        )
        if factor_id == "phone":
            return PhoneMultiFactorInfoRequest(phone_number=data.get("phoneNumber"), **common)
        if factor_id == "totp":
            return TotpMultiFactorInfoRequest(shared_secret_key=data.get("sharedSecretKey"), **common)
        known = {"factorId", "uid", "displayName", "enrollmentTime"}
        extra = {key: value for key, value in data.items() if key not in known}
        return MultiFactorInfoRequest(factor_id=factor_id, extra=extra, **common)

    def to_dict(self) -> Dict[str, Any]:
        """Client-side (camelCase) representation, used in error messages."""
        data = _compact({
            "uid": self.uid,
            "displayName": self.display_name,
            "enrollmentTime": self.enrollment_time,
            "factorId": self.factor_id,
        })
        data.update(self.extra)
        return data


@dataclass
class PhoneMultiFactorInfoRequest(MultiFactorInfoRequest):
    factor_id: Any = "phone"
    phone_number: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.phone_number is not None:
            data["phoneNumber"] = self.phone_number
        return data


@dataclass
class TotpMultiFactorInfoRequest(MultiFactorInfoRequest):
    factor_id: Any = "totp"
    shared_secret_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.shared_secret_key is not None:
            data["sharedSecretKey"] = self.shared_secret_key
        return data


@dataclass
class MultiFactorSettings:
    enrolled_factors: List[MultiFactorInfoRequest] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MultiFactorSettings":
        factors = data.get("enrolledFactors")
        if not isinstance(factors, list):
            return cls()
        return cls(enrolled_factors=[
            MultiFactorInfoRequest.from_dict(factor) if isinstance(factor, Mapping) else factor
            for factor in factors
        ])


@dataclass
class UserImportRecord:
    """A user to import, as supplied by the caller."""
    uid: Any = None
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    display_name: Optional[str] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None
    disabled: Optional[bool] = None
    metadata: Optional[UserMetadataRequest] = None
    provider_data: Optional[List[UserProviderRequest]] = None
    custom_claims: Optional[Dict[str, Any]] = None
    password_hash: Any = None
    password_salt: Any = None
    tenant_id: Optional[str] = None
    multi_factor: Optional[MultiFactorSettings] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserImportRecord":
        metadata = data.get("metadata")
        provider_data = data.get("providerData")
        multi_factor = data.get("multiFactor")
        return cls(
            uid=data.get("uid"),
            email=data.get("email"),
            email_verified=data.get("emailVerified"),
            display_name=data.get("displayName"),
            phone_number=data.get("phoneNumber"),
            photo_url=data.get("photoURL"),
            disabled=data.get("disabled"),
            metadata=UserMetadataRequest.from_dict(metadata) if isinstance(metadata, Mapping) else None,
            provider_data=[
                UserProviderRequest.from_dict(entry) if isinstance(entry, Mapping) else entry
                for entry in provider_data
            ] if isinstance(provider_data, list) else None,
            custom_claims=data.get("customClaims"),
            password_hash=data.get("passwordHash"),
            password_salt=data.get("passwordSalt"),
            tenant_id=data.get("tenantId"),
            multi_factor=(
                MultiFactorSettings.from_dict(multi_factor) if isinstance(multi_factor, Mapping) else None
            ),
        )


@dataclass
class HashAlgorithmOptions:
    """Password hashing parameters; values are validated later, not here."""
    algorithm: Any = None
    key: Any = None
    salt_separator: Any = None
    rounds: Any = None
    memory_cost: Any = None
    parallelization: Any = None
    block_size: Any = None
    derived_key_length: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HashAlgorithmOptions":
        return cls(
            algorithm=data.get("algorithm"),
            key=data.get("key"),
            salt_separator=data.get("saltSeparator"),
            rounds=data.get("rounds"),
            memory_cost=data.get("memoryCost"),
            parallelization=data.get("parallelization"),
            block_size=data.get("blockSize"),
            derived_key_length=data.get("derivedKeyLength"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "algorithm": self.algorithm,
            "key": self.key,
            "saltSeparator": self.salt_separator,
            "rounds": self.rounds,
            "memoryCost": self.memory_cost,
            "parallelization": self.parallelization,
            "blockSize": self.block_size,
            "derivedKeyLength": self.derived_key_length,
        })


@dataclass
class UserImportOptions:
    """Import options; ``hash`` describes how supplied password hashes were made."""
    hash: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserImportOptions":
        hash_options = data.get("hash")
        if isinstance(hash_options, Mapping):
            hash_options = HashAlgorithmOptions.from_dict(hash_options)
        return cls(hash=hash_options)


# ─────────────────────────────────────────────────────────────────────────────
# Canonical (server format) records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ProviderUserInfo:
    provider_id: Any = None
    raw_id: Any = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "providerId": self.provider_id,
            "rawId": self.raw_id,
            "email": self.email,
            "displayName": self.display_name,
            "photoUrl": self.photo_url,
        })


@dataclass
class TotpInfo:
    shared_secret_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"sharedSecretKey": self.shared_secret_key})


@dataclass
class AuthFactorInfo:
    """Second factor in server format."""
    mfa_enrollment_id: Optional[str] = None
    display_name: Optional[str] = None
    phone_info: Optional[str] = None
    enrolled_at: Optional[str] = None
    totp_info: Optional[TotpInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "mfaEnrollmentId": self.mfa_enrollment_id,
            "displayName": self.display_name,
            "phoneInfo": self.phone_info,
            "enrolledAt": self.enrolled_at,
            "totpInfo": self.totp_info.to_dict() if self.totp_info is not None else None,
        })


@dataclass
class UploadAccountUser:
    """A user entry of the uploadAccount request."""
    local_id: Any = None
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    display_name: Optional[str] = None
    disabled: Optional[bool] = None
    photo_url: Optional[str] = None
    phone_number: Optional[str] = None
    provider_user_info: List[ProviderUserInfo] = field(default_factory=list)
    mfa_info: List[AuthFactorInfo] = field(default_factory=list)
    password_hash: Optional[str] = None
    salt: Optional[str] = None
    last_login_at: Optional[int] = None
    created_at: Optional[int] = None
    custom_attributes: Optional[str] = None
    tenant_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "localId": self.local_id,
            "email": self.email,
            "emailVerified": self.email_verified,
            "displayName": self.display_name,
            "disabled": self.disabled,
            "photoUrl": self.photo_url,
            "phoneNumber": self.phone_number,
            "providerUserInfo": [entry.to_dict() for entry in self.provider_user_info] or None,
            "mfaInfo": [entry.to_dict() for entry in self.mfa_info] or None,
            "passwordHash": self.password_hash,
            "salt": self.salt,
            "lastLoginAt": self.last_login_at,
            "createdAt": self.created_at,
            "customAttributes": self.custom_attributes,
            "tenantId": self.tenant_id,
        })


@dataclass
class UploadAccountOptions:
    """Hash options of the uploadAccount request, flattened onto the request."""
    hash_algorithm: Optional[str] = None
    signer_key: Optional[str] = None
    rounds: Optional[int] = None
    memory_cost: Optional[int] = None
    salt_separator: Optional[str] = None
    cpu_mem_cost: Optional[int] = None
    parallelization: Optional[int] = None
    block_size: Optional[int] = None
    dk_len: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "hashAlgorithm": self.hash_algorithm,
            "signerKey": self.signer_key,
            "rounds": self.rounds,
            "memoryCost": self.memory_cost,
            "saltSeparator": self.salt_separator,
            "cpuMemCost": self.cpu_mem_cost,
            "parallelization": self.parallelization,
            "blockSize": self.block_size,
            "dkLen": self.dk_len,
        })


# ─────────────────────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ArrayIndexError:
    """An error tied to the caller's original array index."""
    index: int
    error: Exception

    def to_dict(self) -> Dict[str, Any]:
        if hasattr(self.error, "to_dict"):
            error = self.error.to_dict()
        else:
            error = {"code": type(self.error).__name__, "message": str(self.error)}
        return {"index": self.index, "error": error}


@dataclass
class UserImportResult:
    success_count: int
    failure_count: int
    errors: List[ArrayIndexError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "errors": [entry.to_dict() for entry in self.errors],
        }


def dump_descriptor(descriptor: Any) -> str:
    """Serialize a client descriptor for error messages."""
    data = descriptor.to_dict() if hasattr(descriptor, "to_dict") else descriptor
    return json.dumps(data, default=str, sort_keys=True)

"""Import-specific exceptions and error codes."""
from __future__ import annotations
from typing import Optional


class ErrorCode:
    """Stable error kinds callers can branch on."""
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_PASSWORD_HASH = "INVALID_PASSWORD_HASH"
    INVALID_PASSWORD_SALT = "INVALID_PASSWORD_SALT"
    INVALID_ENROLLMENT_TIME = "INVALID_ENROLLMENT_TIME"
    UNSUPPORTED_SECOND_FACTOR = "UNSUPPORTED_SECOND_FACTOR"
    MISSING_HASH_ALGORITHM = "MISSING_HASH_ALGORITHM"
    INVALID_HASH_ALGORITHM = "INVALID_HASH_ALGORITHM"
    INVALID_HASH_KEY = "INVALID_HASH_KEY"
    INVALID_HASH_ROUNDS = "INVALID_HASH_ROUNDS"
    INVALID_HASH_MEMORY_COST = "INVALID_HASH_MEMORY_COST"
    INVALID_HASH_SALT_SEPARATOR = "INVALID_HASH_SALT_SEPARATOR"
    INVALID_HASH_PARALLELIZATION = "INVALID_HASH_PARALLELIZATION"
    INVALID_HASH_BLOCK_SIZE = "INVALID_HASH_BLOCK_SIZE"
    INVALID_HASH_DERIVED_KEY_LENGTH = "INVALID_HASH_DERIVED_KEY_LENGTH"
    INVALID_USER_IMPORT = "INVALID_USER_IMPORT"
    MAXIMUM_USER_COUNT_EXCEEDED = "MAXIMUM_USER_COUNT_EXCEEDED"

    # Per-record request validation
    INVALID_UID = "INVALID_UID"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_EMAIL_VERIFIED = "INVALID_EMAIL_VERIFIED"
    INVALID_DISPLAY_NAME = "INVALID_DISPLAY_NAME"
    INVALID_PHONE_NUMBER = "INVALID_PHONE_NUMBER"
    INVALID_PHOTO_URL = "INVALID_PHOTO_URL"
    INVALID_DISABLED_FIELD = "INVALID_DISABLED_FIELD"
    INVALID_CLAIMS = "INVALID_CLAIMS"
    CLAIMS_TOO_LARGE = "CLAIMS_TOO_LARGE"
    FORBIDDEN_CLAIM = "FORBIDDEN_CLAIM"
    INVALID_CREATION_TIME = "INVALID_CREATION_TIME"
    INVALID_LAST_SIGN_IN_TIME = "INVALID_LAST_SIGN_IN_TIME"
    INVALID_PROVIDER_ID = "INVALID_PROVIDER_ID"
    INVALID_PROVIDER_UID = "INVALID_PROVIDER_UID"
    INVALID_TENANT_ID = "INVALID_TENANT_ID"
    INVALID_ENROLLED_FACTORS = "INVALID_ENROLLED_FACTORS"


DEFAULT_MESSAGES = {
    ErrorCode.INVALID_ARGUMENT: "Invalid argument provided.",
    ErrorCode.INVALID_PASSWORD_HASH: "The password hash must be a valid byte buffer.",
    ErrorCode.INVALID_PASSWORD_SALT: "The password salt must be a valid byte buffer.",
    ErrorCode.INVALID_ENROLLMENT_TIME: (
        "The second factor enrollment time must be a valid UTC date string."
    ),
    ErrorCode.UNSUPPORTED_SECOND_FACTOR: "The provided second factor is not supported.",
    ErrorCode.MISSING_HASH_ALGORITHM: (
        "Importing users with password hashes requires that the hashing "
        "algorithm and its parameters be provided."
    ),
    ErrorCode.INVALID_HASH_ALGORITHM: (
        "The hash algorithm must match one of the strings in the list of "
        "supported algorithms."
    ),
    ErrorCode.INVALID_HASH_KEY: "The hash key must be a valid byte buffer.",
    ErrorCode.INVALID_HASH_ROUNDS: "The hash rounds must be a valid integer.",
    ErrorCode.INVALID_HASH_MEMORY_COST: "The hash memory cost must be a valid integer.",
    ErrorCode.INVALID_HASH_SALT_SEPARATOR: (
        "The hashing algorithm salt separator field must be a valid byte buffer."
    ),
    ErrorCode.INVALID_HASH_PARALLELIZATION: (
        "The hashing algorithm parallelization field must be a valid integer."
    ),
    ErrorCode.INVALID_HASH_BLOCK_SIZE: "The hashing algorithm block size must be a valid integer.",
    ErrorCode.INVALID_HASH_DERIVED_KEY_LENGTH: (
        "The hashing algorithm derived key length must be a valid integer."
    ),
    ErrorCode.INVALID_USER_IMPORT: "The user record to import is invalid.",
    ErrorCode.MAXIMUM_USER_COUNT_EXCEEDED: (
        "The maximum allowed number of users to import has been exceeded."
    ),
    ErrorCode.INVALID_UID: (
        "The uid must be a non-empty string with at most 128 characters."
    ),
    ErrorCode.INVALID_EMAIL: "The email address is improperly formatted.",
    ErrorCode.INVALID_EMAIL_VERIFIED: "The emailVerified field must be a boolean.",
    ErrorCode.INVALID_DISPLAY_NAME: "The displayName field must be a valid string.",
    ErrorCode.INVALID_PHONE_NUMBER: (
        "The phone number must be a non-empty E.164 standard compliant identifier string."
    ),
    ErrorCode.INVALID_PHOTO_URL: "The photoURL field must be a valid URL.",
    ErrorCode.INVALID_DISABLED_FIELD: "The disabled field must be a boolean.",
    ErrorCode.INVALID_CLAIMS: "The custom claims must be a JSON object.",
    ErrorCode.CLAIMS_TOO_LARGE: "Developer claims maximum payload size exceeded.",
    ErrorCode.FORBIDDEN_CLAIM: "The specified developer claim is reserved and cannot be specified.",
    ErrorCode.INVALID_CREATION_TIME: "The creation time must be a valid timestamp.",
    ErrorCode.INVALID_LAST_SIGN_IN_TIME: "The last sign-in time must be a valid timestamp.",
    ErrorCode.INVALID_PROVIDER_ID: "The providerId must be a valid supported provider identifier string.",
    ErrorCode.INVALID_PROVIDER_UID: "The provider uid must be a valid provider uid string.",
    ErrorCode.INVALID_TENANT_ID: "The tenant ID must be a valid non-empty string.",
    ErrorCode.INVALID_ENROLLED_FACTORS: (
        "The enrolled factors must be a valid array of second factor objects."
    ),
}


class UserImportError(Exception):
    """Import error with a stable code and a human-readable message.

    Attributes:
        code: One of the ErrorCode constants
        message: Error detail (defaults to the code's standard message)
    """

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or DEFAULT_MESSAGES.get(code, code)
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to the JSON error shape used in reports and API responses."""
        return {"code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"UserImportError({self.code!r}, {self.message!r})"

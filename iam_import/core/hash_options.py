"""Password hash configuration validation for uploadAccount requests.

Only the algorithm parameters are checked here; hashes themselves are never
computed or verified.
"""
from __future__ import annotations
from typing import Any, Mapping, Optional, Union

from .encoding import get_number_field, to_web_safe_base64
from .exceptions import ErrorCode, UserImportError
from .models import HashAlgorithmOptions, UploadAccountOptions, UserImportOptions
from .validators import is_bytes, is_non_empty_string

HMAC_ALGORITHMS = ("HMAC_SHA512", "HMAC_SHA256", "HMAC_SHA1", "HMAC_MD5")
SHA_ALGORITHMS = ("MD5", "SHA1", "SHA256", "SHA512")
PBKDF_ALGORITHMS = ("PBKDF_SHA1", "PBKDF2_SHA256")

MAX_SHA_ROUNDS = 8192
MAX_PBKDF_ROUNDS = 120000
MAX_SCRYPT_ROUNDS = 8
MAX_SCRYPT_MEMORY_COST = 14


def _in_range(value: Optional[int], minimum: int, maximum: int) -> bool:
    return value is not None and minimum <= value <= maximum


def _as_options(options: Any) -> Any:
    if isinstance(options, Mapping):
        return UserImportOptions.from_dict(options)
    return options


def _hash_fields(hash_options: HashAlgorithmOptions) -> dict:
    return {
        "rounds": hash_options.rounds,
        "memoryCost": hash_options.memory_cost,
        "parallelization": hash_options.parallelization,
        "blockSize": hash_options.block_size,
        "derivedKeyLength": hash_options.derived_key_length,
    }


def _hmac_options(algorithm: str, hash_options: HashAlgorithmOptions) -> UploadAccountOptions:
    if not is_bytes(hash_options.key):
        raise UserImportError(
            ErrorCode.INVALID_HASH_KEY,
            f'A non-empty "hash.key" byte buffer must be provided for hash algorithm {algorithm}.',
        )
    return UploadAccountOptions(
        hash_algorithm=algorithm,
        signer_key=to_web_safe_base64(hash_options.key),
    )


def _rounds_options(algorithm: str, fields: dict, minimum: int, maximum: int) -> UploadAccountOptions:
    rounds = get_number_field(fields, "rounds")
    if not _in_range(rounds, minimum, maximum):
        raise UserImportError(
            ErrorCode.INVALID_HASH_ROUNDS,
            f'A valid "hash.rounds" number between {minimum} and {maximum} must be provided for '
            f"hash algorithm {algorithm}.",
        )
    return UploadAccountOptions(hash_algorithm=algorithm, rounds=rounds)


def _scrypt_options(algorithm: str, hash_options: HashAlgorithmOptions, fields: dict) -> UploadAccountOptions:
    if not is_bytes(hash_options.key):
        raise UserImportError(
            ErrorCode.INVALID_HASH_KEY,
            f'A "hash.key" byte buffer must be provided for hash algorithm {algorithm}.',
        )
    rounds = get_number_field(fields, "rounds")
    if not _in_range(rounds, 1, MAX_SCRYPT_ROUNDS):
        raise UserImportError(
            ErrorCode.INVALID_HASH_ROUNDS,
            f'A valid "hash.rounds" number between 1 and {MAX_SCRYPT_ROUNDS} must be provided for '
            f"hash algorithm {algorithm}.",
        )
    memory_cost = get_number_field(fields, "memoryCost")
    if not _in_range(memory_cost, 1, MAX_SCRYPT_MEMORY_COST):
        raise UserImportError(
            ErrorCode.INVALID_HASH_MEMORY_COST,
            f'A valid "hash.memoryCost" number between 1 and {MAX_SCRYPT_MEMORY_COST} must be '
            f"provided for hash algorithm {algorithm}.",
        )
    salt_separator = hash_options.salt_separator
    if salt_separator is not None and not is_bytes(salt_separator):
        raise UserImportError(
            ErrorCode.INVALID_HASH_SALT_SEPARATOR,
            '"hash.saltSeparator" must be a byte buffer.',
        )
    return UploadAccountOptions(
        hash_algorithm=algorithm,
        signer_key=to_web_safe_base64(hash_options.key),
        rounds=rounds,
        memory_cost=memory_cost,
        salt_separator=to_web_safe_base64(salt_separator if salt_separator is not None else b""),
    )


# STANDARD_SCRYPT parameters: (input field, error code) in validation order
_STANDARD_SCRYPT_FIELDS = (
    ("memoryCost", ErrorCode.INVALID_HASH_MEMORY_COST),
    ("parallelization", ErrorCode.INVALID_HASH_PARALLELIZATION),
    ("blockSize", ErrorCode.INVALID_HASH_BLOCK_SIZE),
    ("derivedKeyLength", ErrorCode.INVALID_HASH_DERIVED_KEY_LENGTH),
)


def _standard_scrypt_options(algorithm: str, fields: dict) -> UploadAccountOptions:
    values = {}
    for field_name, code in _STANDARD_SCRYPT_FIELDS:
        value = get_number_field(fields, field_name)
        if value is None:
            raise UserImportError(
                code,
                f'A valid "hash.{field_name}" number must be provided for hash algorithm {algorithm}.',
            )
        values[field_name] = value
    return UploadAccountOptions(
        hash_algorithm=algorithm,
        cpu_mem_cost=values["memoryCost"],
        parallelization=values["parallelization"],
        block_size=values["blockSize"],
        dk_len=values["derivedKeyLength"],
    )


def populate_options(
    options: Union[UserImportOptions, Mapping[str, Any], None],
    requires_hash_options: bool,
) -> UploadAccountOptions:
    """Validate the hash options of an uploadAccount request.

    Args:
        options: Import options (dataclass or ``{"hash": {...}}`` mapping)
        requires_hash_options: True when any accepted user has a password hash

    Returns:
        Canonical options; empty when hash options are not required

    Raises:
        UserImportError: On missing or invalid hashing configuration
    """
    if not requires_hash_options:
        return UploadAccountOptions()

    options = _as_options(options)
    if not isinstance(options, UserImportOptions):
        raise UserImportError(
            ErrorCode.INVALID_ARGUMENT,
            '"UserImportOptions" are required when importing users with passwords.',
        )
    hash_options = options.hash
    if isinstance(hash_options, Mapping):
        hash_options = HashAlgorithmOptions.from_dict(hash_options)
    if not isinstance(hash_options, HashAlgorithmOptions):
        raise UserImportError(
            ErrorCode.MISSING_HASH_ALGORITHM,
            '"hash.algorithm" is missing from the provided "UserImportOptions".',
        )
    algorithm = hash_options.algorithm
    if not is_non_empty_string(algorithm):
        raise UserImportError(
            ErrorCode.INVALID_HASH_ALGORITHM,
            '"hash.algorithm" must be a string matching the list of supported algorithms.',
        )

    fields = _hash_fields(hash_options)
    if algorithm in HMAC_ALGORITHMS:
        return _hmac_options(algorithm, hash_options)
    if algorithm in SHA_ALGORITHMS:
        # MD5 accepts zero rounds, the SHA family needs at least one
        minimum = 0 if algorithm == "MD5" else 1
        return _rounds_options(algorithm, fields, minimum, MAX_SHA_ROUNDS)
    if algorithm in PBKDF_ALGORITHMS:
        return _rounds_options(algorithm, fields, 0, MAX_PBKDF_ROUNDS)
    if algorithm == "SCRYPT":
        return _scrypt_options(algorithm, hash_options, fields)
    if algorithm == "BCRYPT":
        return UploadAccountOptions(hash_algorithm=algorithm)
    if algorithm == "STANDARD_SCRYPT":
        return _standard_scrypt_options(algorithm, fields)
    raise UserImportError(
        ErrorCode.INVALID_HASH_ALGORITHM,
        f'Unsupported hash algorithm provider "{algorithm}".',
    )

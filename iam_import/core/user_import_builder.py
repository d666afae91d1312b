"""Batch builder for uploadAccount requests and import results.

Architecture:
    caller users ──> UserImportBuilder ──> record_normalizer (per user)
                                       └─> hash_options (once)
    server failures ──> UserImportBuilder.build_response() ──> UserImportResult

Features:
    - Invalid users are reported, not raised: the rest of the batch proceeds
    - Hash options are validated only when a user carries a password hash
    - Server failure indices are mapped back to the caller's array indices
"""
from __future__ import annotations
import copy
import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import ErrorCode, UserImportError
from .hash_options import populate_options
from .models import (
    ArrayIndexError,
    UploadAccountOptions,
    UploadAccountUser,
    UserImportOptions,
    UserImportRecord,
    UserImportResult,
)
from .record_normalizer import ValidatorFunction, populate_upload_account_user

logger = logging.getLogger(__name__)

FailedUpload = Union[Mapping[str, Any], Tuple[int, str]]


def _failed_upload_fields(failed_upload: FailedUpload) -> Tuple[int, str]:
    if isinstance(failed_upload, Mapping):
        return failed_upload["index"], failed_upload.get("message", "")
    index, message = failed_upload
    return index, message


class UserImportBuilder:
    """Builds/validates uploadAccount requests and UserImportResult responses.

    Usage:
        builder = UserImportBuilder(users, {"hash": {"algorithm": "BCRYPT"}})
        request = builder.build_request()
        # ... caller submits request, collects response["error"] ...
        result = builder.build_response(response.get("error", []))
    """

    def __init__(
        self,
        users: Sequence[Union[UserImportRecord, Mapping[str, Any]]],
        options: Union[UserImportOptions, Mapping[str, Any], None] = None,
        user_request_validator: Optional[ValidatorFunction] = None,
        max_users: Optional[int] = None,
    ):
        """Validate users and hash options.

        Args:
            users: User records to import
            options: Import options holding the hashing algorithm details
            user_request_validator: Hook run on each assembled upload user
            max_users: Optional batch size limit

        Raises:
            UserImportError: On an oversized batch or invalid hash options
        """
        if max_users is not None and len(users) > max_users:
            raise UserImportError(
                ErrorCode.MAXIMUM_USER_COUNT_EXCEEDED,
                f"A maximum of {max_users} users can be imported at once.",
            )
        self._requires_hash_options = False
        self._index_map: List[int] = []
        self._user_import_result_errors: List[ArrayIndexError] = []
        self._validated_users = self._populate_users(users, user_request_validator)
        self._validated_options = populate_options(options, self._requires_hash_options)
        logger.info(
            f"Prepared user import: {len(self._validated_users)} accepted, "
            f"{len(self._user_import_result_errors)} rejected, "
            f"hash_algorithm={self._validated_options.hash_algorithm or 'none'}"
        )

    @property
    def users(self) -> List[UploadAccountUser]:
        return copy.deepcopy(self._validated_users)

    @property
    def options(self) -> UploadAccountOptions:
        return self._validated_options

    @property
    def index_map(self) -> Tuple[int, ...]:
        """Submission index → caller index."""
        return tuple(self._index_map)

    @property
    def requires_hash_options(self) -> bool:
        return self._requires_hash_options

    def build_request(self) -> dict:
        """Return the uploadAccount request with hash options flattened onto it."""
        request = {"users": [user.to_dict() for user in self._validated_users]}
        request.update(self._validated_options.to_dict())
        return request

    def build_response(self, failed_uploads: Iterable[FailedUpload]) -> UserImportResult:
        """Merge client-side errors with server-reported upload failures.

        Args:
            failed_uploads: Server failures as ``{"index", "message"}`` mappings
                (or ``(index, message)`` pairs), indexed by submission order

        Returns:
            Result with errors sorted by the caller's original index
        """
        failed_uploads = list(failed_uploads)
        errors = list(self._user_import_result_errors)
        for failed_upload in failed_uploads:
            index, message = _failed_upload_fields(failed_upload)
            if not 0 <= index < len(self._index_map):
                raise IndexError(f"Failed upload index {index} is outside the submitted users")
            errors.append(ArrayIndexError(
                # Backend request index → caller's array index
                index=self._index_map[index],
                error=UserImportError(ErrorCode.INVALID_USER_IMPORT, message),
            ))
        errors.sort(key=lambda entry: entry.index)
        return UserImportResult(
            success_count=len(self._validated_users) - len(failed_uploads),
            failure_count=len(self._user_import_result_errors) + len(failed_uploads),
            errors=errors,
        )

    def _populate_users(
        self,
        users: Sequence[Union[UserImportRecord, Mapping[str, Any]]],
        user_validator: Optional[ValidatorFunction],
    ) -> List[UploadAccountUser]:
        """Convert users, caching per-user errors instead of failing the batch."""
        populated_users: List[UploadAccountUser] = []
        for index, user in enumerate(users):
            try:
                result = populate_upload_account_user(user, user_validator)
            except Exception as error:
                logger.warning(f"Rejected user at index {index}: {error}")
                self._user_import_result_errors.append(ArrayIndexError(index=index, error=error))
                continue
            if result.password_hash is not None:
                self._requires_hash_options = True
            populated_users.append(result)
            self._index_map.append(index)
        return populated_users


def build_import_request(
    users: Sequence[Union[UserImportRecord, Mapping[str, Any]]],
    options: Union[UserImportOptions, Mapping[str, Any], None] = None,
    user_request_validator: Optional[ValidatorFunction] = None,
) -> Tuple[dict, UserImportResult]:
    """Build the request and the client-side result in one call."""
    builder = UserImportBuilder(users, options, user_request_validator)
    return builder.build_request(), builder.build_response([])

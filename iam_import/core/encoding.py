"""Wire encoding helpers: web-safe base64, date strings and integer fields."""
from __future__ import annotations
import base64
import binascii
import re
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any, Mapping, Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Leading base-10 integer, same prefix rule as parseInt(value, 10)
_LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")

# Byte fields that travel as web-safe base64 text in JSON documents
USER_BINARY_FIELDS = ("passwordHash", "passwordSalt")
HASH_BINARY_FIELDS = ("key", "saltSeparator")


def to_web_safe_base64(data: bytes) -> str:
    """Encode bytes as URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(bytes(data)).rstrip(b"=").decode("ascii")


def from_web_safe_base64(text: str) -> bytes:
    """Decode URL-safe base64 text, with or without padding.

    Raises:
        ValueError: If the text is not valid base64
    """
    padded = text + "=" * (-len(text) % 4)
    try:
        if "+" in text or "/" in text:
            raise binascii.Error("standard base64 alphabet")
        return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"Invalid web-safe base64 value: {text!r}") from exc


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date_string(value: Any) -> Optional[datetime]:
    """Parse an RFC 1123/2822 or ISO-8601 date string.

    Returns:
        Timezone-aware UTC datetime, or None when the value cannot be parsed
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return _as_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError, OverflowError):
        pass
    try:
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except (ValueError, OverflowError):
        # OverflowError: the offset shifts the value outside years 1-9999 in UTC
        return None


def to_epoch_millis(dt: datetime) -> int:
    return (_as_utc(dt) - EPOCH) // timedelta(milliseconds=1)


def to_utc_string(dt: datetime) -> str:
    """Format as an HTTP-date, e.g. 'Tue, 15 Oct 2019 12:00:00 GMT'."""
    return format_datetime(_as_utc(dt).replace(microsecond=0), usegmt=True)


def to_iso_string(dt: datetime) -> str:
    """Format as ISO-8601 with millisecond precision and a 'Z' suffix."""
    dt = _as_utc(dt)
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{dt.microsecond // 1000:03d}Z"


def get_number_field(obj: Mapping[str, Any], key: str) -> Optional[int]:
    """Return the integer value of obj[key], or None when it is not a number.

    Missing and None values are not numbers. Anything else is rendered with
    str() and its leading base-10 integer is taken ("12" -> 12, 3.7 -> 3).
    """
    value = obj.get(key)
    if value is None:
        return None
    match = _LEADING_INT_PATTERN.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def decode_binary_fields(document: Mapping[str, Any], fields: tuple[str, ...]) -> dict:
    """Return a copy of document with base64 text fields decoded to bytes.

    Values that are not strings are left untouched so type validation can
    still reject them later.
    """
    decoded = dict(document)
    for field_name in fields:
        value = decoded.get(field_name)
        if isinstance(value, str):
            decoded[field_name] = from_web_safe_base64(value)
    return decoded


def decode_user_document(user: Any) -> Any:
    """Decode the binary credential fields of a JSON user document."""
    if not isinstance(user, Mapping):
        return user
    return decode_binary_fields(user, USER_BINARY_FIELDS)


def decode_options_document(options: Any) -> Any:
    """Decode the binary key fields of a JSON hash options document."""
    if not isinstance(options, Mapping) or not isinstance(options.get("hash"), Mapping):
        return options
    decoded = dict(options)
    decoded["hash"] = decode_binary_fields(options["hash"], HASH_BINARY_FIELDS)
    return decoded

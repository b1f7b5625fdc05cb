"""
Input validation helpers.

Pure predicates with no I/O; they are safe to call before touching any store.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from core.errors import ERROR_MESSAGES, ErrorCode

SCORE_MIN = 1
SCORE_MAX = 5
MAX_GROUP_NAME_LENGTH = 50
DEVICE_ID_PREFIX = "device-"
# Upper bound for scheduler and update intervals (one year)
MAX_INTERVAL_SECONDS = 365 * 24 * 60 * 60

MISSING_GROUP_MESSAGE = "Please select a group"
GROUP_NAME_REQUIRED_MESSAGE = "Group name is required"
GROUP_NAME_TOO_LONG_MESSAGE = f"Group name must be {MAX_GROUP_NAME_LENGTH} characters or fewer"

_UUID_DEVICE_ID = re.compile(
    r"device-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
_WORD_DEVICE_ID = re.compile(r"device-\w+", re.ASCII)
_EMAIL = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# Single-pass translation, so "&" produced by one replacement is never re-escaped
_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
        "/": "&#x2F;",
    }
)


@dataclass
class ValidationResult:
    """Outcome of a combined validation; ``errors`` keeps every failure."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_score(score: Any) -> bool:
    """Check that ``score`` is a finite integer between 1 and 5 inclusive."""
    if not _is_number(score):
        return False
    if isinstance(score, float) and (not math.isfinite(score) or not score.is_integer()):
        return False
    return SCORE_MIN <= score <= SCORE_MAX


def is_valid_interval(seconds: Any) -> bool:
    """Check that ``seconds`` is a positive, finite number no larger than one year."""
    if not _is_number(seconds) or not math.isfinite(seconds):
        return False
    return 0 < seconds <= MAX_INTERVAL_SECONDS


def is_valid_group_name(name: Any) -> bool:
    if not isinstance(name, str):
        return False
    return 1 <= len(name.strip()) <= MAX_GROUP_NAME_LENGTH


def is_valid_device_id(device_id: Any, strict: bool = False) -> bool:
    """
    Check the shape of a device identifier.

    Accepts ``device-<uuid>``. Unless ``strict`` is set, any
    ``device-<word characters>`` form is accepted too (fixtures, kiosks).
    """
    if not device_id or not isinstance(device_id, str):
        return False
    if _UUID_DEVICE_ID.fullmatch(device_id):
        return True
    return not strict and _WORD_DEVICE_ID.fullmatch(device_id) is not None


def sanitize_string(value: Any) -> str:
    """HTML-escape untrusted text. Numbers are stringified; other non-strings give ''."""
    if _is_number(value):
        value = str(value)
    if not isinstance(value, str):
        return ""
    return value.translate(_HTML_ESCAPES)


def validate_vote_input(group_id: Any, score: Any, device_id: Any) -> ValidationResult:
    """
    Validate a vote submission.

    All checks run; messages are reported in the order
    group, score, device.
    """
    errors: list[str] = []

    if not isinstance(group_id, str) or not group_id.strip():
        errors.append(MISSING_GROUP_MESSAGE)

    if not is_valid_score(score):
        errors.append(ERROR_MESSAGES[ErrorCode.INVALID_SCORE])

    if not is_valid_device_id(device_id):
        errors.append(ERROR_MESSAGES[ErrorCode.DEVICE_ID_ERROR])

    return ValidationResult(is_valid=not errors, errors=errors)


def group_name_errors(name: Any) -> list[str]:
    """Return the validation message for a group name, or an empty list."""
    if not isinstance(name, str) or not name.strip():
        return [GROUP_NAME_REQUIRED_MESSAGE]
    if not is_valid_group_name(name):
        return [GROUP_NAME_TOO_LONG_MESSAGE]
    return []


def is_valid_url(url: Any) -> bool:
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_valid_email(email: Any) -> bool:
    if not email or not isinstance(email, str):
        return False
    return _EMAIL.fullmatch(email) is not None


def is_in_range(value: Any, minimum: float, maximum: float) -> bool:
    if not _is_number(value) or math.isnan(value):
        return False
    return minimum <= value <= maximum


def is_length_valid(text: Any, min_length: int, max_length: int) -> bool:
    if not text or not isinstance(text, str):
        return False
    return min_length <= len(text) <= max_length

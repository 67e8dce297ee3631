"""
Input validation for request parameters.

PURPOSE: Reject malformed request parameters before any server API call.
AI CONTEXT: Every helper returns the validated value or raises
InputValidationError, which FastAPI turns into a 400 response.

USAGE:
    user_id = validation.user_id(request_value)
    profile_id = validation.profile_id(request_value)
"""

from __future__ import annotations

import ipaddress
import re
from datetime import datetime

from fastapi import HTTPException, status

from .config import Config

__all__ = [
    "InputValidationError",
    "user_id",
    "profile_id",
    "date_time",
    "ip_address",
    "message_id",
]

_PROFILE_ID_PATTERN = re.compile(r"[a-zA-Z0-9.-]+")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class InputValidationError(HTTPException):
    """Client input error, always reported as HTTP 400."""

    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def user_id(value: str | None) -> str:
    """
    Validate a user identifier.

    User ids come from the identity provider and have no fixed shape, so
    only emptiness and control characters are rejected.

    Args:
        value: Raw query or form value.

    Returns:
        The user id, unchanged.

    Raises:
        InputValidationError: If missing, blank or containing control characters.

    Example:
        >>> user_id("alice@example.org")
        'alice@example.org'
    """
    if value is None or not value.strip() or _CONTROL_CHARS.search(value):
        raise InputValidationError('invalid "user_id"')
    return value


def profile_id(value: str | None) -> str:
    """Validate a profile id: letters, digits, dots and dashes only."""
    if value is None or not _PROFILE_ID_PATTERN.fullmatch(value):
        raise InputValidationError('invalid "profile_id"')
    return value


def date_time(value: str | None) -> str:
    """
    Validate a "YYYY-MM-DD HH:MM:SS" timestamp.

    Args:
        value: Raw form value.

    Returns:
        The timestamp string, unchanged, for passing on to the server API.

    Raises:
        InputValidationError: If missing or not a real calendar time.

    Example:
        >>> date_time("2026-02-28 13:37:00")
        '2026-02-28 13:37:00'
    """
    if value is None:
        raise InputValidationError('invalid "date_time"')
    try:
        datetime.strptime(value, Config.DATE_TIME_FORMAT)
    except ValueError:
        raise InputValidationError('invalid "date_time"') from None
    return value


def ip_address(value: str | None) -> str:
    """Validate an IPv4 or IPv6 address."""
    if value is None:
        raise InputValidationError('invalid "ip_address"')
    try:
        ipaddress.ip_address(value)
    except ValueError:
        raise InputValidationError('invalid "ip_address"') from None
    return value


def message_id(value: str | None) -> str:
    """Validate a numeric message id."""
    if value is None or not value.isascii() or not value.isdigit():
        raise InputValidationError('invalid "message_id"')
    return value

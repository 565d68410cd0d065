"""
Core Utilities.

Shared utility functions used across the package.
All modules should import utilities from this module.
"""

import re
import secrets
from datetime import datetime, timezone

OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. This ensures consistent behavior across
    the codebase and simplifies database storage.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_iso(value: datetime) -> str:
    """Format a naive UTC datetime as ISO 8601 with millisecond precision and a Z suffix."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def iso_timestamp() -> str:
    """Current UTC time in the envelope timestamp format."""
    return to_iso(utc_now())


def generate_object_id() -> str:
    """Generate a new 24-character lowercase hexadecimal identifier."""
    return secrets.token_hex(12)


def is_valid_object_id(value: object) -> bool:
    """Check whether a value is a well-formed 24-character hex identifier."""
    return isinstance(value, str) and OBJECT_ID_PATTERN.fullmatch(value) is not None

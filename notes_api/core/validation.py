"""
Validation and Sanitization.

Turns loosely typed request payloads into clean field sets.

Two stages for notes:
    sanitize_note_data()  keeps only recognized, type-correct fields and
                          normalizes them (trim, lowercase, tag cleanup).
    validate_note()       checks the field rules and returns a
                          ValidationResult listing every failure per field.

clean_note_data() runs both and raises ValidationError on failure.

Usage:
    from notes_api.core.validation import clean_note_data

    data = clean_note_data(payload)   # create and full update
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from notes_api.core.constants import (
    EMAIL_MAX_LENGTH,
    MAX_TAGS,
    NAME_MAX_LENGTH,
    NOTE_CATEGORIES,
    NOTE_PRIORITIES,
    NOTE_TYPES,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)
from notes_api.core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")

_ANGLE_BRACKETS = re.compile(r"[<>]")
_QUOTES = re.compile(r"[\"'`]")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)

_NOTE_STRING_FIELDS = ("title", "content", "category", "type", "priority")
_NOTE_BOOLEAN_FIELDS = ("isArchived", "isFavorite")


@dataclass
class ValidationResult:
    """Outcome of validating one entity payload."""

    data: dict[str, Any]
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> list[str]:
        """All failure messages, flattened in field order."""
        return [message for messages in self.errors.values() for message in messages]

    def add_error(self, field_name: str, message: str) -> None:
        self.errors.setdefault(field_name, []).append(message)

    def raise_for_errors(self, message: str = "Validation error") -> dict[str, Any]:
        """Return the data when valid, otherwise raise ValidationError with every reason."""
        if self.errors:
            raise ValidationError(message, errors=self.messages)
        return self.data


# =============================================================================
# Primitive helpers
# =============================================================================


def parse_bool_param(value: str | None) -> bool:
    """Query-string boolean: only the literal "true" is true."""
    return value == "true"


def normalize_tag(value: Any) -> str | None:
    """Lowercase and trim one tag. Returns None for non-scalar values."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return str(value).lower().strip()


def normalize_tags(values: Iterable[Any]) -> list[str]:
    """
    Normalize a tag list.

    Lowercases and trims every entry, drops empty and over-long entries,
    removes duplicates keeping the first occurrence and keeps at most
    MAX_TAGS entries.
    """
    tags: list[str] = []
    for value in values:
        tag = normalize_tag(value)
        if not tag or len(tag) > TAG_MAX_LENGTH or tag in tags:
            continue
        tags.append(tag)
        if len(tags) == MAX_TAGS:
            break
    return tags


def sanitize_input(value: str) -> str:
    """
    Strip markup-like fragments from free text.

    Removes angle brackets, quote characters, javascript: markers and
    inline event handler patterns such as onclick=. Output encoding is
    still the renderer's job.
    """
    value = _ANGLE_BRACKETS.sub("", value)
    value = _QUOTES.sub("", value)
    value = _JS_PROTOCOL.sub("", value)
    value = _EVENT_HANDLER.sub("", value)
    return value.strip()


def validate_email(email: str) -> bool:
    """Conservative local@domain.tld shape check."""
    return len(email) <= EMAIL_MAX_LENGTH and EMAIL_PATTERN.fullmatch(email) is not None


# =============================================================================
# Notes
# =============================================================================


def sanitize_note_data(raw: Mapping[str, Any]) -> dict[str, Any]:
    """
    Keep only recognized, type-correct note fields.

    Strings are trimmed; type and priority are lowercased. Empty strings
    are treated as absent. Tags must be a list. Booleans are accepted only
    when already boolean-typed.
    """
    sanitized: dict[str, Any] = {}

    for name in _NOTE_STRING_FIELDS:
        value = raw.get(name)
        if not isinstance(value, str) or not value:
            continue
        value = value.strip()
        if name in ("type", "priority"):
            value = value.lower()
        sanitized[name] = value

    tags = raw.get("tags")
    if isinstance(tags, list):
        sanitized["tags"] = normalize_tags(tags)

    for name in _NOTE_BOOLEAN_FIELDS:
        value = raw.get(name)
        if isinstance(value, bool):
            sanitized[name] = value

    return sanitized


def validate_note(data: Mapping[str, Any]) -> ValidationResult:
    """Check note field rules on sanitized data."""
    result = ValidationResult(data=dict(data))

    if "title" in data:
        title = data["title"]
        if len(title) < 1:
            result.add_error("title", "Title must be at least 1 character")
        elif len(title) > TITLE_MAX_LENGTH:
            result.add_error("title", f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
    else:
        result.add_error("title", "Title is required")

    if "content" in data:
        if not data["content"]:
            result.add_error("content", "Content cannot be empty")
    else:
        result.add_error("content", "Content is required")

    if "category" in data:
        if data["category"] not in NOTE_CATEGORIES:
            result.add_error(
                "category", f"Category must be one of: {', '.join(NOTE_CATEGORIES)}"
            )
    else:
        result.add_error("category", "Category is required")

    if "type" in data:
        if data["type"] not in NOTE_TYPES:
            result.add_error("type", f"Type must be one of: {', '.join(NOTE_TYPES)}")
    else:
        result.add_error("type", "Type is required")

    if "priority" in data and data["priority"] not in NOTE_PRIORITIES:
        result.add_error(
            "priority", f"Priority must be one of: {', '.join(NOTE_PRIORITIES)}"
        )

    tags = data.get("tags", [])
    if len(tags) > MAX_TAGS:
        result.add_error("tags", f"Cannot have more than {MAX_TAGS} tags")
    if any(len(tag) > TAG_MAX_LENGTH for tag in tags):
        result.add_error("tags", f"Tag cannot exceed {TAG_MAX_LENGTH} characters")

    return result


def clean_note_data(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitize and validate a note payload, raising ValidationError on failure."""
    return validate_note(sanitize_note_data(raw)).raise_for_errors()


# =============================================================================
# Users
# =============================================================================


REGISTRATION_FIELDS = ("username", "email", "password", "firstName", "lastName")


def validate_registration(raw: Mapping[str, Any]) -> ValidationResult:
    """
    Validate and sanitize a registration payload.

    Every field must be a non-empty string. Free-text fields are passed
    through sanitize_input; email is lowercased. The password is returned
    untouched and checked separately by the password policy.
    """
    missing = [
        name for name in REGISTRATION_FIELDS
        if not isinstance(raw.get(name), str) or not raw[name].strip()
    ]
    if missing:
        result = ValidationResult(data={})
        result.add_error("required", "All fields are required")
        for name in missing:
            result.add_error(name, f"{name} is required")
        return result

    data = {
        "username": sanitize_input(raw["username"]),
        "email": sanitize_input(raw["email"]).lower(),
        "first_name": sanitize_input(raw["firstName"]),
        "last_name": sanitize_input(raw["lastName"]),
        "password": raw["password"],
    }
    result = ValidationResult(data=data)

    username = data["username"]
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        result.add_error(
            "username",
            f"Username must be between {USERNAME_MIN_LENGTH} and "
            f"{USERNAME_MAX_LENGTH} characters",
        )
    if username and USERNAME_PATTERN.fullmatch(username) is None:
        result.add_error(
            "username", "Username can only contain letters, numbers and underscores"
        )

    if not validate_email(data["email"]):
        result.add_error("email", "Please provide a valid email address")

    for key, label in (("first_name", "First name"), ("last_name", "Last name")):
        if not data[key]:
            result.add_error(key, f"{label} is required")
        elif len(data[key]) > NAME_MAX_LENGTH:
            result.add_error(key, f"{label} cannot exceed {NAME_MAX_LENGTH} characters")

    return result

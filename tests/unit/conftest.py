"""
Unit Test Fixtures.

Unit tests exercise pure logic. Where a test needs storage it uses the
in-memory database from the root conftest; config boundaries are stubbed
with real Pydantic schema objects.
"""

from collections.abc import Mapping
from typing import Any

import pytest


def make_note_payload(**overrides: Any) -> dict[str, Any]:
    """Minimal valid note payload in wire (camelCase) form."""
    payload: dict[str, Any] = {
        "title": "Morning prayer",
        "content": "Gratitude list",
        "category": "Prayer",
        "type": "prayer",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def note_payload() -> Mapping[str, Any]:
    """A valid note payload."""
    return make_note_payload()

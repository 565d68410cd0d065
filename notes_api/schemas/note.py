"""
Note Schemas.

Pydantic schemas for note API request/response bodies.

Request bodies are deliberately loose (Any-typed): field rules and their
messages live in core.validation, so a wrong-typed field is dropped or
reported there instead of failing schema parsing.
"""

from datetime import datetime
from typing import Any

from pydantic import Field, field_serializer

from notes_api.core.utils import to_iso
from notes_api.schemas.base import CamelModel


class NoteResponse(CamelModel):
    """Schema for a note in API responses."""

    id: str = Field(description="24-character hex identifier")
    title: str
    content: str
    category: str
    type: str
    tags: list[str] = Field(default_factory=list)
    priority: str
    is_archived: bool
    is_favorite: bool
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return to_iso(value)


class PaginationInfo(CamelModel):
    """Page metadata for list responses."""

    current_page: int
    total_pages: int
    total_notes: int
    notes_per_page: int
    has_next_page: bool
    has_prev_page: bool


class NoteListResponse(CamelModel):
    notes: list[NoteResponse]
    pagination: PaginationInfo


class BulkNotesRequest(CamelModel):
    """Body of the bulk endpoints. `tag` is only read by add-tag and remove-tag."""

    note_ids: Any = None
    tag: Any = None


class AdvancedSearchRequest(CamelModel):
    """Advanced search criteria. Every field is optional."""

    text: Any = None
    category: Any = None
    type: Any = None
    priority: Any = None
    tags: Any = None
    is_archived: Any = None
    is_favorite: Any = None
    date_from: Any = None
    date_to: Any = None


def serialize_note(note: Any) -> dict[str, Any]:
    """Render a Note entity as its public JSON shape."""
    return NoteResponse.model_validate(note).model_dump(mode="json", by_alias=True)

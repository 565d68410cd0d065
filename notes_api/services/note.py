"""
Note Service.

Business logic layer for notes. Orchestrates the repository, runs input
validation and implements the note state transitions and bulk operations.

Bulk operations validate the whole id list before touching storage and
are not transactional beyond the request's session: results report
counts, not all-or-nothing outcomes.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.constants import MAX_TAGS, TAG_MAX_LENGTH, TITLE_MAX_LENGTH
from notes_api.core.exceptions import InvalidIdentifierError, ValidationError
from notes_api.core.query import (
    NoteQuery,
    build_advanced_filter,
    export_filter,
    favorites_filter,
    recent_filter,
)
from notes_api.core.utils import is_valid_object_id, utc_now
from notes_api.core.validation import clean_note_data, normalize_tag
from notes_api.models.note import Note
from notes_api.repositories.note import NoteRepository
from notes_api.services.base import BaseService

NOTE_IDS_REQUIRED = "Note IDs array is required"

# Validated payload keys to model attributes
_FIELD_MAP = {
    "title": "title",
    "content": "content",
    "category": "category",
    "type": "type",
    "priority": "priority",
    "tags": "tags",
    "isArchived": "is_archived",
    "isFavorite": "is_favorite",
}


def ensure_valid_id(note_id: str) -> str:
    """Check a 24-character hex id and return it in its stored (lowercase) form."""
    if not is_valid_object_id(note_id):
        raise InvalidIdentifierError()
    return note_id.lower()


def _to_model_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    return {_FIELD_MAP[key]: value for key, value in data.items() if key in _FIELD_MAP}


class NoteService(BaseService):
    """
    Service for note business logic.

    Handles note creation, updates, state changes, search and bulk
    mutations with proper validation and error handling.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)

    # -------------------------------------------------------------------------
    # Single-note operations
    # -------------------------------------------------------------------------

    async def create_note(self, payload: Mapping[str, Any]) -> Note:
        """
        Create a new note.

        Raises:
            ValidationError: If the payload breaks any note rule
        """
        fields = _to_model_fields(clean_note_data(payload))
        self._log_operation("Creating note", title=fields["title"])

        note = await self._execute_db_operation(
            "create_note",
            self.repo.create(**fields),
        )

        self._log_debug("Note created", note_id=note.id)
        return note

    async def get_note(self, note_id: str) -> Note:
        """
        Get a note by ID.

        Raises:
            InvalidIdentifierError: If note_id is malformed
            NotFoundError: If note not found
        """
        note_id = ensure_valid_id(note_id)
        return await self.repo.get_by_id(note_id)

    async def update_note(self, note_id: str, payload: Mapping[str, Any]) -> Note:
        """
        Replace the validated field set of a note.

        The payload is validated as for creation; fields it does not carry
        keep their stored values.

        Raises:
            InvalidIdentifierError: If note_id is malformed
            ValidationError: If the payload breaks any note rule
            NotFoundError: If note not found
        """
        note_id = ensure_valid_id(note_id)
        fields = _to_model_fields(clean_note_data(payload))

        self._log_operation("Updating note", note_id=note_id, fields=list(fields))

        note = await self.repo.get_by_id(note_id)
        for key, value in fields.items():
            setattr(note, key, value)
        note.updated_at = utc_now()

        return await self._execute_db_operation("update_note", self.repo.save(note))

    async def delete_note(self, note_id: str) -> Note:
        """
        Delete a note.

        Returns:
            The note as it was before deletion

        Raises:
            InvalidIdentifierError: If note_id is malformed
            NotFoundError: If note not found
        """
        note_id = ensure_valid_id(note_id)
        self._log_operation("Deleting note", note_id=note_id)

        return await self._execute_db_operation(
            "delete_note",
            self.repo.delete(note_id),
        )

    async def archive_note(self, note_id: str) -> Note:
        """Archive a note. Archiving an archived note is not an error."""
        note = await self.get_note(note_id)
        self._log_operation("Archiving note", note_id=note_id)
        note.archive()
        return await self.repo.save(note)

    async def unarchive_note(self, note_id: str) -> Note:
        """Unarchive a note. Unarchiving an active note is not an error."""
        note = await self.get_note(note_id)
        self._log_operation("Unarchiving note", note_id=note_id)
        note.unarchive()
        return await self.repo.save(note)

    async def toggle_favorite(self, note_id: str) -> Note:
        """Flip the favorite flag; the returned note carries the new state."""
        note = await self.get_note(note_id)
        is_favorite = note.toggle_favorite()
        self._log_operation("Toggled favorite", note_id=note_id, is_favorite=is_favorite)
        return await self.repo.save(note)

    async def duplicate_note(self, note_id: str) -> Note:
        """
        Clone a note under a new id with " (Copy)" appended to the title.

        Raises:
            ValidationError: If the suffixed title would exceed the title limit
        """
        source = await self.get_note(note_id)
        copy = source.duplicate()
        if len(copy.title) > TITLE_MAX_LENGTH:
            raise ValidationError(
                "Validation error",
                errors=[f"Title cannot exceed {TITLE_MAX_LENGTH} characters"],
            )

        self._log_operation("Duplicating note", note_id=note_id)
        return await self._execute_db_operation("duplicate_note", self.repo.add(copy))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def list_notes(self, query: NoteQuery) -> tuple[list[Note], int]:
        """Run a filtered, sorted, paginated listing. Returns (notes, total)."""
        self._log_debug(
            "Listing notes",
            page=query.page,
            limit=query.limit,
            sort=query.sort,
        )
        return await self.repo.find(query)

    async def get_favorites(self, include_archived: bool = False) -> list[Note]:
        return await self.repo.find_all(favorites_filter(include_archived))

    async def get_recent(self, days: int, include_archived: bool = False) -> list[Note]:
        """Notes updated in the last `days` days, newest update first."""
        return await self.repo.find_all(recent_filter(days, include_archived))

    async def get_stats(self) -> dict[str, Any]:
        return await self.repo.get_stats()

    async def get_categories(self) -> list[str]:
        return await self.repo.distinct_categories()

    async def get_tags(self) -> list[str]:
        return await self.repo.distinct_tags()

    async def advanced_search(self, params: Mapping[str, Any]) -> list[Note]:
        """
        Multi-criteria search, newest update first.

        Raises:
            ValidationError: If dateFrom or dateTo is not an ISO date
        """
        note_filter = build_advanced_filter(params)
        self._log_debug("Advanced search", search=note_filter.search)
        return await self.repo.find_all(note_filter)

    async def export_notes(self, include_archived: bool = False) -> list[Note]:
        """Every note for export, newest first."""
        return await self.repo.find_all(
            export_filter(include_archived),
            sort={"createdAt": -1},
        )

    # -------------------------------------------------------------------------
    # Bulk operations
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_bulk_ids(note_ids: Any) -> list[str]:
        """
        Check a bulk id list before any write.

        Raises:
            ValidationError: If note_ids is not a non-empty list
            InvalidIdentifierError: If any entry is malformed
        """
        if not isinstance(note_ids, list) or not note_ids:
            raise ValidationError(NOTE_IDS_REQUIRED)
        if not all(is_valid_object_id(note_id) for note_id in note_ids):
            raise InvalidIdentifierError("Invalid note ID format(s) detected")
        return [note_id.lower() for note_id in note_ids]

    @staticmethod
    def validate_bulk_tag(tag: Any) -> str:
        """
        Check and normalize the tag of a bulk tag request.

        Raises:
            ValidationError: If the tag is missing, blank or too long
        """
        if not isinstance(tag, str) or not tag.strip():
            raise ValidationError("Tag is required and must be a non-empty string")
        normalized = normalize_tag(tag)
        if len(normalized) > TAG_MAX_LENGTH:
            raise ValidationError(
                "Validation error",
                errors=[f"Tag cannot exceed {TAG_MAX_LENGTH} characters"],
            )
        return normalized

    @classmethod
    def validate_bulk_tag_request(cls, note_ids: Any, tag: Any) -> tuple[list[str], str]:
        """Validate a bulk tag request: id list present, then tag, then id formats."""
        if not isinstance(note_ids, list) or not note_ids:
            raise ValidationError(NOTE_IDS_REQUIRED)
        normalized = cls.validate_bulk_tag(tag)
        return cls.validate_bulk_ids(note_ids), normalized

    async def bulk_archive(self, note_ids: list[str]) -> int:
        """Archive many notes. Returns how many actually changed state."""
        self._log_operation("Bulk archiving notes", requested=len(note_ids))
        return await self._execute_db_operation(
            "bulk_archive",
            self.repo.bulk_set_archived(note_ids, True),
        )

    async def bulk_unarchive(self, note_ids: list[str]) -> int:
        """Unarchive many notes. Returns how many actually changed state."""
        self._log_operation("Bulk unarchiving notes", requested=len(note_ids))
        return await self._execute_db_operation(
            "bulk_unarchive",
            self.repo.bulk_set_archived(note_ids, False),
        )

    async def bulk_delete(self, note_ids: list[str]) -> int:
        """Delete many notes. Returns how many were deleted."""
        self._log_operation("Bulk deleting notes", requested=len(note_ids))
        return await self._execute_db_operation(
            "bulk_delete",
            self.repo.bulk_delete(note_ids),
        )

    async def bulk_add_tag(self, note_ids: list[str], tag: str) -> int:
        """
        Add a tag to many notes.

        Notes that already carry the tag, or already hold the maximum
        number of tags, are left alone and not counted.
        """
        modified = 0
        now = utc_now()
        for note in await self.repo.get_many(note_ids):
            if tag not in note.tags and len(note.tags) >= MAX_TAGS:
                self._log_debug("Tag limit reached, skipping note", note_id=note.id)
                continue
            if note.add_tag(tag):
                note.updated_at = now
                modified += 1

        await self._execute_db_operation("bulk_add_tag", self.session.flush())
        self._log_operation("Bulk added tag", tag=tag, modified=modified)
        return modified

    async def bulk_remove_tag(self, note_ids: list[str], tag: str) -> int:
        """Remove a tag from many notes. Returns how many carried it."""
        modified = 0
        now = utc_now()
        for note in await self.repo.get_many(note_ids):
            if note.remove_tag(tag):
                note.updated_at = now
                modified += 1

        await self._execute_db_operation("bulk_remove_tag", self.session.flush())
        self._log_operation("Bulk removed tag", tag=tag, modified=modified)
        return modified

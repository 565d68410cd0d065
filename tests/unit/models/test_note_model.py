"""
Unit Tests for Note entity state changes.

The entity methods are pure; nothing here touches the database.
"""

import pytest

from notes_api.core.exceptions import ValidationError
from notes_api.models.note import Note


@pytest.fixture
def note() -> Note:
    note = Note(
        title="Sunday notes",
        content="Hebrews 11",
        category="Sermons",
        type="sermon",
        priority="high",
        is_archived=False,
        is_favorite=False,
    )
    note.tags = ["faith", "hope"]
    return note


class TestArchive:
    def test_archive_is_idempotent(self, note):
        note.archive()
        note.archive()
        assert note.is_archived is True

    def test_unarchive(self, note):
        note.archive()
        note.unarchive()
        assert note.is_archived is False


class TestToggleFavorite:
    def test_returns_the_new_state(self, note):
        assert note.toggle_favorite() is True
        assert note.toggle_favorite() is False


class TestTags:
    """Tests for single-note tag helpers."""

    def test_add_tag_normalizes(self, note):
        assert note.add_tag("  Love ") is True
        assert note.tags == ["faith", "hope", "love"]

    def test_add_existing_tag_is_a_no_op(self, note):
        assert note.add_tag("FAITH") is False
        assert note.tags == ["faith", "hope"]

    def test_add_tag_rejects_blank_and_long(self, note):
        with pytest.raises(ValidationError):
            note.add_tag("   ")
        with pytest.raises(ValidationError, match="Tag cannot exceed 50 characters"):
            note.add_tag("x" * 51)

    def test_eleventh_tag_is_rejected(self, note):
        note.tags = [f"t{i}" for i in range(10)]
        with pytest.raises(ValidationError, match="Cannot have more than 10 tags"):
            note.add_tag("extra")

    def test_remove_tag(self, note):
        assert note.remove_tag("Faith") is True
        assert note.tags == ["hope"]
        assert note.remove_tag("missing") is False

    def test_tag_order_is_kept(self, note):
        note.tags = ["b", "a", "c"]
        assert [link.position for link in note.tag_links] == [0, 1, 2]
        assert note.tags == ["b", "a", "c"]


class TestDuplicate:
    def test_copy_keeps_fields_and_suffixes_title(self, note):
        note.is_favorite = True
        copy = note.duplicate()

        assert copy.title == "Sunday notes (Copy)"
        assert copy.tags == note.tags
        assert (copy.content, copy.category, copy.type, copy.priority) == (
            note.content, note.category, note.type, note.priority,
        )
        assert copy.is_favorite is True
        assert copy.id is None
        assert copy.created_at is None

    def test_copy_has_its_own_tag_rows(self, note):
        copy = note.duplicate()
        copy.add_tag("new")

        assert "new" not in note.tags

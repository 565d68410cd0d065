"""
Unit Tests for NoteService.

Runs the service against the in-memory test database so repository SQL
is exercised too.
"""

from datetime import timedelta

import pytest

from notes_api.core.exceptions import InvalidIdentifierError, NotFoundError, ValidationError
from notes_api.core.query import build_note_query
from notes_api.core.utils import generate_object_id, utc_now
from notes_api.services.note import NOTE_IDS_REQUIRED, NoteService


@pytest.fixture
def service(db_session) -> NoteService:
    return NoteService(db_session)


@pytest.fixture
def make_note(service, note_payload):
    async def _make(**overrides):
        return await service.create_note({**note_payload, **overrides})

    return _make


class TestCreateAndGet:
    """Create then fetch round trip."""

    async def test_defaults_are_applied(self, service):
        created = await service.create_note({
            "title": "T",
            "content": "C",
            "category": "General",
            "type": "general",
        })
        fetched = await service.get_note(created.id)

        assert (fetched.title, fetched.content, fetched.category, fetched.type) == (
            "T", "C", "General", "general",
        )
        assert fetched.priority == "medium"
        assert fetched.is_archived is False
        assert fetched.is_favorite is False
        assert len(fetched.id) == 24

    async def test_tags_are_normalized_on_create(self, make_note):
        note = await make_note(tags=["Faith", "faith", " Hope "])
        assert note.tags == ["faith", "hope"]

    async def test_invalid_payload_creates_nothing(self, service, note_payload):
        with pytest.raises(ValidationError):
            await service.create_note({**note_payload, "category": "Recipes"})

        notes, total = await service.list_notes(build_note_query({}))
        assert total == 0

    async def test_malformed_id(self, service):
        with pytest.raises(InvalidIdentifierError):
            await service.get_note("not-an-id")

    async def test_unknown_id(self, service):
        with pytest.raises(NotFoundError, match="Note not found"):
            await service.get_note(generate_object_id())

    async def test_uppercase_id_is_matched(self, service, make_note):
        note = await make_note()

        fetched = await service.get_note(note.id.upper())

        assert fetched.id == note.id


class TestUpdateAndDelete:
    async def test_update_replaces_validated_fields(self, service, make_note, note_payload):
        note = await make_note(tags=["old"], priority="high")
        before = note.updated_at

        updated = await service.update_note(
            note.id, {**note_payload, "title": "New title", "tags": ["new"]},
        )

        assert updated.title == "New title"
        assert updated.tags == ["new"]
        assert updated.priority == "high"
        assert updated.updated_at >= before

    async def test_update_validates(self, service, make_note):
        note = await make_note()
        with pytest.raises(ValidationError):
            await service.update_note(note.id, {"title": "only a title"})

    async def test_update_unknown_id(self, service, note_payload):
        with pytest.raises(NotFoundError):
            await service.update_note(generate_object_id(), note_payload)

    async def test_delete_returns_snapshot(self, service, make_note):
        note = await make_note(tags=["a"])

        deleted = await service.delete_note(note.id)

        assert deleted.id == note.id
        assert deleted.title == note.title
        with pytest.raises(NotFoundError):
            await service.get_note(note.id)
        assert await service.get_tags() == []


class TestStateChanges:
    async def test_archive_twice_is_fine(self, service, make_note):
        note = await make_note()

        assert (await service.archive_note(note.id)).is_archived is True
        assert (await service.archive_note(note.id)).is_archived is True

    async def test_unarchive(self, service, make_note):
        note = await make_note(isArchived=True)
        assert (await service.unarchive_note(note.id)).is_archived is False

    async def test_toggle_favorite(self, service, make_note):
        note = await make_note()

        assert (await service.toggle_favorite(note.id)).is_favorite is True
        assert (await service.toggle_favorite(note.id)).is_favorite is False

    async def test_duplicate(self, service, make_note):
        source = await make_note(tags=["faith"], priority="low", isFavorite=True)

        copy = await service.duplicate_note(source.id)

        assert copy.id != source.id
        assert copy.title == f"{source.title} (Copy)"
        assert copy.tags == ["faith"]
        assert copy.priority == "low"
        assert copy.is_favorite is True
        assert copy.created_at >= source.created_at

    async def test_duplicate_rejects_overlong_title(self, service, make_note):
        source = await make_note(title="t" * 195)
        with pytest.raises(ValidationError):
            await service.duplicate_note(source.id)


class TestQueries:
    async def test_favorites_and_recent(self, service, make_note):
        favorite = await make_note(title="fav", isFavorite=True)
        await make_note(title="fav archived", isFavorite=True, isArchived=True)
        await make_note(title="plain")

        favorites = await service.get_favorites()
        assert [n.id for n in favorites] == [favorite.id]
        assert len(await service.get_favorites(include_archived=True)) == 2

        assert len(await service.get_recent(7)) == 2
        assert len(await service.get_recent(7, include_archived=True)) == 3

    async def test_recent_excludes_old_updates(self, service, make_note, db_session):
        note = await make_note()
        note.updated_at = utc_now() - timedelta(days=30)
        await db_session.flush()

        assert await service.get_recent(7) == []
        assert len(await service.get_recent(31)) == 1

    async def test_stats(self, service, make_note):
        await make_note(category="Prayer", isFavorite=True)
        await make_note(category="Prayer", isArchived=True)
        await make_note(category="General", type="general")

        stats = await service.get_stats()

        assert stats["totalNotes"] == 3
        assert stats["archivedNotes"] == 1
        assert stats["activeNotes"] == 2
        assert stats["favoriteNotes"] == 1
        assert stats["categoryCounts"] == [
            {"category": "General", "total": 1, "archived": 0},
            {"category": "Prayer", "total": 2, "archived": 1},
        ]

    async def test_stats_on_empty_table(self, service):
        stats = await service.get_stats()
        assert stats["totalNotes"] == 0
        assert stats["categoryCounts"] == []

    async def test_distinct_categories_and_tags(self, service, make_note):
        await make_note(category="Prayer", tags=["hope", "faith"])
        await make_note(category="General", type="general", tags=["faith"])

        assert await service.get_categories() == ["General", "Prayer"]
        assert await service.get_tags() == ["faith", "hope"]

    async def test_advanced_search_requires_every_tag(self, service, make_note):
        both = await make_note(tags=["faith", "hope"])
        await make_note(tags=["faith"])

        results = await service.advanced_search({"tags": ["faith", "hope"]})

        assert [n.id for n in results] == [both.id]

    async def test_advanced_search_spans_archived_notes(self, service, make_note):
        await make_note(title="Psalm 23", isArchived=True)
        await make_note(title="Psalm 91")

        assert len(await service.advanced_search({"text": "psalm"})) == 2
        assert len(await service.advanced_search({"text": "psalm", "isArchived": False})) == 1

    async def test_search_treats_wildcards_literally(self, service, make_note):
        await make_note(title="100% sure")
        await make_note(title="1000 reasons")

        results = await service.advanced_search({"text": "100%"})

        assert [n.title for n in results] == ["100% sure"]

    async def test_export_is_newest_first(self, service, make_note):
        first = await make_note(title="first")
        second = await make_note(title="second")

        exported = await service.export_notes()

        assert [n.id for n in exported] == [second.id, first.id]


class TestBulkValidation:
    """Bulk requests are validated before anything is written."""

    @pytest.mark.parametrize("note_ids", [None, [], "abc", {"a": 1}])
    def test_ids_must_be_a_non_empty_list(self, note_ids):
        with pytest.raises(ValidationError, match=NOTE_IDS_REQUIRED):
            NoteService.validate_bulk_ids(note_ids)

    def test_one_malformed_id_rejects_the_batch(self):
        ids = [generate_object_id() for _ in range(5)] + ["bad"]
        with pytest.raises(InvalidIdentifierError, match="Invalid note ID format"):
            NoteService.validate_bulk_ids(ids)

    def test_ids_are_lowercased(self):
        note_id = generate_object_id()
        assert NoteService.validate_bulk_ids([note_id.upper()]) == [note_id]

    @pytest.mark.parametrize("tag", [None, "", "   ", 5])
    def test_tag_is_required(self, tag):
        with pytest.raises(ValidationError, match="Tag is required"):
            NoteService.validate_bulk_tag(tag)

    def test_tag_length(self):
        with pytest.raises(ValidationError):
            NoteService.validate_bulk_tag("x" * 51)

    def test_tag_is_normalized(self):
        assert NoteService.validate_bulk_tag("  Faith ") == "faith"

    def test_ids_are_checked_before_the_tag(self):
        with pytest.raises(ValidationError, match=NOTE_IDS_REQUIRED):
            NoteService.validate_bulk_tag_request([], None)


class TestBulkOperations:
    async def test_bulk_archive_counts_changes_only(self, service, make_note):
        notes = [await make_note() for _ in range(3)]
        await service.archive_note(notes[0].id)

        modified = await service.bulk_archive([n.id for n in notes])

        assert modified == 2
        for note in notes:
            assert (await service.get_note(note.id)).is_archived is True

    async def test_bulk_unarchive(self, service, make_note):
        notes = [await make_note(isArchived=True) for _ in range(2)]
        assert await service.bulk_unarchive([n.id for n in notes]) == 2

    async def test_bulk_delete_ignores_unknown_ids(self, service, make_note):
        note = await make_note(tags=["x"])

        deleted = await service.bulk_delete([note.id, generate_object_id()])

        assert deleted == 1
        assert await service.get_tags() == []

    async def test_bulk_add_tag(self, service, make_note):
        tagged = await make_note(tags=["faith"])
        untagged = await make_note()
        full = await make_note(tags=[f"t{i}" for i in range(10)])

        modified = await service.bulk_add_tag([tagged.id, untagged.id, full.id], "faith")

        assert modified == 1
        assert (await service.get_note(untagged.id)).tags == ["faith"]
        assert len((await service.get_note(full.id)).tags) == 10

    async def test_bulk_remove_tag(self, service, make_note):
        first = await make_note(tags=["faith", "hope"])
        second = await make_note(tags=["hope"])

        modified = await service.bulk_remove_tag([first.id, second.id], "faith")

        assert modified == 1
        assert (await service.get_note(first.id)).tags == ["hope"]

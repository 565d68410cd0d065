"""
Note Repository.

Data access layer for notes. Executes the NoteFilter / NoteQuery
descriptors built in core.query against the notes and note_tags tables.
"""

from typing import Any

from sqlalchemy import ColumnElement, case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.query import LIKE_ESCAPE, NoteFilter, NoteQuery, SortSpec
from notes_api.core.utils import utc_now
from notes_api.models.note import Note, NoteTag
from notes_api.repositories.base import BaseRepository

# Public sort names to columns
SORT_COLUMNS = {
    "createdAt": Note.created_at,
    "updatedAt": Note.updated_at,
    "title": Note.title,
    "category": Note.category,
    "type": Note.type,
    "priority": Note.priority,
}


def build_conditions(note_filter: NoteFilter) -> list[ColumnElement[bool]]:
    """Translate a NoteFilter into WHERE clauses. An empty filter yields no clauses."""
    conditions: list[ColumnElement[bool]] = []

    if note_filter.is_archived is not None:
        conditions.append(Note.is_archived == note_filter.is_archived)
    if note_filter.is_favorite is not None:
        conditions.append(Note.is_favorite == note_filter.is_favorite)
    if note_filter.category:
        conditions.append(Note.category == note_filter.category)
    if note_filter.type:
        conditions.append(Note.type == note_filter.type)
    if note_filter.priority:
        conditions.append(Note.priority == note_filter.priority)

    if note_filter.tags_any:
        conditions.append(Note.tag_links.any(NoteTag.tag.in_(note_filter.tags_any)))
    for tag in note_filter.tags_all:
        conditions.append(Note.tag_links.any(NoteTag.tag == tag))

    pattern = note_filter.search_pattern
    if pattern is not None:
        conditions.append(
            or_(
                Note.title.ilike(pattern, escape=LIKE_ESCAPE),
                Note.content.ilike(pattern, escape=LIKE_ESCAPE),
                Note.tag_links.any(NoteTag.tag.ilike(pattern, escape=LIKE_ESCAPE)),
            )
        )

    if note_filter.created_from is not None:
        conditions.append(Note.created_at >= note_filter.created_from)
    if note_filter.created_to is not None:
        conditions.append(Note.created_at <= note_filter.created_to)
    if note_filter.updated_since is not None:
        conditions.append(Note.updated_at >= note_filter.updated_since)

    return conditions


def build_order_by(sort: SortSpec) -> list[Any]:
    """Single-field ordering plus an id tiebreak so pages are stable."""
    order_by: list[Any] = []
    for field_name, direction in sort.items():
        column = SORT_COLUMNS[field_name]
        order_by.append(column.asc() if direction == 1 else column.desc())
    order_by.append(Note.id.asc())
    return order_by


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository
    and adds filtered listing, aggregates and bulk mutations.
    """

    model = Note
    not_found_message = "Note not found"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def find(self, query: NoteQuery) -> tuple[list[Note], int]:
        """
        Run a paginated list query.

        Returns:
            Tuple of (notes on the requested page, total matching notes)
        """
        conditions = build_conditions(query.filter)

        total_result = await self.session.execute(
            select(func.count()).select_from(Note).where(*conditions)
        )
        total = total_result.scalar_one()

        result = await self.session.execute(
            select(Note)
            .where(*conditions)
            .order_by(*build_order_by(query.sort))
            .offset(query.skip)
            .limit(query.limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total

    async def find_all(
        self,
        note_filter: NoteFilter,
        sort: SortSpec | None = None,
    ) -> list[Note]:
        """Every note matching the filter, newest update first unless told otherwise."""
        result = await self.session.execute(
            select(Note)
            .where(*build_conditions(note_filter))
            .order_by(*build_order_by(sort or {"updatedAt": -1}))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_many(self, ids: list[str]) -> list[Note]:
        """Load the notes with the given ids; unknown ids are ignored."""
        result = await self.session.execute(
            select(Note)
            .where(Note.id.in_(ids))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_stats(self) -> dict[str, Any]:
        """Aggregate counts over the whole table, computed at call time."""
        archived = case((Note.is_archived.is_(True), 1), else_=0)
        favorite = case((Note.is_favorite.is_(True), 1), else_=0)

        totals = (
            await self.session.execute(
                select(
                    func.count(Note.id),
                    func.coalesce(func.sum(archived), 0),
                    func.coalesce(func.sum(favorite), 0),
                )
            )
        ).one()
        total, archived_count, favorite_count = (int(value) for value in totals)

        per_category = await self.session.execute(
            select(Note.category, func.count(Note.id), func.sum(archived))
            .group_by(Note.category)
            .order_by(Note.category)
        )

        return {
            "totalNotes": total,
            "archivedNotes": archived_count,
            "activeNotes": total - archived_count,
            "favoriteNotes": favorite_count,
            "categoryCounts": [
                {"category": category, "total": int(count), "archived": int(archived_in)}
                for category, count, archived_in in per_category.all()
            ],
        }

    async def distinct_categories(self) -> list[str]:
        result = await self.session.execute(
            select(Note.category).distinct().order_by(Note.category)
        )
        return list(result.scalars().all())

    async def distinct_tags(self) -> list[str]:
        result = await self.session.execute(
            select(NoteTag.tag).distinct().order_by(NoteTag.tag)
        )
        return list(result.scalars().all())

    async def bulk_set_archived(self, ids: list[str], archived: bool) -> int:
        """
        Set the archive flag on many notes.

        Returns:
            Number of notes whose flag actually changed
        """
        result = await self.session.execute(
            update(Note)
            .where(Note.id.in_(ids), Note.is_archived != archived)
            .values(is_archived=archived, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def bulk_delete(self, ids: list[str]) -> int:
        """
        Delete many notes and their tags.

        Returns:
            Number of notes deleted
        """
        await self.session.execute(
            delete(NoteTag)
            .where(NoteTag.note_id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            delete(Note)
            .where(Note.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

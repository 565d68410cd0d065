"""
Note Model.

Database models for notes and their tags.

Tags live in their own table (note_tags) so tag filters, tag search and
distinct-tag listing run in SQL. `position` keeps first-seen order.
"""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notes_api.core.constants import (
    DEFAULT_PRIORITY,
    DUPLICATE_TITLE_SUFFIX,
    MAX_TAGS,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from notes_api.core.exceptions import ValidationError
from notes_api.core.validation import normalize_tag
from notes_api.models.base import Base, ObjectIdMixin, TimestampMixin


class NoteTag(Base):
    """One tag on one note."""

    __tablename__ = "note_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag: Mapped[str] = mapped_column(String(TAG_MAX_LENGTH), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<NoteTag(note_id={self.note_id}, tag={self.tag!r})>"


class Note(ObjectIdMixin, TimestampMixin, Base):
    """
    Note database model.

    State changes (archive, favorite, tag edits, duplication) are plain
    methods on the entity. Persistence is the repository's job.
    """

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=DEFAULT_PRIORITY,
        index=True,
    )
    is_archived: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)
    is_favorite: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)

    tag_links: Mapped[list[NoteTag]] = relationship(
        order_by=NoteTag.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [link.tag for link in self.tag_links]

    @tags.setter
    def tags(self, values: list[str]) -> None:
        # Reuse existing rows so an unchanged tag is never deleted and re-inserted
        existing = {link.tag: link for link in self.tag_links}
        links = []
        for position, tag in enumerate(values):
            link = existing.get(tag) or NoteTag(tag=tag)
            link.position = position
            links.append(link)
        self.tag_links = links

    def archive(self) -> None:
        self.is_archived = True

    def unarchive(self) -> None:
        self.is_archived = False

    def toggle_favorite(self) -> bool:
        """Flip the favorite flag and return the new state."""
        self.is_favorite = not self.is_favorite
        return self.is_favorite

    def add_tag(self, tag: str) -> bool:
        """
        Add one tag, lowercased and trimmed.

        Returns False when the tag is already present.

        Raises:
            ValidationError: For an empty or over-long tag, or an 11th tag
        """
        normalized = normalize_tag(tag) if isinstance(tag, str) else None
        if not normalized:
            raise ValidationError("Tag must be a non-empty string")
        if len(normalized) > TAG_MAX_LENGTH:
            raise ValidationError(f"Tag cannot exceed {TAG_MAX_LENGTH} characters")

        current = self.tags
        if normalized in current:
            return False
        if len(current) >= MAX_TAGS:
            raise ValidationError(f"Cannot have more than {MAX_TAGS} tags")
        self.tags = [*current, normalized]
        return True

    def remove_tag(self, tag: str) -> bool:
        """Remove one tag. Returns False when the tag was not present."""
        normalized = normalize_tag(tag)
        current = self.tags
        if normalized not in current:
            return False
        self.tags = [t for t in current if t != normalized]
        return True

    def duplicate(self) -> "Note":
        """Build an unsaved copy with a fresh id and timestamps."""
        return Note(
            title=f"{self.title}{DUPLICATE_TITLE_SUFFIX}",
            content=self.content,
            category=self.category,
            type=self.type,
            priority=self.priority,
            is_archived=self.is_archived,
            is_favorite=self.is_favorite,
            tag_links=[NoteTag(tag=tag, position=i) for i, tag in enumerate(self.tags)],
        )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r})>"

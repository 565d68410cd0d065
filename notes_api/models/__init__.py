"""
Database Models.

Importing this package registers every model on Base.metadata.
"""

from notes_api.models.note import Note, NoteTag
from notes_api.models.user import User

__all__ = ["Note", "NoteTag", "User"]

"""
Note Export.

Renders exported notes as a JSON document or CSV text.

CSV layout: one header row, then one row per note, written by csv.writer
with minimal quoting. Fields holding a comma, a double quote or a line
break are double-quoted with embedded quotes doubled; tags are joined
with ", ". Rows are separated by "\\n" with no trailing terminator.
"""

import csv
import io
from collections.abc import Sequence
from typing import Any

from notes_api.core.utils import iso_timestamp, to_iso
from notes_api.models.note import Note
from notes_api.schemas.note import serialize_note

CSV_COLUMNS = (
    "ID",
    "Title",
    "Content",
    "Category",
    "Type",
    "Tags",
    "Priority",
    "Is Archived",
    "Is Favorite",
    "Created At",
    "Updated At",
)
CSV_HEADER = ",".join(CSV_COLUMNS)

JSON_FILENAME = "notes-export.json"
CSV_FILENAME = "notes-export.csv"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def note_to_csv_row(note: Note) -> list[str]:
    return [
        note.id,
        note.title,
        note.content,
        note.category,
        note.type,
        ", ".join(note.tags),
        note.priority,
        _flag(note.is_archived),
        _flag(note.is_favorite),
        to_iso(note.created_at),
        to_iso(note.updated_at),
    ]


def render_csv(notes: Sequence[Note]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    writer.writerows(note_to_csv_row(note) for note in notes)
    return buffer.getvalue().removesuffix("\n")


def build_json_export(notes: Sequence[Note], include_archived: bool) -> dict[str, Any]:
    return {
        "exportDate": iso_timestamp(),
        "totalNotes": len(notes),
        "includeArchived": include_archived,
        "notes": [serialize_note(note) for note in notes],
    }

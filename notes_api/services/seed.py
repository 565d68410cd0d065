"""
Seed Data.

Replaces every stored note with a fixed set of sample notes.
Used by `python run.py --action seed`.
"""

from typing import Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.models.note import Note, NoteTag
from notes_api.services.note import NoteService

SAMPLE_NOTES: tuple[dict[str, Any], ...] = (
    {
        "title": "Sunday Service Sermon Notes",
        "content": (
            "Main points for this Sunday's sermon on faith and perseverance. "
            "Key verses: Hebrews 11:1, Romans 5:3-4. Remember to emphasize the "
            "importance of trusting God during difficult times."
        ),
        "category": "Sermons",
        "type": "sermon",
        "tags": ["faith", "perseverance", "sunday", "hebrews", "romans"],
        "priority": "high",
    },
    {
        "title": "Prayer Request List",
        "content": (
            "Weekly prayer requests from congregation members. Include requests "
            "for healing, guidance, and thanksgiving. Review and update before "
            "prayer meeting."
        ),
        "category": "Prayer",
        "type": "prayer",
        "tags": ["prayer", "congregation", "weekly", "requests"],
        "priority": "medium",
    },
    {
        "title": "Bible Study - Romans 8",
        "content": (
            "Study notes on Romans chapter 8, focusing on life in the Spirit. "
            "Key themes: freedom from condemnation, living by the Spirit, future "
            "glory. Discussion questions prepared."
        ),
        "category": "Bible Study",
        "type": "study",
        "tags": ["romans", "spirit", "study", "freedom", "glory"],
        "priority": "medium",
    },
    {
        "title": "Youth Ministry Planning",
        "content": (
            "Ideas and plans for upcoming youth ministry events and activities. "
            "Summer camp preparations, weekly activities, and outreach programs. "
            "Budget considerations included."
        ),
        "category": "Ministry",
        "type": "ministry",
        "tags": ["youth", "ministry", "planning", "events", "outreach"],
        "priority": "high",
    },
    {
        "title": "Communion Preparation Notes",
        "content": (
            "Guidelines and preparation checklist for monthly communion service. "
            "Include scripture readings, prayer points, and setup requirements."
        ),
        "category": "Sermons",
        "type": "sermon",
        "tags": ["communion", "preparation", "monthly", "scripture"],
        "priority": "medium",
    },
    {
        "title": "Personal Reflection - Philippians 4:13",
        "content": (
            'Personal thoughts and reflections on "I can do all things through '
            'Christ who strengthens me". How this verse applies to current '
            "challenges and ministry work."
        ),
        "category": "Personal",
        "type": "personal",
        "tags": ["philippians", "strength", "reflection", "personal"],
        "priority": "low",
    },
    {
        "title": "Church Leadership Meeting Notes",
        "content": (
            "Notes from the monthly leadership meeting. Discussion topics: budget "
            "review, upcoming events, community outreach initiatives, and staff "
            "updates."
        ),
        "category": "Ministry",
        "type": "ministry",
        "tags": ["leadership", "meeting", "budget", "events"],
        "priority": "high",
    },
    {
        "title": "Easter Service Preparation",
        "content": (
            "Comprehensive plan for Easter Sunday service. Special music, "
            "decorations, children's program, and resurrection message outline."
        ),
        "category": "Sermons",
        "type": "sermon",
        "tags": ["easter", "resurrection", "special", "children"],
        "priority": "high",
    },
)


async def seed_notes(session: AsyncSession) -> tuple[int, list[Note]]:
    """
    Delete all notes and insert the samples.

    Returns:
        Tuple of (number of notes removed, created notes)
    """
    await session.execute(delete(NoteTag))
    removed = await session.execute(delete(Note))

    service = NoteService(session)
    created = [await service.create_note(payload) for payload in SAMPLE_NOTES]
    return removed.rowcount or 0, created

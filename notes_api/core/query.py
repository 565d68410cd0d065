"""
Query Builder.

Translates query-string parameters into a storage-neutral descriptor:

    NoteQuery(filter=NoteFilter(...), sort={"createdAt": -1}, page, limit, skip)

The repository layer turns the descriptor into SQL. Nothing here touches
the database, and nothing here raises on bad list parameters: invalid or
missing values fall back to documented defaults.

Usage:
    from notes_api.core.query import build_note_query

    query = build_note_query(request.query_params)
    notes, total = await repo.find(query)
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from notes_api.core.constants import (
    DEFAULT_RECENT_DAYS,
    DEFAULT_SORT_FIELD,
    DEFAULT_SORT_ORDER,
    MAX_OFFSET,
    MAX_RECENT_DAYS,
    SORTABLE_FIELDS,
)
from notes_api.core.exceptions import ValidationError
from notes_api.core.utils import utc_now
from notes_api.core.validation import normalize_tag, parse_bool_param

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

LIKE_ESCAPE = "\\"

SortSpec = dict[str, int]


@dataclass
class PaginationParams:
    """Resolved page window."""

    page: int
    limit: int
    skip: int


@dataclass
class NoteFilter:
    """
    Canonical note filter.

    None (or an empty list) means "no predicate" for that field. The only
    predicate present by default is is_archived=False.
    """

    is_archived: bool | None = False
    is_favorite: bool | None = None
    category: str | None = None
    type: str | None = None
    priority: str | None = None
    tags_any: list[str] = field(default_factory=list)
    tags_all: list[str] = field(default_factory=list)
    search: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    updated_since: datetime | None = None

    @property
    def search_pattern(self) -> str | None:
        """Case-insensitive substring pattern for the search term, wildcards escaped."""
        if not self.search:
            return None
        return f"%{escape_like(self.search)}%"


@dataclass
class NoteQuery:
    """Filter, sort and page window for a list request."""

    filter: NoteFilter
    sort: SortSpec
    page: int
    limit: int
    skip: int


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def parse_int(value: Any) -> int | None:
    """Parse a leading integer the way query strings are usually read ("12abc" -> 12)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def get_pagination_params(
    query: Mapping[str, Any],
    *,
    default_page: int = 1,
    default_limit: int = 10,
    max_limit: int = 100,
) -> PaginationParams:
    """
    Resolve page and limit.

    page = max(1, page or default_page)
    limit = min(max_limit, max(1, limit or default_limit))
    skip = (page - 1) * limit

    A page whose offset would not fit the storage OFFSET falls back to
    default_page.
    """
    page = max(1, parse_int(query.get("page")) or default_page)
    limit = min(max_limit, max(1, parse_int(query.get("limit")) or default_limit))
    if (page - 1) * limit > MAX_OFFSET:
        page = default_page
    return PaginationParams(page=page, limit=limit, skip=(page - 1) * limit)


def get_sort_params(sort_by: Any = None, sort_order: Any = None) -> SortSpec:
    """Single-field sort descriptor. Unknown fields and orders fall back silently."""
    field_name = sort_by if sort_by in SORTABLE_FIELDS else DEFAULT_SORT_FIELD
    order = sort_order if sort_order in ("asc", "desc") else DEFAULT_SORT_ORDER
    return {field_name: 1 if order == "asc" else -1}


def split_tags(value: str) -> list[str]:
    """Comma-split a tag list, trimming and dropping empty entries."""
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def get_filter_params(query: Mapping[str, Any]) -> NoteFilter:
    """
    Build the list filter.

    archived    always applied, only the literal "true" selects archived notes
    favorite    applied whenever the key is present, even as "false"
    category, type, priority
                exact match when present and non-empty
    tags        "any of" over a comma-separated list
    search      case-insensitive substring over title, content and tags
    """
    note_filter = NoteFilter(is_archived=parse_bool_param(query.get("archived")))

    if "favorite" in query:
        note_filter.is_favorite = parse_bool_param(query.get("favorite"))

    for name in ("category", "type", "priority"):
        value = query.get(name)
        if isinstance(value, str) and value:
            setattr(note_filter, name, value)

    tags = query.get("tags")
    if isinstance(tags, str) and tags:
        note_filter.tags_any = split_tags(tags)

    search = query.get("search")
    if isinstance(search, str) and search.strip():
        note_filter.search = search.strip()

    return note_filter


def build_note_query(
    query: Mapping[str, Any],
    *,
    default_page: int = 1,
    default_limit: int = 10,
    max_limit: int = 100,
) -> NoteQuery:
    """Combine pagination, sort and filter into one descriptor."""
    pagination = get_pagination_params(
        query,
        default_page=default_page,
        default_limit=default_limit,
        max_limit=max_limit,
    )
    return NoteQuery(
        filter=get_filter_params(query),
        sort=get_sort_params(query.get("sortBy"), query.get("sortOrder")),
        page=pagination.page,
        limit=pagination.limit,
        skip=pagination.skip,
    )


def parse_date(value: Any, field_name: str) -> datetime:
    """Parse an ISO 8601 date or datetime into naive UTC."""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a date string", errors=[field_name])
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(
            f"{field_name} must be an ISO 8601 date",
            errors=[f"{field_name}: {value}"],
        ) from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def build_advanced_filter(params: Mapping[str, Any]) -> NoteFilter:
    """
    Build the advanced search filter.

    Unlike list filtering, nothing is applied by default: archive and
    favorite state only restrict results when given as real booleans,
    and every listed tag must be present on a match.
    """
    note_filter = NoteFilter(is_archived=None)

    text = params.get("text")
    if isinstance(text, str) and text.strip():
        note_filter.search = text.strip()

    for name in ("category", "type", "priority"):
        value = params.get(name)
        if isinstance(value, str) and value:
            setattr(note_filter, name, value)

    tags = params.get("tags")
    if isinstance(tags, list):
        normalized = [normalize_tag(tag) for tag in tags]
        note_filter.tags_all = [tag for tag in normalized if tag]

    if isinstance(params.get("isArchived"), bool):
        note_filter.is_archived = params["isArchived"]
    if isinstance(params.get("isFavorite"), bool):
        note_filter.is_favorite = params["isFavorite"]

    if params.get("dateFrom"):
        note_filter.created_from = parse_date(params["dateFrom"], "dateFrom")
    if params.get("dateTo"):
        note_filter.created_to = parse_date(params["dateTo"], "dateTo")

    return note_filter


def get_recent_days(value: Any) -> int:
    """Resolve the recent-notes window: missing or below 1 means the default, capped at MAX_RECENT_DAYS."""
    days = parse_int(value)
    if days is None or days < 1:
        return DEFAULT_RECENT_DAYS
    return min(days, MAX_RECENT_DAYS)


def recent_filter(days: int, include_archived: bool) -> NoteFilter:
    """Notes updated within the last `days` days."""
    return NoteFilter(
        is_archived=None if include_archived else False,
        updated_since=utc_now() - timedelta(days=days),
    )


def favorites_filter(include_archived: bool) -> NoteFilter:
    return NoteFilter(
        is_archived=None if include_archived else False,
        is_favorite=True,
    )


def export_filter(include_archived: bool) -> NoteFilter:
    return NoteFilter(is_archived=None if include_archived else False)

"""
Notes API Endpoints.

REST API endpoints for note management. Every response uses the standard
envelope. Fixed paths are declared before the /{note_id} routes so they
are never captured as ids.
"""

import math
from typing import Any

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse, Response

from notes_api.core.config import get_app_config
from notes_api.core.dependencies import DbSession
from notes_api.core.query import build_note_query, get_recent_days
from notes_api.core.responses import create_api_response
from notes_api.core.validation import parse_bool_param
from notes_api.schemas.note import (
    AdvancedSearchRequest,
    BulkNotesRequest,
    NoteListResponse,
    PaginationInfo,
    serialize_note,
)
from notes_api.services.export import (
    CSV_FILENAME,
    JSON_FILENAME,
    build_json_export,
    render_csv,
)
from notes_api.services.note import NoteService

router = APIRouter()


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


# =============================================================================
# Collection routes
# =============================================================================


@router.get(
    "",
    summary="List notes",
    description=(
        "Filter with archived, favorite, category, type, priority, tags and "
        "search; sort with sortBy/sortOrder; paginate with page/limit."
    ),
)
async def list_notes(request: Request, db: DbSession) -> dict[str, Any]:
    """List notes with filtering, sorting and pagination."""
    pagination_config = get_app_config().application.pagination
    query = build_note_query(
        request.query_params,
        default_page=pagination_config.default_page,
        default_limit=pagination_config.default_limit,
        max_limit=pagination_config.max_limit,
    )

    service = NoteService(db)
    notes, total = await service.list_notes(query)

    total_pages = math.ceil(total / query.limit)
    payload = NoteListResponse(
        notes=[serialize_note(note) for note in notes],
        pagination=PaginationInfo(
            current_page=query.page,
            total_pages=total_pages,
            total_notes=total,
            notes_per_page=query.limit,
            has_next_page=query.page < total_pages,
            has_prev_page=query.page > 1,
        ),
    )
    return create_api_response(
        payload.model_dump(mode="json", by_alias=True),
        "Notes fetched successfully",
    )


@router.post("", status_code=201, summary="Create a note")
async def create_note(
    db: DbSession,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    service = NoteService(db)
    note = await service.create_note(payload)
    return create_api_response(serialize_note(note), "Note created successfully", 201)


@router.get("/favorites", summary="List favorite notes")
async def list_favorites(
    db: DbSession,
    include_archived: str | None = Query(None, alias="includeArchived"),
) -> dict[str, Any]:
    service = NoteService(db)
    notes = await service.get_favorites(parse_bool_param(include_archived))
    return create_api_response(
        [serialize_note(note) for note in notes],
        "Favorite notes retrieved successfully",
    )


@router.get("/recent", summary="List recently modified notes")
async def list_recent(
    db: DbSession,
    days: str | None = Query(None),
    include_archived: str | None = Query(None, alias="includeArchived"),
) -> dict[str, Any]:
    """Notes updated in the last N days (default 7), newest update first."""
    window = get_recent_days(days)
    service = NoteService(db)
    notes = await service.get_recent(window, parse_bool_param(include_archived))
    return create_api_response(
        [serialize_note(note) for note in notes],
        f"Recent notes from last {window} days retrieved successfully",
    )


@router.get("/stats/overview", summary="Note statistics")
async def get_stats(db: DbSession) -> dict[str, Any]:
    service = NoteService(db)
    return create_api_response(await service.get_stats(), "Statistics retrieved successfully")


@router.get("/categories/list", summary="Distinct categories in use")
async def list_categories(db: DbSession) -> dict[str, Any]:
    service = NoteService(db)
    return create_api_response(
        await service.get_categories(), "Categories retrieved successfully"
    )


@router.get("/tags/list", summary="Distinct tags in use")
async def list_tags(db: DbSession) -> dict[str, Any]:
    service = NoteService(db)
    return create_api_response(await service.get_tags(), "Tags retrieved successfully")


@router.get("/export", summary="Export notes as JSON or CSV")
async def export_notes(
    db: DbSession,
    format: str = Query("json"),
    include_archived: str | None = Query(None, alias="includeArchived"),
) -> Response:
    """Download every note as an attachment, newest first."""
    archived = parse_bool_param(include_archived)
    service = NoteService(db)
    notes = await service.export_notes(archived)

    if format == "csv":
        return Response(
            content=render_csv(notes),
            media_type="text/csv",
            headers=_attachment(CSV_FILENAME),
        )
    return JSONResponse(
        content=build_json_export(notes, archived),
        headers=_attachment(JSON_FILENAME),
    )


@router.post("/search/advanced", summary="Multi-criteria search")
async def advanced_search(
    db: DbSession,
    criteria: AdvancedSearchRequest | None = Body(None),
) -> dict[str, Any]:
    params = criteria.model_dump(by_alias=True) if criteria else {}
    service = NoteService(db)
    notes = await service.advanced_search(params)
    return create_api_response(
        [serialize_note(note) for note in notes],
        "Advanced search completed successfully",
    )


# =============================================================================
# Bulk routes
# =============================================================================


@router.post("/bulk/archive", summary="Archive many notes")
async def bulk_archive(db: DbSession, body: BulkNotesRequest) -> dict[str, Any]:
    note_ids = NoteService.validate_bulk_ids(body.note_ids)
    modified = await NoteService(db).bulk_archive(note_ids)
    return create_api_response(
        {"modifiedCount": modified, "requestedCount": len(note_ids)},
        f"{modified} notes archived successfully",
    )


@router.post("/bulk/unarchive", summary="Unarchive many notes")
async def bulk_unarchive(db: DbSession, body: BulkNotesRequest) -> dict[str, Any]:
    note_ids = NoteService.validate_bulk_ids(body.note_ids)
    modified = await NoteService(db).bulk_unarchive(note_ids)
    return create_api_response(
        {"modifiedCount": modified, "requestedCount": len(note_ids)},
        f"{modified} notes unarchived successfully",
    )


@router.post("/bulk/add-tag", summary="Add a tag to many notes")
async def bulk_add_tag(db: DbSession, body: BulkNotesRequest) -> dict[str, Any]:
    note_ids, tag = NoteService.validate_bulk_tag_request(body.note_ids, body.tag)
    modified = await NoteService(db).bulk_add_tag(note_ids, tag)
    return create_api_response(
        {"modifiedCount": modified, "requestedCount": len(note_ids), "tag": tag},
        f'Tag "{body.tag}" added to {modified} notes successfully',
    )


@router.post("/bulk/remove-tag", summary="Remove a tag from many notes")
async def bulk_remove_tag(db: DbSession, body: BulkNotesRequest) -> dict[str, Any]:
    note_ids, tag = NoteService.validate_bulk_tag_request(body.note_ids, body.tag)
    modified = await NoteService(db).bulk_remove_tag(note_ids, tag)
    return create_api_response(
        {"modifiedCount": modified, "requestedCount": len(note_ids), "tag": tag},
        f'Tag "{body.tag}" removed from {modified} notes successfully',
    )


@router.delete("/bulk/delete", summary="Delete many notes")
async def bulk_delete(db: DbSession, body: BulkNotesRequest) -> dict[str, Any]:
    note_ids = NoteService.validate_bulk_ids(body.note_ids)
    deleted = await NoteService(db).bulk_delete(note_ids)
    return create_api_response(
        {"deletedCount": deleted, "requestedCount": len(note_ids)},
        f"{deleted} notes deleted successfully",
    )


# =============================================================================
# Single-note routes
# =============================================================================


@router.post("/{note_id}/duplicate", status_code=201, summary="Duplicate a note")
async def duplicate_note(note_id: str, db: DbSession) -> dict[str, Any]:
    note = await NoteService(db).duplicate_note(note_id)
    return create_api_response(serialize_note(note), "Note duplicated successfully", 201)


@router.patch("/{note_id}/favorite", summary="Toggle favorite")
async def toggle_favorite(note_id: str, db: DbSession) -> dict[str, Any]:
    note = await NoteService(db).toggle_favorite(note_id)
    message = "Note added to favorites" if note.is_favorite else "Note removed from favorites"
    return create_api_response(serialize_note(note), message)


@router.patch("/{note_id}/archive", summary="Archive a note")
async def archive_note(note_id: str, db: DbSession) -> dict[str, Any]:
    note = await NoteService(db).archive_note(note_id)
    return create_api_response(serialize_note(note), "Note archived successfully")


@router.patch("/{note_id}/unarchive", summary="Unarchive a note")
async def unarchive_note(note_id: str, db: DbSession) -> dict[str, Any]:
    note = await NoteService(db).unarchive_note(note_id)
    return create_api_response(serialize_note(note), "Note unarchived successfully")


@router.get("/{note_id}", summary="Get a note")
async def get_note(note_id: str, db: DbSession) -> dict[str, Any]:
    note = await NoteService(db).get_note(note_id)
    return create_api_response(serialize_note(note), "Note retrieved successfully")


@router.put("/{note_id}", summary="Update a note")
async def update_note(
    note_id: str,
    db: DbSession,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    note = await NoteService(db).update_note(note_id, payload)
    return create_api_response(serialize_note(note), "Note updated successfully")


@router.delete("/{note_id}", summary="Delete a note")
async def delete_note(note_id: str, db: DbSession) -> dict[str, Any]:
    """Delete a note and return it as it was."""
    note = await NoteService(db).delete_note(note_id)
    return create_api_response(serialize_note(note), "Note deleted successfully")

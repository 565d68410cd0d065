"""
Response Envelope Builders.

Pure formatting helpers that wrap results and failures in the standard
JSON envelopes. Output is identical for identical input apart from the
timestamp.

Usage:
    from notes_api.core.responses import create_api_response

    return create_api_response(note_payload, "Note created successfully", 201)
"""

from typing import Any

from notes_api.core.utils import iso_timestamp
from notes_api.schemas.base import ApiResponse, ErrorResponse


def create_api_response(
    data: Any = None,
    message: str = "Success",
    status_code: int = 200,
) -> dict[str, Any]:
    """
    Build a success envelope.

    `success` reflects whether status_code is 2xx. The status code itself
    is not repeated in the body. `data` is omitted when None.
    """
    response = ApiResponse(
        success=200 <= status_code < 300,
        message=message,
        timestamp=iso_timestamp(),
        data=data,
    )
    return response.model_dump(mode="json", exclude={"data"} if data is None else None)


def create_error_response(
    message: str = "An error occurred",
    status_code: int = 500,
    details: Any = None,
    *,
    errors: list[Any] | None = None,
    description: str | None = None,
    include_details: bool = False,
) -> dict[str, Any]:
    """
    Build an error envelope.

    Args:
        message: Short error text, rendered as `error`
        status_code: HTTP status, repeated as `statusCode`
        details: Debug payload, only rendered when include_details is set
        errors: Itemized validation reasons, always rendered when given
        description: Optional longer human-readable `message`
        include_details: Development switch for `details`
    """
    response = ErrorResponse(
        error=message,
        message=description,
        timestamp=iso_timestamp(),
        status_code=status_code,
        errors=errors or None,
        details=details if include_details else None,
    )
    return response.model_dump(mode="json", by_alias=True, exclude_none=True)

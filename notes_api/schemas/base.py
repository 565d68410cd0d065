"""
Base Schemas.

Response envelopes and the camelCase base model shared by all API schemas.

Success:  {success, message, timestamp, data?}
Error:    {success: false, error, message?, timestamp, statusCode, errors?, details?}
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API schemas: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel):
    """
    Standard success envelope.

    `data` is left out of the serialized body when it is None.
    """

    success: bool = True
    message: str = "Success"
    timestamp: str
    data: Any = None


class ErrorResponse(BaseModel):
    """
    Standard error envelope.

    `errors` carries client-facing validation reasons. `details` carries
    debug information and is only filled in when detailed errors are enabled.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    error: str
    message: str | None = None
    timestamp: str
    status_code: int = Field(serialization_alias="statusCode")
    errors: list[Any] | None = None
    details: Any = None

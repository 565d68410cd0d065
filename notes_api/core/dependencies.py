"""
FastAPI Dependencies.

Shared dependencies for request handling: database session, client
address, login rate limiter and bearer-token authentication.
"""

from typing import Annotated, Any

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.database import get_db_session
from notes_api.core.exceptions import AuthenticationError
from notes_api.core.logging import get_logger
from notes_api.core.rate_limiter import LoginRateLimiter, get_login_rate_limiter
from notes_api.core.security import ACCESS_TOKEN_TYPE, decode_token, extract_bearer_token

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_client_ip(request: Request) -> str:
    """Client address used as the login rate-limit identifier."""
    return request.client.host if request.client else "unknown"


ClientIp = Annotated[str, Depends(get_client_ip)]

RateLimiterDep = Annotated[LoginRateLimiter, Depends(get_login_rate_limiter)]


async def authenticate_token(
    authorization: str | None = Header(None),
) -> dict[str, Any]:
    """
    Require a valid access token.

    Returns:
        Decoded token claims (userId, username, email, ...)

    Raises:
        AuthenticationError: "No token provided" when the header is missing,
            otherwise the generic invalid-token error
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthenticationError("No token provided")
    return decode_token(token, expected_type=ACCESS_TOKEN_TYPE)


async def optional_auth(
    authorization: str | None = Header(None),
) -> dict[str, Any] | None:
    """Decode an access token when one is sent; any failure means anonymous."""
    token = extract_bearer_token(authorization)
    if token is None:
        return None
    try:
        return decode_token(token, expected_type=ACCESS_TOKEN_TYPE)
    except AuthenticationError:
        logger.debug("Ignoring invalid optional token")
        return None


CurrentUser = Annotated[dict[str, Any], Depends(authenticate_token)]
OptionalUser = Annotated[dict[str, Any] | None, Depends(optional_auth)]

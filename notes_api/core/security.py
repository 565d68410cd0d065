"""
Security Utilities.

Password hashing, password policy and JWT token handling.

Tokens:
    access   claims {userId, username, email, type="access", aud, exp}
    refresh  claims {userId, type="refresh", aud, exp}

Both are signed with JWT_SECRET. Any decode failure surfaces as the same
generic "Invalid or expired token" message.
"""

import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from notes_api.core.config import get_app_config, get_settings
from notes_api.core.constants import (
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LENGTH,
    PASSWORD_SPECIAL_CHARACTERS,
)
from notes_api.core.exceptions import AuthenticationError
from notes_api.core.logging import get_logger
from notes_api.core.utils import utc_now

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_SPECIAL = re.compile(f"[{re.escape(PASSWORD_SPECIAL_CHARACTERS)}]")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


# =============================================================================
# Password hashing
# =============================================================================


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode("utf-8")
    if len(password_bytes) > PASSWORD_MAX_BYTES:
        return False
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


# =============================================================================
# Password policy
# =============================================================================


@dataclass
class PasswordCheck:
    """Result of checking a password against the policy."""

    is_valid: bool
    strength: str
    errors: list[str] = field(default_factory=list)


def calculate_password_strength(password: str) -> str:
    """
    Informational strength label.

    One point each for length >= 8, >= 12, >= 16, and for each of
    lowercase, uppercase, digit and non-alphanumeric characters.
    """
    score = sum((
        len(password) >= 8,
        len(password) >= 12,
        len(password) >= 16,
        bool(re.search(r"[a-z]", password)),
        bool(re.search(r"[A-Z]", password)),
        bool(re.search(r"\d", password)),
        bool(_NON_ALNUM.search(password)),
    ))
    if score <= 2:
        return "weak"
    if score <= 4:
        return "medium"
    if score <= 6:
        return "strong"
    return "very-strong"


def validate_password(password: str) -> PasswordCheck:
    """Check every password rule and report all unmet ones."""
    errors: list[str] = []

    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        errors.append(f"Password must be at most {PASSWORD_MAX_BYTES} bytes long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not _SPECIAL.search(password):
        errors.append("Password must contain at least one special character")

    return PasswordCheck(
        is_valid=not errors,
        strength=calculate_password_strength(password),
        errors=errors,
    )


# =============================================================================
# Tokens
# =============================================================================


def _encode(claims: dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    to_encode = claims.copy()
    to_encode.update({
        "exp": utc_now() + expires_delta,
        "type": token_type,
        "aud": jwt_config.audience,
    })
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=jwt_config.algorithm)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode (userId, username, email)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    if expires_delta is None:
        expires_delta = timedelta(
            minutes=get_app_config().security.jwt.access_token_expire_minutes
        )
    return _encode(data, ACCESS_TOKEN_TYPE, expires_delta)


def create_refresh_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a JWT refresh token carrying only the user id."""
    if expires_delta is None:
        expires_delta = timedelta(
            days=get_app_config().security.jwt.refresh_token_expire_days
        )
    return _encode({"userId": data["userId"]}, REFRESH_TOKEN_TYPE, expires_delta)


def generate_token_pair(user: Any) -> dict[str, Any]:
    """
    Issue an access/refresh token pair for a user.

    Returns:
        {"accessToken", "refreshToken", "expiresIn"} with expiresIn in seconds
    """
    access_minutes = get_app_config().security.jwt.access_token_expire_minutes
    access_token = create_access_token({
        "userId": user.id,
        "username": user.username,
        "email": user.email,
    })
    refresh_token = create_refresh_token({"userId": user.id})
    return {
        "accessToken": access_token,
        "refreshToken": refresh_token,
        "expiresIn": access_minutes * 60,
    }


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string
        expected_type: "access" or "refresh" to reject the other kind

    Returns:
        Decoded token payload

    Raises:
        AuthenticationError: If token is invalid, expired or of the wrong type
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token") from e

    if expected_type is not None and payload.get("type") != expected_type:
        logger.warning(
            "Token type mismatch",
            extra={"expected": expected_type, "actual": payload.get("type")},
        )
        raise AuthenticationError("Invalid or expired token")
    if not payload.get("userId"):
        raise AuthenticationError("Invalid or expired token")

    return payload


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from a `Bearer <token>` header value, or None."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None

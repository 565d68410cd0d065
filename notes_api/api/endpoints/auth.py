"""
Auth API Endpoints.

Registration, login, logout, profile, token refresh and password change.
Logout is acknowledgement only: tokens are stateless and stay valid until
they expire.
"""

from typing import Any

from fastapi import APIRouter

from notes_api.core.dependencies import ClientIp, CurrentUser, DbSession, RateLimiterDep
from notes_api.core.responses import create_api_response
from notes_api.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    serialize_user,
)
from notes_api.services.auth import AuthService

router = APIRouter()


@router.post("/register", status_code=201, summary="Create an account")
async def register(body: RegisterRequest, db: DbSession) -> dict[str, Any]:
    user, tokens = await AuthService(db).register(body.model_dump(by_alias=True))
    return create_api_response(
        {"user": serialize_user(user), "tokens": tokens},
        "Account created successfully",
        201,
    )


@router.post("/login", summary="Start a session")
async def login(
    body: LoginRequest,
    db: DbSession,
    client_ip: ClientIp,
    rate_limiter: RateLimiterDep,
) -> dict[str, Any]:
    user, tokens = await AuthService(db).login(
        body.identifier,
        body.password,
        client_ip=client_ip,
        rate_limiter=rate_limiter,
    )
    return create_api_response(
        {"user": serialize_user(user), "tokens": tokens},
        "Login successful",
    )


@router.post("/logout", summary="End a session")
async def logout(current_user: CurrentUser) -> dict[str, Any]:
    """Acknowledge logout. The client discards its tokens."""
    return create_api_response(message="Logged out successfully")


@router.get("/me", summary="Current profile")
async def me(current_user: CurrentUser, db: DbSession) -> dict[str, Any]:
    user = await AuthService(db).get_profile(current_user["userId"])
    return create_api_response({"user": serialize_user(user)}, "Profile retrieved successfully")


@router.post("/refresh", summary="Renew tokens")
async def refresh(body: RefreshRequest, db: DbSession) -> dict[str, Any]:
    tokens = await AuthService(db).refresh(body.refresh_token)
    return create_api_response({"tokens": tokens}, "Token refreshed successfully")


@router.post("/change-password", summary="Rotate the password")
async def change_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> dict[str, Any]:
    await AuthService(db).change_password(
        current_user["userId"],
        body.current_password,
        body.new_password,
    )
    return create_api_response(message="Password changed successfully")

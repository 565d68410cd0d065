"""
Auth Service.

Registration, login, token refresh and password change.

Login checks run in this order:
    1. identifier and password present
    2. account lookup by email or username
    3. locked account          -> AccountLockedError
    4. deactivated account     -> AccountInactiveError
    5. per-IP failure limit    -> RateLimitError
    6. password check          -> AuthenticationError("Invalid credentials")

Unknown identifiers and wrong passwords produce the same message. The
per-account lock and the per-IP limiter are separate policies with their
own settings in security.yaml.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.config import get_app_config
from notes_api.core.exceptions import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from notes_api.core.rate_limiter import LoginRateLimiter
from notes_api.core.security import (
    REFRESH_TOKEN_TYPE,
    decode_token,
    generate_token_pair,
    hash_password,
    validate_password,
    verify_password,
)
from notes_api.core.validation import sanitize_input, validate_registration
from notes_api.models.user import User
from notes_api.repositories.user import UserRepository
from notes_api.services.base import BaseService

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService(BaseService):
    """Service for account and session business logic."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = UserRepository(session)

    async def register(self, payload: Mapping[str, Any]) -> tuple[User, dict[str, Any]]:
        """
        Create an account and issue its first token pair.

        Returns:
            Tuple of (user, tokens)

        Raises:
            ValidationError: Missing fields, bad email or username, weak password
            ConflictError: Email or username already in use
        """
        result = validate_registration(payload)
        if "required" in result.errors:
            raise ValidationError("All fields are required", errors=result.messages)
        if "email" in result.errors:
            raise ValidationError(
                "Please provide a valid email address", errors=result.messages
            )
        data = result.raise_for_errors()

        password_check = validate_password(data["password"])
        if not password_check.is_valid:
            raise ValidationError(
                "Password does not meet requirements", errors=password_check.errors
            )

        if await self.repo.email_exists(data["email"]):
            raise ConflictError("An account with this email already exists")
        if await self.repo.username_exists(data["username"]):
            raise ConflictError("This username is already taken")

        self._log_operation("Registering user", username=data["username"])

        user = User(
            username=data["username"],
            email=data["email"],
            password_hash=hash_password(data["password"]),
            first_name=data["first_name"],
            last_name=data["last_name"],
        )
        user.register_successful_login()
        user = await self._execute_db_operation("register_user", self.repo.add(user))

        return user, generate_token_pair(user)

    async def login(
        self,
        identifier: Any,
        password: Any,
        client_ip: str,
        rate_limiter: LoginRateLimiter,
    ) -> tuple[User, dict[str, Any]]:
        """
        Authenticate with email-or-username and password.

        Returns:
            Tuple of (user, tokens)

        Raises:
            ValidationError: Missing identifier or password
            AccountLockedError: Account is locked
            AccountInactiveError: Account is deactivated
            RateLimitError: Too many failures from this client
            AuthenticationError: Unknown identifier or wrong password
        """
        has_identifier = isinstance(identifier, str) and identifier.strip()
        if not has_identifier or not isinstance(password, str) or not password:
            raise ValidationError("Email/username and password are required")

        user = await self.repo.find_by_identifier(sanitize_input(identifier))

        if user is not None:
            if user.is_locked():
                self._log_operation("Login rejected, account locked", user_id=user.id)
                raise AccountLockedError()
            if not user.is_active:
                self._log_operation("Login rejected, account inactive", user_id=user.id)
                raise AccountInactiveError()

        limit = rate_limiter.check(client_ip)
        if not limit.allowed:
            raise RateLimitError(
                "Too many login attempts. Please try again later.",
                retry_after_seconds=limit.retry_after_seconds,
            )

        if user is None or not verify_password(password, user.password_hash):
            rate_limiter.record_failure(client_ip)
            if user is not None:
                lock_policy = get_app_config().security.account_lock
                user.register_failed_login(
                    lock_policy.max_attempts,
                    lock_policy.lock_seconds,
                )
                # The request fails below, so commit the counter now
                await self._execute_db_operation("record_failed_login", self.session.commit())
                self._log_operation(
                    "Login failed",
                    user_id=user.id,
                    attempts=user.login_attempts,
                    locked=user.is_locked(),
                )
            raise AuthenticationError(INVALID_CREDENTIALS)

        user.register_successful_login()
        user = await self._execute_db_operation("record_login", self.repo.save(user))
        self._log_operation("User logged in", user_id=user.id)

        return user, generate_token_pair(user)

    async def refresh(self, refresh_token: Any) -> dict[str, Any]:
        """
        Exchange a refresh token for a fresh token pair.

        Raises:
            ValidationError: No token given
            AuthenticationError: Invalid token, or user missing or inactive
        """
        if not isinstance(refresh_token, str) or not refresh_token:
            raise ValidationError("Refresh token is required")

        claims = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        user = await self.repo.get_by_id_or_none(claims["userId"])
        if user is None or not user.is_active:
            raise AuthenticationError("User not found or inactive")

        self._log_debug("Token refreshed", user_id=user.id)
        return generate_token_pair(user)

    async def get_profile(self, user_id: str) -> User:
        """
        Raises:
            NotFoundError: If the account no longer exists
        """
        return await self.repo.get_by_id(user_id)

    async def change_password(
        self,
        user_id: str,
        current_password: Any,
        new_password: Any,
    ) -> None:
        """
        Rotate the password after verifying the current one.

        Raises:
            ValidationError: Missing input or a new password that breaks the policy
            NotFoundError: If the account no longer exists
            AuthenticationError: Current password is wrong
        """
        if not all(isinstance(value, str) and value for value in (current_password, new_password)):
            raise ValidationError("Current password and new password are required")

        user = await self.repo.get_with_password(user_id)
        if user is None:
            raise NotFoundError("User account not found")

        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        password_check = validate_password(new_password)
        if not password_check.is_valid:
            raise ValidationError(
                "New password does not meet requirements",
                errors=password_check.errors,
            )

        user.password_hash = hash_password(new_password)
        await self._execute_db_operation("change_password", self.session.flush())
        self._log_operation("Password changed", user_id=user.id)

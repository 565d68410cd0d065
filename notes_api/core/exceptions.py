"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Each class carries a stable machine code; HTTP status mapping lives in
exception_handlers.py.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """
    Raised when validation fails.

    `errors` holds the itemized, client-facing reasons (every unmet rule,
    not just the first).
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: list[str] | None = None,
    ) -> None:
        self.errors = errors or []
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class InvalidIdentifierError(ApplicationError):
    """Raised when an identifier is not a well-formed 24-character hex id."""

    def __init__(self, message: str = "Invalid note ID format") -> None:
        super().__init__(message, code="VAL_INVALID_ID")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class AccountLockedError(ApplicationError):
    """Raised when login is attempted on a temporarily locked account."""

    def __init__(
        self,
        message: str = "Account is temporarily locked due to too many failed login attempts",
    ) -> None:
        super().__init__(message, code="AUTH_ACCOUNT_LOCKED")


class AccountInactiveError(ApplicationError):
    """Raised when login is attempted on a deactivated account."""

    def __init__(self, message: str = "Your account has been deactivated") -> None:
        super().__init__(message, code="AUTH_ACCOUNT_INACTIVE")


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict") -> None:
        super().__init__(message, code="RES_CONFLICT")


class RateLimitError(ApplicationError):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after_seconds: int = 0,
    ) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, code="RATE_LIMITED")


class DatabaseError(ApplicationError):
    """Raised when a database operation fails."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")


class ServiceUnavailableError(ApplicationError):
    """Raised when a request cannot be completed in time."""

    def __init__(self, message: str = "Request timeout") -> None:
        super().__init__(message, code="SYS_UNAVAILABLE")

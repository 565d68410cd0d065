"""
Login Rate Limiter.

Counts failed login attempts per client identifier (the client IP) in a
sliding window. Limits come from the login_rate_limit section of
config/settings/security.yaml.

The in-memory implementation is process-local: counters reset on restart
and are not shared between instances. A shared-counter backend only needs
to implement the LoginRateLimiter interface.
"""

import time
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable

from notes_api.core.logging import get_logger

logger = get_logger(__name__)


class RateLimitResult:
    """Result of a rate limit check."""

    def __init__(self, allowed: bool, retry_after_seconds: int = 0) -> None:
        self.allowed = allowed
        self.retry_after_seconds = retry_after_seconds


class LoginRateLimiter(ABC):
    """Max N failed attempts per identifier per sliding window."""

    def __init__(self, max_attempts: int, window_seconds: int) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    @abstractmethod
    def check(self, identifier: str) -> RateLimitResult:
        """Check whether another attempt from this identifier is allowed."""

    @abstractmethod
    def record_failure(self, identifier: str) -> None:
        """Count one failed attempt."""

    @abstractmethod
    def reset(self, identifier: str | None = None) -> None:
        """Forget attempts for one identifier, or for everyone."""


class InMemoryLoginRateLimiter(LoginRateLimiter):
    """
    Sliding window over monotonic timestamps held in a dict.

    Once the limit is reached, attempts are rejected until the oldest
    recorded attempt ages out of the window.
    """

    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(max_attempts, window_seconds)
        self._clock = clock
        self._attempts: dict[str, list[float]] = defaultdict(list)

    def _prune(self, identifier: str, now: float) -> list[float]:
        cutoff = now - self.window_seconds
        attempts = [ts for ts in self._attempts[identifier] if ts > cutoff]
        if attempts:
            self._attempts[identifier] = attempts
        else:
            self._attempts.pop(identifier, None)
        return attempts

    def check(self, identifier: str) -> RateLimitResult:
        now = self._clock()
        attempts = self._prune(identifier, now)

        if len(attempts) >= self.max_attempts:
            oldest = min(attempts)
            retry_after = int(self.window_seconds - (now - oldest)) + 1
            logger.warning(
                "Login rate limit exceeded",
                extra={
                    "identifier": identifier,
                    "limit": self.max_attempts,
                    "retry_after_seconds": retry_after,
                },
            )
            return RateLimitResult(allowed=False, retry_after_seconds=retry_after)

        return RateLimitResult(allowed=True)

    def record_failure(self, identifier: str) -> None:
        now = self._clock()
        self._prune(identifier, now)
        self._attempts[identifier].append(now)

    def reset(self, identifier: str | None = None) -> None:
        if identifier is None:
            self._attempts.clear()
        else:
            self._attempts.pop(identifier, None)


_rate_limiter: LoginRateLimiter | None = None


def get_login_rate_limiter() -> LoginRateLimiter:
    """Get or create the process-wide login rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        from notes_api.core.config import get_app_config

        policy = get_app_config().security.login_rate_limit
        _rate_limiter = InMemoryLoginRateLimiter(
            max_attempts=policy.max_attempts,
            window_seconds=policy.window_seconds,
        )
    return _rate_limiter

"""
Unit Tests for the User account lock state machine.

Time is passed in explicitly, so no clock is mocked.
"""

from datetime import datetime, timedelta

import pytest

from notes_api.models.user import User

MAX_ATTEMPTS = 5
LOCK_SECONDS = 7200
T0 = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def user() -> User:
    return User(username="grace", email="g@x.io", login_attempts=0, is_active=True)


def _fail(user: User, times: int, now: datetime = T0) -> None:
    for _ in range(times):
        user.register_failed_login(MAX_ATTEMPTS, LOCK_SECONDS, now=now)


class TestAccountLock:
    """Active -> Locked -> Active transitions."""

    def test_starts_active(self, user):
        assert user.is_locked(T0) is False

    def test_four_failures_do_not_lock(self, user):
        _fail(user, 4)

        assert user.login_attempts == 4
        assert user.is_locked(T0) is False

    def test_fifth_failure_locks_for_the_lock_period(self, user):
        _fail(user, 5)

        assert user.is_locked(T0) is True
        assert user.lock_until == T0 + timedelta(seconds=LOCK_SECONDS)

    def test_failures_while_locked_do_not_extend_the_lock(self, user):
        _fail(user, 5)
        lock_until = user.lock_until

        _fail(user, 2, now=T0 + timedelta(minutes=10))

        assert user.lock_until == lock_until

    def test_lock_expires(self, user):
        _fail(user, 5)

        assert user.is_locked(T0 + timedelta(seconds=LOCK_SECONDS)) is False

    def test_failure_after_expiry_restarts_counting(self, user):
        _fail(user, 5)
        later = T0 + timedelta(seconds=LOCK_SECONDS + 1)

        user.register_failed_login(MAX_ATTEMPTS, LOCK_SECONDS, now=later)

        assert user.login_attempts == 1
        assert user.lock_until is None

    def test_success_clears_counter_and_lock(self, user):
        _fail(user, 5)

        user.register_successful_login(now=T0)

        assert user.login_attempts == 0
        assert user.lock_until is None
        assert user.last_login == T0
        assert user.is_locked(T0) is False

"""
User Model.

Database model for user accounts, including the failed-login lock state.

Lock state machine:
    Active  --(failed attempts reach max_attempts)-->  Locked until lock_until
    Locked  --(lock_until passes)-->                   Active, counter restarts
    any     --(successful login)-->                    Active, counter cleared

The password hash is deferred and raise-loaded: it is only available
when a query asks for it with undefer(User.password_hash).
"""

from datetime import datetime, timedelta

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, deferred, mapped_column

from notes_api.core.constants import (
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
)
from notes_api.core.utils import utc_now
from notes_api.models.base import Base, ObjectIdMixin, TimestampMixin


class User(ObjectIdMixin, TimestampMixin, Base):
    """User account."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH),
        unique=True,
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(EMAIL_MAX_LENGTH),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = deferred(
        mapped_column(String(255), nullable=False),
        raiseload=True,
    )
    first_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    last_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    login_attempts: Mapped[int] = mapped_column(default=0, nullable=False)
    lock_until: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def is_locked(self, now: datetime | None = None) -> bool:
        """True while a lock is set and has not yet expired."""
        now = now or utc_now()
        return self.lock_until is not None and self.lock_until > now

    def register_failed_login(
        self,
        max_attempts: int,
        lock_seconds: int,
        now: datetime | None = None,
    ) -> None:
        """
        Count one failed password check.

        An expired lock is cleared and counting restarts at 1. Reaching
        max_attempts while unlocked sets a lock of lock_seconds.
        """
        now = now or utc_now()
        if self.lock_until is not None and self.lock_until <= now:
            self.login_attempts = 1
            self.lock_until = None
            return

        self.login_attempts = (self.login_attempts or 0) + 1
        if self.login_attempts >= max_attempts and not self.is_locked(now):
            self.lock_until = now + timedelta(seconds=lock_seconds)

    def register_successful_login(self, now: datetime | None = None) -> None:
        """Clear the failure counter and any lock, and stamp last_login."""
        self.login_attempts = 0
        self.lock_until = None
        self.last_login = now or utc_now()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r})>"

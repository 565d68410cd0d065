"""
User Repository.

Data access layer for user accounts. The password hash is only loaded
by the methods that say so.
"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from notes_api.models.user import User
from notes_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    model = User
    not_found_message = "User account not found"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(User.id).where(User.email == email.lower())
        )
        return result.scalar_one_or_none() is not None

    async def username_exists(self, username: str) -> bool:
        result = await self.session.execute(
            select(User.id).where(User.username == username)
        )
        return result.scalar_one_or_none() is not None

    async def find_by_identifier(self, identifier: str) -> User | None:
        """
        Look a user up by email (case-insensitive) or exact username.

        The password hash is loaded for credential checks.
        """
        result = await self.session.execute(
            select(User)
            .where(or_(User.email == identifier.lower(), User.username == identifier))
            .options(undefer(User.password_hash))
            .execution_options(populate_existing=True)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_with_password(self, id: str) -> User | None:
        """Load a user including the password hash, or None."""
        result = await self.session.execute(
            select(User)
            .where(User.id == id)
            .options(undefer(User.password_hash))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

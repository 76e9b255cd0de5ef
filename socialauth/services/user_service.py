"""
Persistence boundary for users.

Lookups are keyed on the external identity (provider_name, provider_id).
"""
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from socialauth.models.user import User, ProviderName


class UserService:
    """Service for reading and inserting users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: str) -> User | None:
        """
        Get user by internal ID.

        Args:
            user_id: User UUID

        Returns:
            User or None if not found
        """
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_provider_identity(
        self,
        provider_name: ProviderName,
        provider_id: str
    ) -> User | None:
        """
        Get user by external identity.

        Args:
            provider_name: Provider the identity belongs to
            provider_id: Subject identifier issued by that provider

        Returns:
            User or None if not found
        """
        stmt = select(User).where(
            User.provider_name == provider_name,
            User.provider_id == provider_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def insert(self, user: User) -> User:
        """
        Persist a new user.

        Raises:
            IntegrityError: the external identity already exists. The
                session is rolled back before the error propagates.
        """
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise
        await self.db.refresh(user)
        return user

"""
Identity reconciliation: map a provider profile to exactly one local user.

Lookup-then-insert is not atomic. Two callbacks for the same identity can
both miss the lookup; the database uniqueness constraint rejects the second
insert and the loser re-reads the winner's row instead of failing.
"""
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.errors import IdentityPersistenceError
from socialauth.logging_config import get_logger
from socialauth.models.user import User
from socialauth.providers.base import ExternalProfile
from socialauth.services.user_service import UserService


class IdentityResolver:
    """Find-or-create users from external profiles."""

    def __init__(self, db: AsyncSession):
        self.users = UserService(db)

    async def resolve(self, profile: ExternalProfile) -> User:
        """
        Return the user for this external identity, creating it on first sight.

        Existing users are returned unchanged; the fresh profile is not
        synced onto them.

        Raises:
            IdentityPersistenceError: the user store is unavailable.
        """
        log = get_logger(
            provider=profile.provider_name.value,
            provider_id=profile.external_id,
        )
        try:
            user = await self.users.get_by_provider_identity(
                profile.provider_name, profile.external_id
            )
            if user is not None:
                log.info("user_found", user_id=user.id)
                return user

            try:
                user = await self.users.insert(
                    User(
                        name=profile.display_name,
                        email=profile.email,
                        provider_name=profile.provider_name,
                        provider_id=profile.external_id,
                    )
                )
            except IntegrityError:
                # Lost the race against a concurrent callback
                user = await self.users.get_by_provider_identity(
                    profile.provider_name, profile.external_id
                )
                if user is None:
                    raise IdentityPersistenceError(
                        "insert rejected but no user exists for this identity"
                    )
                log.info("identity_race_resolved", user_id=user.id)
                return user
        except SQLAlchemyError as e:
            log.error("user_store_failed", error=str(e))
            raise IdentityPersistenceError("user store unavailable") from e

        log.info("user_created", user_id=user.id)
        return user

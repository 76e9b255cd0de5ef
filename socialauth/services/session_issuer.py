"""
Session issuance.

Sessions are signed JWTs carried in a cookie; nothing is kept server-side.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JOSEError, JWTError, jwt

from socialauth.config import Settings, settings as default_settings
from socialauth.errors import SessionStoreError
from socialauth.logging_config import get_logger
from socialauth.models.user import User


@dataclass(frozen=True)
class Session:
    """An issued login session."""
    token: str
    user_id: str
    persistent: bool
    expires_at: datetime
    # Cookie lifetime in seconds; None keeps it for the browser session only
    max_age: int | None


class SessionIssuer:
    """Service for creating and verifying session tokens."""

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings

    def issue(self, user: User, persistent: bool) -> Session:
        """
        Create a session bound to a user.

        Args:
            user: Resolved user
            persistent: Long-lived "remember me" session when True

        Returns:
            Session with a signed token

        Raises:
            SessionStoreError: the token could not be signed
        """
        now = datetime.now(timezone.utc)
        if persistent:
            lifetime = timedelta(days=self.settings.SESSION_PERSISTENT_DAYS)
        else:
            lifetime = timedelta(minutes=self.settings.JWT_EXPIRATION_MINUTES)
        expires = now + lifetime

        payload = {
            "sub": user.id,
            "provider": user.provider_name.value,
            "persistent": persistent,
            "iat": now,
            "exp": expires,
        }

        try:
            token = jwt.encode(
                payload,
                self.settings.JWT_SECRET_KEY,
                algorithm=self.settings.JWT_ALGORITHM
            )
        except JOSEError as e:
            raise SessionStoreError("could not sign session token") from e

        get_logger(user_id=user.id).info("session_issued", persistent=persistent)
        return Session(
            token=token,
            user_id=user.id,
            persistent=persistent,
            expires_at=expires,
            max_age=int(lifetime.total_seconds()) if persistent else None,
        )

    def post_login_destination(self) -> str:
        """Landing location after any successful login."""
        return self.settings.POST_LOGIN_REDIRECT

    def verify(self, token: str) -> dict | None:
        """
        Verify and decode a session token.

        Returns:
            Decoded payload dict or None if invalid or expired
        """
        try:
            return jwt.decode(
                token,
                self.settings.JWT_SECRET_KEY,
                algorithms=[self.settings.JWT_ALGORITHM]
            )
        except JWTError:
            return None

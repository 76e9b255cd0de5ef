"""
User model.

One row per external identity. The (provider_name, provider_id) pair is
unique at the database level.
"""
import uuid
from sqlalchemy import String, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
import enum
from socialauth.models.base import Base, TimestampMixin


class ProviderName(str, enum.Enum):
    """Identity providers an account can originate from."""
    LOCAL = "local"
    GITHUB = "github"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    GOOGLE = "google"


class User(Base, TimestampMixin):
    """
    A local account.

    name and email are copied from the provider profile when the account is
    created and never resynced on later logins.
    """
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("provider_name", "provider_id", name="provider_identity"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Only set for credential signups
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    provider_name: Mapped[ProviderName] = mapped_column(
        SQLEnum(ProviderName, native_enum=False, length=32),
        nullable=False
    )
    provider_id: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, provider={self.provider_name}, provider_id={self.provider_id})>"

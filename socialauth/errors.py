"""
Exceptions raised along the social login flow.

Provider errors are recovered by the routes (redirect back and retry).
Persistence and session errors are fatal for the request.
"""


class SocialAuthError(Exception):
    """Base class for all login flow errors."""


class UnknownProviderError(SocialAuthError):
    """The requested provider is not registered."""

    def __init__(self, provider_name: str):
        super().__init__(f"Unknown OAuth provider: {provider_name}")
        self.provider_name = provider_name


class ProviderAuthError(SocialAuthError):
    """Any failure during the provider handshake."""

    def __init__(self, provider_name: str, reason: str):
        super().__init__(f"{provider_name}: {reason}")
        self.provider_name = provider_name
        self.reason = reason


class IdentityPersistenceError(SocialAuthError):
    """The user store failed for a reason other than a uniqueness race."""


class SessionStoreError(SocialAuthError):
    """A session could not be issued."""

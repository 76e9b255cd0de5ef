"""Base OAuth provider class and the provider-agnostic profile."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from socialauth.models.user import ProviderName


@dataclass(frozen=True)
class ExternalProfile:
    """Normalized identity attested by a provider."""

    external_id: str
    display_name: str
    email: str | None
    provider_name: ProviderName


@dataclass(frozen=True)
class ProviderCredentials:
    """Client registration for one provider."""

    client_id: str
    client_secret: str
    callback_url: str


@dataclass(frozen=True)
class RedirectInstruction:
    """Where to send the caller to start authentication."""

    url: str
    state: str


class OAuthProvider(ABC):
    """One third-party OAuth 2.0 integration.

    Subclasses declare endpoints and scopes, and turn the provider's profile
    payload into an ExternalProfile.
    """

    name: ProviderName
    authorization_url: str
    token_url: str
    profile_url: str
    scopes: tuple[str, ...] = ()
    uses_pkce: bool = False
    token_endpoint_auth_method: str = "client_secret_post"
    # Extra query parameters for the authorization URL
    authorize_params: Mapping[str, str] = MappingProxyType({})
    # Extra query parameters for the profile request
    profile_params: Mapping[str, str] = MappingProxyType({})

    def __init__(self, credentials: ProviderCredentials):
        self.credentials = credentials

    @abstractmethod
    def normalize(self, payload: dict) -> ExternalProfile:
        """Build an ExternalProfile from the profile endpoint payload.

        Raises:
            KeyError, TypeError, ValueError: the payload is malformed.
        """
        pass

    def _profile(
        self, external_id, display_name: str | None, email: str | None
    ) -> ExternalProfile:
        if external_id is None or str(external_id) == "":
            raise ValueError("profile has no subject identifier")
        return ExternalProfile(
            external_id=str(external_id),
            display_name=display_name if display_name is not None else "",
            email=email or None,
            provider_name=self.name,
        )

"""Google OpenID Connect provider."""

from types import MappingProxyType

from socialauth.models.user import ProviderName
from socialauth.providers.base import ExternalProfile, OAuthProvider


class GoogleProvider(OAuthProvider):
    name = ProviderName.GOOGLE
    authorization_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    profile_url = "https://openidconnect.googleapis.com/v1/userinfo"
    scopes = ("openid", "email", "profile")
    authorize_params = MappingProxyType({"prompt": "select_account"})

    def normalize(self, payload: dict) -> ExternalProfile:
        return self._profile(payload["sub"], payload.get("name"), payload.get("email"))

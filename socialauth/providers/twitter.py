"""Twitter (X) OAuth 2.0 provider."""

from socialauth.models.user import ProviderName
from socialauth.providers.base import ExternalProfile, OAuthProvider


class TwitterProvider(OAuthProvider):
    """Twitter never returns an email through this flow."""

    name = ProviderName.TWITTER
    authorization_url = "https://twitter.com/i/oauth2/authorize"
    token_url = "https://api.twitter.com/2/oauth2/token"
    profile_url = "https://api.twitter.com/2/users/me"
    scopes = ("users.read", "tweet.read")
    uses_pkce = True
    token_endpoint_auth_method = "client_secret_basic"

    def normalize(self, payload: dict) -> ExternalProfile:
        data = payload["data"]
        return self._profile(data["id"], data.get("name"), None)

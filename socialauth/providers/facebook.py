"""Facebook Login provider."""

from types import MappingProxyType

from socialauth.models.user import ProviderName
from socialauth.providers.base import ExternalProfile, OAuthProvider

GRAPH_VERSION = "v19.0"


class FacebookProvider(OAuthProvider):
    name = ProviderName.FACEBOOK
    authorization_url = f"https://www.facebook.com/{GRAPH_VERSION}/dialog/oauth"
    token_url = f"https://graph.facebook.com/{GRAPH_VERSION}/oauth/access_token"
    profile_url = f"https://graph.facebook.com/{GRAPH_VERSION}/me"
    scopes = ("email", "public_profile")
    profile_params = MappingProxyType({"fields": "id,name,email"})

    def normalize(self, payload: dict) -> ExternalProfile:
        # email is absent for phone-only accounts
        return self._profile(payload["id"], payload.get("name"), payload.get("email"))

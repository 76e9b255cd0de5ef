"""GitHub OAuth provider."""

from socialauth.models.user import ProviderName
from socialauth.providers.base import ExternalProfile, OAuthProvider


class GitHubProvider(OAuthProvider):
    """GitHub OAuth apps.

    The public profile email is null unless the user chose to publish one.
    """

    name = ProviderName.GITHUB
    authorization_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    profile_url = "https://api.github.com/user"
    scopes = ("read:user", "user:email")

    def normalize(self, payload: dict) -> ExternalProfile:
        name = payload.get("name")
        if name is None:
            name = payload.get("login")
        return self._profile(payload["id"], name, payload.get("email"))

"""
ProviderGateway: one entry point over every registered OAuth provider.

The authorization state (and PKCE verifier where the provider needs one)
lives in the caller's session between begin_auth and complete_auth.
"""
import asyncio
from collections.abc import Mapping, MutableMapping

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.common.security import generate_token
from authlib.integrations.httpx_client import AsyncOAuth2Client

from socialauth.config import Settings
from socialauth.errors import ProviderAuthError, UnknownProviderError
from socialauth.logging_config import get_logger
from socialauth.providers.base import (
    ExternalProfile,
    OAuthProvider,
    ProviderCredentials,
    RedirectInstruction,
)
from socialauth.providers.facebook import FacebookProvider
from socialauth.providers.github import GitHubProvider
from socialauth.providers.google import GoogleProvider
from socialauth.providers.twitter import TwitterProvider

PROVIDER_CLASSES: dict[str, type[OAuthProvider]] = {
    "github": GitHubProvider,
    "twitter": TwitterProvider,
    "facebook": FacebookProvider,
    "google": GoogleProvider,
}


def _state_key(provider_name: str) -> str:
    return f"_oauth_{provider_name}"


class ProviderGateway:
    """Begin and complete OAuth flows for registered providers."""

    def __init__(
        self,
        providers: Mapping[str, OAuthProvider],
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.providers = dict(providers)
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderGateway":
        """Register every provider whose client id and secret are configured."""
        providers = {}
        for name, provider_cls in PROVIDER_CLASSES.items():
            prefix = name.upper()
            client_id = getattr(settings, f"{prefix}_CLIENT_ID")
            client_secret = getattr(settings, f"{prefix}_CLIENT_SECRET")
            if not client_id or not client_secret:
                continue
            providers[name] = provider_cls(
                ProviderCredentials(
                    client_id=client_id,
                    client_secret=client_secret,
                    callback_url=getattr(settings, f"{prefix}_CALLBACK_URL"),
                )
            )
        return cls(providers, timeout=settings.PROVIDER_TIMEOUT_SECONDS)

    def names(self) -> list[str]:
        return list(self.providers)

    def get(self, provider_name: str) -> OAuthProvider:
        try:
            return self.providers[provider_name]
        except KeyError:
            raise UnknownProviderError(provider_name) from None

    def _client(self, provider: OAuthProvider) -> AsyncOAuth2Client:
        # New client per call; nothing is cached between requests
        return AsyncOAuth2Client(
            client_id=provider.credentials.client_id,
            client_secret=provider.credentials.client_secret,
            scope=" ".join(provider.scopes),
            redirect_uri=provider.credentials.callback_url,
            token_endpoint_auth_method=provider.token_endpoint_auth_method,
            code_challenge_method="S256" if provider.uses_pkce else None,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def begin_auth(
        self, provider_name: str, session: MutableMapping
    ) -> RedirectInstruction:
        """
        Build the provider authorization URL and remember the state.

        Args:
            provider_name: Registered provider name
            session: Per-user session mapping (e.g. request.session)

        Raises:
            UnknownProviderError: provider is not registered
        """
        provider = self.get(provider_name)
        code_verifier = generate_token(48) if provider.uses_pkce else None

        async with self._client(provider) as client:
            url, state = client.create_authorization_url(
                provider.authorization_url,
                code_verifier=code_verifier,
                **provider.authorize_params,
            )

        session[_state_key(provider_name)] = {
            "state": state,
            "code_verifier": code_verifier,
        }
        get_logger(provider=provider_name).info("oauth_begin")
        return RedirectInstruction(url=url, state=state)

    async def complete_auth(
        self,
        provider_name: str,
        params: Mapping[str, str],
        session: MutableMapping,
    ) -> ExternalProfile:
        """
        Verify a callback, exchange the code and fetch the profile.

        Args:
            provider_name: Registered provider name
            params: Callback query parameters
            session: The session begin_auth wrote to

        Returns:
            The normalized profile; email is None when the provider omits it

        Raises:
            UnknownProviderError: provider is not registered
            ProviderAuthError: denial, bad state, failed exchange, timeout
                or malformed provider response
        """
        provider = self.get(provider_name)
        log = get_logger(provider=provider_name)
        stored = session.pop(_state_key(provider_name), None)

        if params.get("error"):
            log.warning("oauth_denied", error=params.get("error"))
            raise ProviderAuthError(provider_name, f"authorization failed: {params['error']}")

        code = params.get("code")
        if not code:
            raise ProviderAuthError(provider_name, "missing authorization code")
        if not stored or params.get("state") != stored.get("state"):
            log.warning("oauth_failed", reason="state_mismatch")
            raise ProviderAuthError(provider_name, "state mismatch")

        try:
            payload = await asyncio.wait_for(
                self._exchange(provider, code, stored.get("code_verifier")),
                timeout=self.timeout,
            )
            return provider.normalize(payload)
        except asyncio.TimeoutError:
            log.warning("oauth_failed", reason="timeout")
            raise ProviderAuthError(provider_name, "provider timed out") from None
        except (AuthlibBaseError, httpx.HTTPError) as e:
            log.warning("oauth_failed", reason="exchange", error=str(e))
            raise ProviderAuthError(provider_name, "token exchange failed") from e
        except (KeyError, TypeError, ValueError) as e:
            log.warning("oauth_failed", reason="malformed_response", error=str(e))
            raise ProviderAuthError(provider_name, "malformed provider response") from e

    async def _exchange(
        self, provider: OAuthProvider, code: str, code_verifier: str | None
    ) -> dict:
        extra = {"code_verifier": code_verifier} if code_verifier else {}
        async with self._client(provider) as client:
            await client.fetch_token(
                provider.token_url,
                grant_type="authorization_code",
                code=code,
                redirect_uri=provider.credentials.callback_url,
                **extra,
            )
            response = await client.get(
                provider.profile_url, params=dict(provider.profile_params)
            )
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("profile payload is not an object")
            return payload

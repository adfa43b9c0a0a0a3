"""OAuth authorization-code exchange against Discord and GitHub."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Literal
from urllib.parse import urlencode

import httpx

from verification.config import Settings
from verification.exceptions import ProviderExchangeError
from verification.schemas import OAuthProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthProvider:
    name: str
    client_id: str
    client_secret: str
    authorize_endpoint: str
    token_endpoint: str
    redirect_uri: str
    profile_endpoint: str | None = None
    scope: str | None = None
    # Discord expects a form body, GitHub accepts JSON
    token_request_format: Literal["form", "json"] = "form"


DISCORD_AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"
DISCORD_PROFILE_URL = "https://discord.com/api/users/@me"

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_PROFILE_URL = "https://api.github.com/user"


def discord_provider(settings: Settings) -> OAuthProvider:
    return OAuthProvider(
        name="discord",
        client_id=settings.DISCORD_CLIENT_ID,
        client_secret=settings.DISCORD_CLIENT_SECRET,
        authorize_endpoint=DISCORD_AUTHORIZE_URL,
        token_endpoint=DISCORD_TOKEN_URL,
        redirect_uri=settings.DISCORD_REDIRECT_URI,
        profile_endpoint=DISCORD_PROFILE_URL,
        scope="identify",
        token_request_format="form",
    )


def github_provider(settings: Settings) -> OAuthProvider:
    return OAuthProvider(
        name="github",
        client_id=settings.GITHUB_CLIENT_ID,
        client_secret=settings.GITHUB_CLIENT_SECRET,
        authorize_endpoint=GITHUB_AUTHORIZE_URL,
        token_endpoint=GITHUB_TOKEN_URL,
        redirect_uri=settings.GITHUB_REDIRECT_URI,
        profile_endpoint=GITHUB_PROFILE_URL,
        token_request_format="json",
    )


class OAuthExchangeClient:
    """Stateless code → token → profile round trips.

    Pass ``http_client`` to share a connection pool (or a mock transport); it is
    never closed here. Without one, each call opens its own client.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        self._http_client = http_client
        self._timeout = timeout

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client

    @staticmethod
    def authorization_url(provider: OAuthProvider, state: str) -> str:
        params = {
            "client_id": provider.client_id,
            "redirect_uri": provider.redirect_uri,
            "response_type": "code",
            "state": state,
        }
        if provider.scope:
            params["scope"] = provider.scope
        return f"{provider.authorize_endpoint}?{urlencode(params)}"

    async def exchange_code(
        self,
        provider: OAuthProvider,
        code: str,
        redirect_uri: str | None = None,
        state: str | None = None,
    ) -> str:
        """Exchange an authorization code for an access token.

        Raises:
            ProviderExchangeError: on transport failure, non-2xx status,
                malformed body or a response without ``access_token``.
        """
        payload = {
            "client_id": provider.client_id,
            "client_secret": provider.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri or provider.redirect_uri,
        }
        if state:
            payload["state"] = state

        try:
            async with self._client() as client:
                if provider.token_request_format == "json":
                    response = await client.post(
                        provider.token_endpoint,
                        json=payload,
                        headers={"Accept": "application/json"},
                    )
                else:
                    response = await client.post(
                        provider.token_endpoint,
                        data=payload,
                        headers={
                            "Content-Type": "application/x-www-form-urlencoded",
                            "Accept": "application/json",
                        },
                    )
        except httpx.HTTPError as exc:
            logger.error("Token exchange transport error", extra={"provider": provider.name, "error": str(exc)})
            raise ProviderExchangeError(provider.name) from exc

        if not response.is_success:
            logger.error(
                "Token exchange rejected",
                extra={"provider": provider.name, "status": response.status_code},
            )
            raise ProviderExchangeError(provider.name, response.status_code)

        try:
            token_data = response.json()
        except ValueError as exc:
            raise ProviderExchangeError(provider.name, response.status_code) from exc

        # GitHub reports bad codes as 200 with an "error" field
        if not isinstance(token_data, dict) or token_data.get("error"):
            logger.error(
                "Token exchange returned an error payload",
                extra={
                    "provider": provider.name,
                    "error": token_data.get("error") if isinstance(token_data, dict) else None,
                },
            )
            raise ProviderExchangeError(provider.name, response.status_code)

        access_token = token_data.get("access_token")
        if not access_token:
            raise ProviderExchangeError(provider.name, response.status_code)
        return access_token

    async def fetch_profile(self, provider: OAuthProvider, access_token: str) -> OAuthProfile:
        if not provider.profile_endpoint:
            raise ProviderExchangeError(provider.name, message="Provider has no profile endpoint")

        try:
            async with self._client() as client:
                response = await client.get(
                    provider.profile_endpoint,
                    headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error("Profile fetch transport error", extra={"provider": provider.name, "error": str(exc)})
            raise ProviderExchangeError(provider.name) from exc

        if not response.is_success:
            logger.error("Profile fetch rejected", extra={"provider": provider.name, "status": response.status_code})
            raise ProviderExchangeError(provider.name, response.status_code)

        try:
            user_data = response.json()
        except ValueError as exc:
            raise ProviderExchangeError(provider.name, response.status_code) from exc

        if not isinstance(user_data, dict) or user_data.get("id") is None:
            raise ProviderExchangeError(provider.name, response.status_code)

        return OAuthProfile(
            id=str(user_data["id"]),
            username=user_data.get("username") or user_data.get("login"),
        )

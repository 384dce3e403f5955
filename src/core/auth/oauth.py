# src/core/auth/oauth.py
"""Discord OAuth2 authorization-code client.

Builds the authorize URL, exchanges the returned code for an access
token and fetches the caller's profile. Only the fields the dashboard
needs are validated.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlencode

import httpx

from src.core.errors import ProfileFetchFailed, TokenExchangeFailed, UpstreamTimeout

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"


@dataclass(frozen=True)
class TokenGrant:
    access_token: str
    token_type: str = "Bearer"

    @property
    def authorization(self) -> str:
        return f"{self.token_type} {self.access_token}"


@dataclass(frozen=True)
class Identity:
    """The operator bound to a session after a successful login.

    Attributes:
        id: Discord user id.
        display_name: ``username`` or legacy ``username#discriminator``.
        avatar_ref: Discord avatar hash, or None for the default avatar.
    """

    id: str
    display_name: str
    avatar_ref: str | None = None

    @classmethod
    def from_profile(cls, profile: dict[str, Any]) -> "Identity":
        username = profile.get("username") or ""
        discriminator = profile.get("discriminator")
        if discriminator and discriminator != "0":
            display_name = f"{username}#{discriminator}"
        else:
            display_name = username
        return cls(
            id=str(profile["id"]),
            display_name=display_name,
            avatar_ref=profile.get("avatar"),
        )

    def to_session(self) -> dict[str, Any]:
        """Serialize into the server-held session (also the /api/auth/me shape)."""
        return {"id": self.id, "username": self.display_name, "avatar": self.avatar_ref}

    @classmethod
    def from_session(cls, data: Any) -> "Identity | None":
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return cls(
            id=str(data["id"]),
            display_name=data.get("username") or "",
            avatar_ref=data.get("avatar"),
        )


class IdentityProvider(Protocol):
    def authorization_url(self, state: str) -> str: ...

    async def exchange_code(self, code: str) -> TokenGrant: ...

    async def fetch_profile(self, grant: TokenGrant) -> Identity: ...


class DiscordOAuthClient:
    """Server-side half of the Discord OAuth2 code flow.

    Attributes:
        client_id: OAuth application client id.
        redirect_uri: Callback URL registered with Discord.
        scope: Space-separated OAuth scopes.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scope: str = "identify",
        api_base: str = "https://discord.com/api/v10",
    ) -> None:
        self._client = client
        self._client_secret = client_secret
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.scope = scope
        self.api_base = api_base.rstrip("/")

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
            "prompt": "consent",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for an access token.

        Raises:
            UpstreamTimeout: If Discord did not answer in time.
            TokenExchangeFailed: If Discord rejected the code.
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }
        try:
            response = await self._client.post(
                f"{self.api_base}/oauth2/token",
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.TimeoutException as e:
            raise UpstreamTimeout() from e
        except httpx.HTTPError as e:
            logger.error("Token exchange request failed: %s", e)
            raise TokenExchangeFailed() from e

        payload = _json_or_none(response)
        if response.status_code != 200 or not payload or not payload.get("access_token"):
            logger.error(
                "Token exchange rejected (HTTP %d): %s",
                response.status_code,
                (payload or {}).get("error", response.text[:200]),
            )
            raise TokenExchangeFailed()

        return TokenGrant(
            access_token=payload["access_token"],
            token_type=payload.get("token_type") or "Bearer",
        )

    async def fetch_profile(self, grant: TokenGrant) -> Identity:
        """Fetch the authenticated user's profile.

        Raises:
            UpstreamTimeout: If Discord did not answer in time.
            ProfileFetchFailed: On any other failure.
        """
        try:
            response = await self._client.get(
                f"{self.api_base}/users/@me",
                headers={"Authorization": grant.authorization},
            )
        except httpx.TimeoutException as e:
            raise UpstreamTimeout() from e
        except httpx.HTTPError as e:
            logger.error("Profile request failed: %s", e)
            raise ProfileFetchFailed() from e

        payload = _json_or_none(response)
        if response.status_code != 200 or not payload or not payload.get("id"):
            logger.error("Profile fetch failed (HTTP %d)", response.status_code)
            raise ProfileFetchFailed()

        return Identity.from_profile(payload)


def _json_or_none(response: httpx.Response) -> dict[str, Any] | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None

# src/core/bot.py
"""Bot identity and guild analytics from the Discord REST API.

The dashboard does not hold a gateway connection. The bot user and its
guilds (with approximate member counts) are read with the bot token and
kept in a snapshot that /api/bot/info and /api/admin/analytics serve.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx

logger = logging.getLogger(__name__)

AVATAR_CDN = "https://cdn.discordapp.com/avatars"
GUILD_PAGE_LIMIT = 200


@dataclass
class BotUser:
    id: str
    tag: str
    avatar_url: str | None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "BotUser":
        user_id = str(payload["id"])
        username = payload.get("username") or ""
        discriminator = payload.get("discriminator")
        tag = f"{username}#{discriminator}" if discriminator and discriminator != "0" else username
        avatar = payload.get("avatar")
        return cls(
            id=user_id,
            tag=tag,
            avatar_url=f"{AVATAR_CDN}/{user_id}/{avatar}.png" if avatar else None,
        )


@dataclass
class AnalyticsSnapshot:
    last_updated: str | None = None
    guild_count: int = 0
    total_member_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastUpdated": self.last_updated,
            "guildCount": self.guild_count,
            "totalMemberCount": self.total_member_count,
        }


class BotStatus:
    """Cached bot identity and guild counters.

    Attributes:
        user: The bot user, None until the first successful refresh.
        analytics: Last computed guild/member counters.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        bot_token: str,
        api_base: str = "https://discord.com/api/v10",
    ) -> None:
        self._client = client
        self._bot_token = bot_token
        self.api_base = api_base.rstrip("/")
        self.user: BotUser | None = None
        self.analytics = AnalyticsSnapshot()

    @property
    def is_ready(self) -> bool:
        return self.user is not None

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bot {self._bot_token}"}

    async def _fetch_guilds(self) -> list[dict[str, Any]]:
        guilds: list[dict[str, Any]] = []
        after: str | None = None
        while True:
            params: dict[str, Any] = {"with_counts": "true", "limit": GUILD_PAGE_LIMIT}
            if after:
                params["after"] = after
            response = await self._client.get(
                f"{self.api_base}/users/@me/guilds", headers=self._headers, params=params
            )
            response.raise_for_status()
            page = response.json()
            guilds.extend(page)
            if len(page) < GUILD_PAGE_LIMIT:
                return guilds
            after = page[-1]["id"]

    async def refresh(self) -> AnalyticsSnapshot:
        """Re-read the bot user and guild counters.

        Raises:
            httpx.HTTPError: If Discord could not be reached or refused the token.
        """
        response = await self._client.get(f"{self.api_base}/users/@me", headers=self._headers)
        response.raise_for_status()
        self.user = BotUser.from_api(response.json())

        guilds = await self._fetch_guilds()
        self.analytics = AnalyticsSnapshot(
            last_updated=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            guild_count=len(guilds),
            total_member_count=sum(g.get("approximate_member_count") or 0 for g in guilds),
        )
        return self.analytics

    async def refresh_or_keep(self) -> AnalyticsSnapshot:
        """Refresh, falling back to the previous snapshot on failure."""
        try:
            return await self.refresh()
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.warning("Bot status refresh failed, serving last snapshot: %s", e)
            return self.analytics

    async def start(self) -> None:
        if not self._bot_token:
            logger.warning("DISCORD_BOT_TOKEN not set - bot info will be unavailable")
            return
        await self.refresh_or_keep()
        if self.user:
            logger.info("Bot ready as %s", self.user.tag)

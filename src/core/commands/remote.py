# src/core/commands/remote.py
"""Discord application command listing.

Fetches the bot's registered slash commands from the Discord REST API.
Connection errors are retried with exponential backoff; timeouts are
surfaced immediately as UpstreamTimeout.
"""

import logging
from typing import Protocol

import httpx
import tenacity

from src.core.commands.models import RemoteCommand
from src.core.errors import CatalogUnavailable, UpstreamTimeout

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


class CommandProvider(Protocol):
    """Source of the remote half of the command catalog."""

    async def list_commands(self) -> list[RemoteCommand]: ...


class DiscordCommandProvider:
    """Lists the application commands registered for the bot.

    Attributes:
        application_id: Discord application id of the bot.
        api_base: Discord REST API base URL.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        application_id: str,
        bot_token: str,
        api_base: str = "https://discord.com/api/v10",
    ) -> None:
        self._client = client
        self._bot_token = bot_token
        self.application_id = application_id
        self.api_base = api_base.rstrip("/")

    @tenacity.retry(
        stop=tenacity.stop_after_attempt(MAX_ATTEMPTS),
        wait=tenacity.wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=tenacity.retry_if_exception_type(httpx.ConnectError),
        reraise=True,
    )
    async def _get(self) -> httpx.Response:
        return await self._client.get(
            f"{self.api_base}/applications/{self.application_id}/commands",
            headers={"Authorization": f"Bot {self._bot_token}"},
        )

    async def list_commands(self) -> list[RemoteCommand]:
        """Fetch the registered commands.

        Returns:
            Remote commands in the order Discord returns them.

        Raises:
            UpstreamTimeout: If Discord did not answer in time.
            CatalogUnavailable: On any other transport or API failure.
        """
        try:
            response = await self._get()
        except httpx.TimeoutException as e:
            raise UpstreamTimeout() from e
        except httpx.HTTPError as e:
            raise CatalogUnavailable() from e

        if response.status_code != 200:
            logger.error(
                "Command listing returned HTTP %d: %s",
                response.status_code,
                response.text[:200],
            )
            raise CatalogUnavailable()

        try:
            payload = response.json()
        except ValueError as e:
            raise CatalogUnavailable() from e
        if not isinstance(payload, list):
            raise CatalogUnavailable()

        return [RemoteCommand.from_api(item) for item in payload if isinstance(item, dict)]

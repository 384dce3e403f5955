# src/core/state.py
"""Process-scoped dashboard state.

All mutable state the routes share (document store, admin registry,
command catalog, login handshake, invocation log, bot snapshot) lives in
one DashboardState built at startup and handed to routes through
FastAPI dependencies.
"""

import logging
from dataclasses import dataclass

import httpx

from src.config import Settings
from src.core.admins import AdminRegistry
from src.core.auth import DiscordOAuthClient, SessionAuthenticator, SessionStore
from src.core.bot import BotStatus
from src.core.commands import CommandCatalog, DiscordCommandProvider, InvocationLog
from src.core.storage import JsonDocumentStore, admins_document, manual_commands_document

logger = logging.getLogger(__name__)


@dataclass
class DashboardState:
    store: JsonDocumentStore
    admins: AdminRegistry
    catalog: CommandCatalog
    authenticator: SessionAuthenticator
    invocations: InvocationLog
    bot: BotStatus
    http_client: httpx.AsyncClient

    async def shutdown(self) -> None:
        await self.http_client.aclose()


def build_state(settings: Settings, http_client: httpx.AsyncClient | None = None) -> DashboardState:
    """Wire the dashboard components from settings.

    Args:
        settings: Application settings.
        http_client: Shared client for all Discord calls. A client with
            ``settings.http_timeout`` is created when omitted.

    Returns:
        A fully wired DashboardState. Nothing is read from disk or the
        network until the first request (or lifecycle startup).
    """
    client = http_client or httpx.AsyncClient(timeout=settings.http_timeout)

    store = JsonDocumentStore(
        settings.data_dir,
        [admins_document(settings.protected_admin_id), manual_commands_document()],
    )
    provider = DiscordCommandProvider(
        client,
        application_id=settings.discord_application_id,
        bot_token=settings.discord_bot_token,
        api_base=settings.discord_api_base,
    )
    oauth = DiscordOAuthClient(
        client,
        client_id=settings.discord_client_id,
        client_secret=settings.discord_client_secret,
        redirect_uri=settings.discord_redirect_uri,
        scope=settings.oauth_scope,
        api_base=settings.discord_api_base,
    )

    if not settings.oauth_configured:
        logger.warning("DISCORD_CLIENT_ID/DISCORD_CLIENT_SECRET not set - login will fail")
    if settings.session_secret == "changeme":
        logger.warning("SESSION_SECRET is the default value - set it in production")

    return DashboardState(
        store=store,
        admins=AdminRegistry(store, settings.protected_admin_id),
        catalog=CommandCatalog(provider, store),
        authenticator=SessionAuthenticator(oauth, SessionStore(settings.session_ttl)),
        invocations=InvocationLog(),
        bot=BotStatus(client, settings.discord_bot_token, settings.discord_api_base),
        http_client=client,
    )

"""Fakes and helpers shared by the test modules."""

from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx

from src.core.admins import AdminRegistry
from src.core.auth import Identity, SessionAuthenticator, SessionStore, TokenGrant
from src.core.bot import BotStatus
from src.core.commands import CommandCatalog, InvocationLog, RemoteCommand
from src.core.errors import CatalogUnavailable, TokenExchangeFailed
from src.core.state import DashboardState
from src.core.storage import JsonDocumentStore, admins_document, manual_commands_document

PROTECTED_ID = "510792663210131456"
ADMIN_ID = "222222222222222222"
OPERATOR_ID = "333333333333333333"


def remote_command(name: str, command_id: str = "1") -> RemoteCommand:
    return RemoteCommand(
        id=command_id,
        name=name,
        description=f"{name} command",
        permission_spec=None,
        allow_in_direct_message=True,
        kind=1,
    )


class FakeCommandProvider:
    """In-memory remote command listing."""

    def __init__(self, commands: list[RemoteCommand] | None = None) -> None:
        self.commands = list(commands or [])
        self.fail = False
        self.calls = 0

    async def list_commands(self) -> list[RemoteCommand]:
        self.calls += 1
        if self.fail:
            raise CatalogUnavailable()
        return list(self.commands)


class FakeIdentityProvider:
    """Identity provider that accepts the code "good" and returns ``identity``."""

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity or Identity(id=PROTECTED_ID, display_name="owner")
        self.exchanged: list[str] = []

    def authorization_url(self, state: str) -> str:
        return f"https://discord.test/oauth2/authorize?state={state}"

    async def exchange_code(self, code: str) -> TokenGrant:
        self.exchanged.append(code)
        if code != "good":
            raise TokenExchangeFailed()
        return TokenGrant(access_token="token-123")

    async def fetch_profile(self, grant: TokenGrant) -> Identity:
        return self.identity


def bot_transport(guilds: list[dict[str, Any]] | None = None) -> httpx.MockTransport:
    """Mock Discord REST answering the bot user and guild listing."""
    guild_list = guilds if guilds is not None else [
        {"id": "1", "approximate_member_count": 10},
        {"id": "2", "approximate_member_count": 32},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/users/@me/guilds"):
            return httpx.Response(200, json=guild_list)
        if request.url.path.endswith("/users/@me"):
            return httpx.Response(
                200,
                json={"id": "999", "username": "dashbot", "discriminator": "0", "avatar": "abc"},
            )
        return httpx.Response(404, json={"message": "Unknown"})

    return httpx.MockTransport(handler)


def make_state(
    data_dir: str,
    provider: FakeCommandProvider | None = None,
    identity_provider: FakeIdentityProvider | None = None,
    transport: httpx.MockTransport | None = None,
) -> DashboardState:
    """Wire a DashboardState around fakes and a temporary data directory."""
    client = httpx.AsyncClient(transport=transport or bot_transport())
    store = JsonDocumentStore(
        data_dir, [admins_document(PROTECTED_ID), manual_commands_document()]
    )
    return DashboardState(
        store=store,
        admins=AdminRegistry(store, PROTECTED_ID),
        catalog=CommandCatalog(provider or FakeCommandProvider(), store),
        authenticator=SessionAuthenticator(
            identity_provider or FakeIdentityProvider(), SessionStore()
        ),
        invocations=InvocationLog(),
        bot=BotStatus(client, "bot-token", "https://discord.test/api/v10"),
        http_client=client,
    )


async def login(client: httpx.AsyncClient) -> httpx.Response:
    """Run the login handshake through the API and return the callback response."""
    start = await client.get("/auth/login-start")
    state = parse_qs(urlparse(start.headers["location"]).query)["state"][0]
    return await client.get("/auth/login-callback", params={"code": "good", "state": state})

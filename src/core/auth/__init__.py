"""Discord OAuth login and session identity.

This module provides:
- Identity: The operator bound to a session
- DiscordOAuthClient: Authorization-code flow against Discord
- SessionStore: Server-held session table
- SessionAuthenticator: State-token handshake over server-held sessions
"""

from src.core.auth.oauth import DiscordOAuthClient, Identity, IdentityProvider, TokenGrant
from src.core.auth.session import SessionAuthenticator, SessionStore, generate_state_token

__all__ = [
    "DiscordOAuthClient",
    "Identity",
    "IdentityProvider",
    "SessionAuthenticator",
    "SessionStore",
    "TokenGrant",
    "generate_state_token",
]

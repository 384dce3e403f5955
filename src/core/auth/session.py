# src/core/auth/session.py
"""Server-held sessions and the OAuth login state machine.

The browser only carries an opaque session id. The state token and the
bound identity live in a process-scoped SessionStore, so destroying an
entry (logout, consumed state, expiry) takes effect for every copy of
the cookie.

A session moves ANONYMOUS -> PENDING when a login starts (a state token
is stored in it), and PENDING -> AUTHENTICATED when the callback brings
back the same token together with a code Discord accepts. Any failure
returns the session to ANONYMOUS. The state token is consumed by the
first callback whatever its outcome.
"""

import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Any

from src.core.auth.oauth import Identity, IdentityProvider
from src.core.errors import InvalidState

logger = logging.getLogger(__name__)

STATE_KEY = "oauth_state"
USER_KEY = "user"
STATE_LENGTH = 32
STATE_ALPHABET = string.ascii_letters + string.digits
DEFAULT_SESSION_TTL = 7 * 24 * 3600


def generate_state_token(length: int = STATE_LENGTH) -> str:
    """Return a random alphanumeric token from the OS CSPRNG."""
    return "".join(secrets.choice(STATE_ALPHABET) for _ in range(length))


@dataclass
class _Entry:
    data: dict[str, Any] = field(default_factory=dict)
    expires_at: float = 0.0


class SessionStore:
    """In-memory session table keyed by unguessable session ids.

    Entries expire ``ttl`` seconds after creation. Sessions do not
    survive a process restart.

    Attributes:
        ttl: Session lifetime in seconds.
    """

    def __init__(self, ttl: float = DEFAULT_SESSION_TTL) -> None:
        self.ttl = ttl
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def create(self, data: dict[str, Any] | None = None) -> str:
        self._prune()
        session_id = secrets.token_urlsafe(32)
        self._entries[session_id] = _Entry(dict(data or {}), time.monotonic() + self.ttl)
        return session_id

    def get(self, session_id: str | None) -> dict[str, Any] | None:
        """Return the mutable data of a live session, or None."""
        if not session_id:
            return None
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if entry.expires_at <= time.monotonic():
            del self._entries[session_id]
            return None
        return entry.data

    def delete(self, session_id: str | None) -> None:
        if session_id:
            self._entries.pop(session_id, None)

    def _prune(self) -> None:
        now = time.monotonic()
        for session_id in [sid for sid, e in self._entries.items() if e.expires_at <= now]:
            del self._entries[session_id]


class SessionAuthenticator:
    """Runs the OAuth handshake against server-held sessions."""

    def __init__(self, provider: IdentityProvider, sessions: SessionStore) -> None:
        self._provider = provider
        self.sessions = sessions

    def current_identity(self, session_id: str | None) -> Identity | None:
        data = self.sessions.get(session_id)
        if data is None:
            return None
        return Identity.from_session(data.get(USER_KEY))

    def begin_login(self, session_id: str | None) -> tuple[str, str]:
        """Issue a fresh state token and return the provider authorize URL.

        Starting a new login replaces any token issued earlier for this
        session. An unknown or expired session id gets a new session.

        Returns:
            ``(session_id, authorize_url)``.
        """
        data = self.sessions.get(session_id)
        if data is None:
            session_id = self.sessions.create()
            data = self.sessions.get(session_id)
        state = generate_state_token()
        data[STATE_KEY] = state
        logger.info("OAuth login started")
        return session_id, self._provider.authorization_url(state)

    async def complete_login(
        self, session_id: str | None, code: str | None, state: str | None
    ) -> tuple[str, Identity]:
        """Validate the callback, exchange the code and bind the identity.

        On success the pending session is destroyed and the identity is
        bound to a new session id. On failure the pending session keeps
        neither its state token nor any earlier identity.

        Returns:
            ``(new_session_id, identity)``.

        Raises:
            InvalidState: If code or state is missing, no login is pending,
                or the state does not match.
            TokenExchangeFailed: If Discord rejected the code.
            ProfileFetchFailed: If the profile could not be fetched.
            UpstreamTimeout: If Discord did not answer in time.
        """
        data = self.sessions.get(session_id)
        expected = None
        if data is not None:
            expected = data.pop(STATE_KEY, None)
            data.pop(USER_KEY, None)

        if not code or not state or not expected or not secrets.compare_digest(
            state.encode("utf-8"), str(expected).encode("utf-8")
        ):
            logger.warning("OAuth callback rejected: invalid state")
            raise InvalidState()

        try:
            grant = await self._provider.exchange_code(code)
            identity = await self._provider.fetch_profile(grant)
        except Exception as e:
            logger.warning("OAuth login failed: %s", type(e).__name__)
            raise

        self.sessions.delete(session_id)
        new_session_id = self.sessions.create({USER_KEY: identity.to_session()})
        logger.info("OAuth login succeeded for user %s", identity.id)
        return new_session_id, identity

    def logout(self, session_id: str | None) -> None:
        self.sessions.delete(session_id)

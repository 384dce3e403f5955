# src/interfaces/api/security.py
"""API security: session authentication, admin checks and rate limiting."""

from typing import Annotated

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config import settings
from src.core.auth import Identity
from src.core.errors import Forbidden, Unauthenticated
from src.core.state import DashboardState
from src.utils.logging import set_user_id

limiter = Limiter(key_func=get_remote_address)

SESSION_ID_KEY = "sid"


def get_state(request: Request) -> DashboardState:
    """Return the process-scoped dashboard state attached at startup."""
    return request.app.state.dashboard


State = Annotated[DashboardState, Depends(get_state)]


def get_session_id(request: Request) -> str | None:
    """Return the opaque session id carried by the session cookie."""
    return request.session.get(SESSION_ID_KEY)


def bind_session_id(request: Request, session_id: str | None) -> None:
    """Point the session cookie at a server-held session, or drop it."""
    request.session.clear()
    if session_id:
        request.session[SESSION_ID_KEY] = session_id


async def require_authenticated(request: Request, state: State) -> Identity:
    """Resolve the session identity.

    Raises:
        Unauthenticated: 401 if the session is unknown, expired or holds
            no identity.
    """
    identity = state.authenticator.current_identity(get_session_id(request))
    if identity is None:
        raise Unauthenticated()
    set_user_id(identity.id)
    return identity


async def require_admin(
    identity: Annotated[Identity, Depends(require_authenticated)], state: State
) -> Identity:
    """Resolve the session identity and check it against the admin list.

    Membership is read from the registry on every request, so admin
    changes apply to sessions that are already logged in.

    Raises:
        Unauthenticated: 401 if the session holds no identity.
        Forbidden: 403 if the identity is not an admin.
    """
    if not await state.admins.is_admin(identity.id):
        raise Forbidden()
    return identity


AdminUser = Annotated[Identity, Depends(require_admin)]


def get_rate_limit_string() -> str:
    """Get rate limit string for slowapi.

    Returns:
        Rate limit string in format "N/minute".
    """
    return f"{settings.api_rate_limit}/minute"

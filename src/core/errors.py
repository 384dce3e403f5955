# src/core/errors.py
"""Error taxonomy for the dashboard.

Every failure a route can surface is a DashboardError subclass carrying
the HTTP status it maps to and a message that is safe to show a client.
The API layer renders them as ``{"error": message}``.
"""


class DashboardError(Exception):
    """Base class for all dashboard failures."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(DashboardError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(DashboardError):
    status_code = 403
    default_message = "Not an admin"


class InvalidInput(DashboardError):
    status_code = 400
    default_message = "Invalid input"


class NotFound(DashboardError):
    status_code = 404
    default_message = "Not found"


class AlreadyAdmin(DashboardError):
    status_code = 400
    default_message = "User is already admin"


class ProtectedPrincipal(DashboardError):
    status_code = 400
    default_message = "You cannot remove the main admin."


class InvalidState(DashboardError):
    """OAuth callback did not carry the state token issued for this session."""

    status_code = 400
    default_message = "Invalid OAuth state"


class TokenExchangeFailed(DashboardError):
    status_code = 500
    default_message = "OAuth token exchange failed"


class ProfileFetchFailed(DashboardError):
    status_code = 500
    default_message = "OAuth profile fetch failed"


class CatalogUnavailable(DashboardError):
    status_code = 500
    default_message = "Failed to fetch commands"


class StorageUnavailable(DashboardError):
    status_code = 500
    default_message = "Storage unavailable"


class StorageCorrupt(DashboardError):
    status_code = 500
    default_message = "Stored data is unreadable"


class UpstreamTimeout(DashboardError):
    """An outbound provider call exceeded the configured timeout."""

    status_code = 504
    default_message = "Upstream provider timed out"


class BotNotReady(DashboardError):
    status_code = 503
    default_message = "Bot not ready"

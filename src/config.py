# src/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
Discord OAuth, bot credentials and the data directory are read from the
environment (or a local .env file).
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROTECTED_ADMIN_ID = "510792663210131456"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file and environment variables.
    Environment variables take precedence over .env file values.
    """

    # Discord OAuth application
    discord_client_id: str = ""
    discord_client_secret: str = ""
    discord_redirect_uri: str = "http://localhost:3000/auth/login-callback"
    oauth_scope: str = "identify"

    # Discord bot (command listing, bot info, analytics)
    discord_bot_token: str = ""
    discord_application_id: str = ""
    discord_api_base: str = "https://discord.com/api/v10"

    # Sessions
    session_secret: str = "changeme"
    post_login_redirect: str = "/#admin"
    session_ttl: int = 7 * 24 * 3600  # Seconds a server-held session stays valid

    # Authorization
    protected_admin_id: str = DEFAULT_PROTECTED_ADMIN_ID

    # Storage
    data_dir: str = "data"

    # Outbound calls
    http_timeout: float = 10.0  # Seconds, applies to every provider call

    # API
    host: str = "0.0.0.0"
    port: int = 3000
    api_rate_limit: int = 60  # Requests per minute
    cors_origins: list[str] = Field(default_factory=list)

    # Observability
    log_level: str = "INFO"
    logfire_token: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
        case_sensitive=False,  # Allow case-insensitive env var names
    )

    @property
    def oauth_configured(self) -> bool:
        """Check whether the OAuth client credentials are present.

        Returns:
            True if both client id and client secret are set.
        """
        return bool(self.discord_client_id and self.discord_client_secret)


# Singleton instance - import this in your code
settings = Settings()

# src/interfaces/api/main.py
"""FastAPI application for the bot admin dashboard.

Provides the Discord OAuth login flow, the merged command catalog,
admin management, the command usage log and bot analytics.
"""

import logging
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware

# Load environment variables from .env file
load_dotenv()

from src.config import settings  # noqa: E402
from src.core.commands import InvocationRecord  # noqa: E402
from src.core.errors import (  # noqa: E402
    BotNotReady,
    CatalogUnavailable,
    DashboardError,
    InvalidInput,
    StorageCorrupt,
    StorageUnavailable,
    UpstreamTimeout,
)
from src.core.lifecycle import LifecycleManager  # noqa: E402
from src.core.state import build_state  # noqa: E402
from src.interfaces.api.schemas import (  # noqa: E402
    AdminChange,
    AdminEntry,
    AdminListResponse,
    AnalyticsResponse,
    BotInfoResponse,
    InvocationIn,
    ManualCommandCreate,
    ManualCommandDelete,
    MeResponse,
    SessionUser,
    SuccessResponse,
)
from src.interfaces.api.security import (  # noqa: E402
    AdminUser,
    State,
    bind_session_id,
    get_rate_limit_string,
    get_session_id,
    limiter,
)
from src.utils.logging import configure_structured_logging, set_request_id  # noqa: E402
from src.utils.observability import setup_logfire  # noqa: E402

logger = logging.getLogger(__name__)

COMMAND_LOG_PAGE = 200
REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    if getattr(app.state, "dashboard", None) is None:
        app.state.dashboard = build_state(settings)
    dashboard = app.state.dashboard

    lifecycle = LifecycleManager()
    lifecycle.register("http", dashboard)
    lifecycle.register("bot", dashboard.bot)
    await lifecycle.startup()

    # Only missing documents are created; existing ones are parsed per request
    try:
        await dashboard.store.ensure_all()
    except StorageUnavailable:
        logger.error("Could not initialize data directory %s", dashboard.store.data_dir)

    yield

    await lifecycle.shutdown()
    logger.info("Shutting down...")


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    if isinstance(
        exc, StorageCorrupt | StorageUnavailable | CatalogUnavailable | UpstreamTimeout
    ):
        logger.error(
            "%s on %s %s", type(exc).__name__, request.method, request.url.path, exc_info=exc
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
    return JSONResponse(status_code=InvalidInput.status_code, content={"error": message})


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware and routes.

    The dashboard state is created by the lifespan handler unless one
    was already attached to ``app.state.dashboard`` (as tests do).
    """
    app = FastAPI(
        title="Bot Admin Dashboard API",
        description="Discord bot dashboard: login, commands, admins and usage logs",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(DashboardError, dashboard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie="dashboard_session",
        same_site="lax",
    )
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_request_id(request_id)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    _register_auth_routes(app)
    _register_api_routes(app)
    return app


def _register_auth_routes(app: FastAPI) -> None:
    @app.get("/auth/login-start")
    @app.get("/auth/discord", include_in_schema=False)
    async def login_start(request: Request, dashboard: State) -> RedirectResponse:
        """Redirect to Discord's authorize page with a fresh state token."""
        session_id, url = dashboard.authenticator.begin_login(get_session_id(request))
        bind_session_id(request, session_id)
        return RedirectResponse(url, status_code=302)

    @app.get("/auth/login-callback")
    @app.get("/auth/discord/callback", include_in_schema=False)
    async def login_callback(
        request: Request,
        dashboard: State,
        code: str | None = None,
        state: str | None = None,
    ) -> RedirectResponse:
        """Complete the OAuth handshake and bind the identity to the session."""
        session_id, _ = await dashboard.authenticator.complete_login(
            get_session_id(request), code, state
        )
        bind_session_id(request, session_id)
        return RedirectResponse(settings.post_login_redirect, status_code=302)

    @app.post("/auth/logout", response_model=SuccessResponse)
    async def logout(request: Request, dashboard: State) -> SuccessResponse:
        dashboard.authenticator.logout(get_session_id(request))
        bind_session_id(request, None)
        return SuccessResponse()


def _register_api_routes(app: FastAPI) -> None:
    @app.get("/health")
    async def health_check(dashboard: State) -> dict[str, Any]:
        """Health check endpoint.

        Returns:
            Dictionary with health status and bot readiness.
        """
        return {"status": "healthy", "botReady": dashboard.bot.is_ready}

    @app.get("/api/auth/me", response_model=MeResponse)
    async def me(request: Request, dashboard: State) -> MeResponse:
        """Return the session user and whether they are an admin."""
        identity = dashboard.authenticator.current_identity(get_session_id(request))
        if identity is None:
            return MeResponse(user=None, is_admin=False)
        return MeResponse(
            user=SessionUser(**identity.to_session()),
            is_admin=await dashboard.admins.is_admin(identity.id),
        )

    @app.get("/api/bot/info", response_model=BotInfoResponse)
    async def bot_info(dashboard: State) -> BotInfoResponse:
        user = dashboard.bot.user
        if user is None:
            raise BotNotReady()
        return BotInfoResponse(
            id=user.id,
            tag=user.tag,
            avatar=user.avatar_url,
            guild_count=dashboard.bot.analytics.guild_count,
        )

    @app.get("/api/commands")
    async def list_commands(dashboard: State) -> list[dict[str, Any]]:
        """Return Discord commands followed by manual commands."""
        entries = await dashboard.catalog.list_commands()
        return [entry.to_dict() for entry in entries]

    @app.post("/api/admin/manual-command")
    @limiter.limit(get_rate_limit_string)
    async def add_manual_command(
        request: Request, body: ManualCommandCreate, dashboard: State, admin: AdminUser
    ) -> dict[str, Any]:
        command = await dashboard.catalog.add_manual(
            name=body.name,
            description=body.description or "",
            permission_spec=body.permissions,
            allow_in_direct_message=body.dm_allowed,
        )
        logger.info("Admin %s added manual command %s", admin.id, command.name)
        return command.to_stored()

    @app.delete("/api/admin/manual-command", response_model=SuccessResponse)
    @limiter.limit(get_rate_limit_string)
    async def remove_manual_command(
        request: Request, body: ManualCommandDelete, dashboard: State, admin: AdminUser
    ) -> SuccessResponse:
        await dashboard.catalog.remove_manual(body.name)
        logger.info("Admin %s removed manual command %s", admin.id, body.name)
        return SuccessResponse()

    @app.post("/api/admin/add-admin", response_model=AdminListResponse)
    @limiter.limit(get_rate_limit_string)
    async def add_admin(
        request: Request, body: AdminChange, dashboard: State, admin: AdminUser
    ) -> AdminListResponse:
        user_id = body.user_id.strip()
        if not user_id:
            raise InvalidInput("userId is required")
        admins = await dashboard.admins.add(user_id)
        logger.info("Admin %s granted admin to %s", admin.id, user_id)
        return AdminListResponse(admins=admins)

    @app.get("/api/admin/admins", response_model=list[AdminEntry])
    async def list_admins(dashboard: State, _admin: AdminUser) -> list[AdminEntry]:
        admins = await dashboard.admins.list_admins()
        return [
            AdminEntry(
                user_id=user_id,
                is_protected=dashboard.admins.is_protected(user_id),
                is_main=dashboard.admins.is_protected(user_id),
            )
            for user_id in admins
        ]

    @app.post("/api/admin/remove-admin", response_model=SuccessResponse)
    @limiter.limit(get_rate_limit_string)
    async def remove_admin(
        request: Request, body: AdminChange, dashboard: State, admin: AdminUser
    ) -> SuccessResponse:
        user_id = body.user_id.strip()
        if not user_id:
            raise InvalidInput("userId is required")
        await dashboard.admins.remove(user_id)
        logger.info("Admin %s revoked admin from %s", admin.id, user_id)
        return SuccessResponse()

    @app.get("/api/admin/command-logs")
    async def command_logs(dashboard: State, _admin: AdminUser) -> list[dict[str, Any]]:
        """Return the most recent invocation records, oldest first."""
        return [record.to_dict() for record in dashboard.invocations.recent(COMMAND_LOG_PAGE)]

    # Unauthenticated and unthrottled by contract: the bot posts every
    # invocation here without credentials, so any caller can inject entries.
    @app.post("/api/bot/command-log", response_model=SuccessResponse)
    async def ingest_command_log(body: InvocationIn, dashboard: State) -> SuccessResponse:
        dashboard.invocations.append(
            InvocationRecord(
                user_id=body.user_id,
                username=body.username,
                command_name=body.command_name,
                options=jsonable_encoder(body.options or {}),
                guild_id=body.guild_id,
                channel_id=body.channel_id,
            )
        )
        return SuccessResponse()

    @app.get("/api/admin/analytics", response_model=AnalyticsResponse)
    async def analytics(dashboard: State, _admin: AdminUser) -> AnalyticsResponse:
        snapshot = await dashboard.bot.refresh_or_keep()
        return AnalyticsResponse(
            guild_count=snapshot.guild_count,
            total_member_count=snapshot.total_member_count,
            last_updated=snapshot.last_updated,
        )


configure_structured_logging(settings.log_level)
app = create_app()
setup_logfire(app)

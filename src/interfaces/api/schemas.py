# src/interfaces/api/schemas.py
"""Pydantic models for FastAPI request/response validation.

Field names follow the JSON the dashboard UI and the bot already send
(camelCase), with Python attribute names where they differ.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ManualCommandCreate(BaseModel):
    """Request body for POST /api/admin/manual-command.

    Attributes:
        name: Command name (required, non-empty).
        description: Optional description.
        permissions: Optional opaque permission string.
        allow_in_direct_message: Accepts ``allowInDirectMessage`` or the
            legacy ``dm_permission`` key; defaults to True.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Command name")
    description: str | None = Field(None, description="Command description")
    permissions: str | None = Field(None, description="Opaque permission string")
    allow_in_direct_message: bool | None = Field(
        None,
        alias="allowInDirectMessage",
        description="Whether the command may be used in direct messages",
    )
    dm_permission: bool | None = Field(None, description="Legacy alias")

    @property
    def dm_allowed(self) -> bool:
        if self.allow_in_direct_message is not None:
            return self.allow_in_direct_message
        if self.dm_permission is not None:
            return self.dm_permission
        return True


class ManualCommandDelete(BaseModel):
    """Request body for DELETE /api/admin/manual-command."""

    name: str = Field(..., description="Name of the manual command to remove")


class AdminChange(BaseModel):
    """Request body for POST /api/admin/add-admin and remove-admin."""

    user_id: str = Field(..., alias="userId", description="Discord user id")


class AdminEntry(BaseModel):
    """One row of GET /api/admin/admins."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    tag: str | None = None
    is_protected: bool = Field(..., alias="isProtected")
    is_main: bool = Field(..., alias="isMain")


class InvocationIn(BaseModel):
    """Request body for POST /api/bot/command-log.

    Every field is optional; the bot reports whatever it has.
    """

    user_id: str | None = Field(None, alias="userId")
    username: str | None = None
    command_name: str | None = Field(None, alias="commandName")
    options: dict[str, Any] | None = None
    guild_id: str | None = Field(None, alias="guildId")
    channel_id: str | None = Field(None, alias="channelId")


class SessionUser(BaseModel):
    id: str
    username: str
    avatar: str | None = None


class MeResponse(BaseModel):
    """Response body for GET /api/auth/me."""

    model_config = ConfigDict(populate_by_name=True)

    user: SessionUser | None = None
    is_admin: bool = Field(False, alias="isAdmin")


class BotInfoResponse(BaseModel):
    """Response body for GET /api/bot/info."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    tag: str
    avatar: str | None = None
    guild_count: int = Field(..., alias="guildCount")


class AnalyticsResponse(BaseModel):
    """Response body for GET /api/admin/analytics."""

    model_config = ConfigDict(populate_by_name=True)

    guild_count: int = Field(..., alias="guildCount")
    total_member_count: int = Field(..., alias="totalMemberCount")
    last_updated: str | None = Field(None, alias="lastUpdated")


class SuccessResponse(BaseModel):
    success: bool = True


class AdminListResponse(SuccessResponse):
    admins: list[str] = Field(default_factory=list)

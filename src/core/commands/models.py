# src/core/commands/models.py
"""Command catalog data models.

Two kinds of entries make up the catalog: commands registered with
Discord for the bot application (remote, fetched on every read) and
commands defined locally by operators (manual, persisted as JSON).
"""

import uuid
from dataclasses import dataclass
from typing import Any, Literal

REMOTE_SOURCE = "discord"
MANUAL_SOURCE = "manual"


@dataclass(frozen=True)
class RemoteCommand:
    """A slash command registered with Discord for the bot application.

    Attributes:
        id: Discord snowflake of the command.
        name: Command name.
        description: Command description (empty string if unset).
        permission_spec: ``default_member_permissions`` bitfield string, or None.
        allow_in_direct_message: ``dm_permission`` as reported by Discord.
        kind: Discord application command type (1 = chat input).
    """

    id: str
    name: str
    description: str
    permission_spec: str | None
    allow_in_direct_message: bool | None
    kind: int | None
    origin: Literal["remote"] = "remote"

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "RemoteCommand":
        return cls(
            id=str(payload.get("id", "")),
            name=payload.get("name", ""),
            description=payload.get("description") or "",
            permission_spec=payload.get("default_member_permissions"),
            allow_in_direct_message=payload.get("dm_permission"),
            kind=payload.get("type"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": REMOTE_SOURCE,
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "default_member_permissions": self.permission_spec,
            "dm_permission": self.allow_in_direct_message,
            "type": self.kind,
        }


@dataclass(frozen=True)
class ManualCommand:
    """A command defined locally by an operator.

    Manual commands are immutable once created; they are only added or
    removed. Names are not required to be unique.

    Attributes:
        id: Generated identifier, ``manual_<hex>``.
        name: Command name.
        description: Free-text description.
        permission_spec: Opaque permission string, or None.
        allow_in_direct_message: Whether the command may be used in DMs.
    """

    id: str
    name: str
    description: str
    permission_spec: str | None
    allow_in_direct_message: bool
    origin: Literal["manual"] = "manual"

    @classmethod
    def create(
        cls,
        name: str,
        description: str = "",
        permission_spec: str | None = None,
        allow_in_direct_message: bool = True,
    ) -> "ManualCommand":
        return cls(
            id=f"manual_{uuid.uuid4().hex}",
            name=name,
            description=description,
            permission_spec=permission_spec,
            allow_in_direct_message=allow_in_direct_message,
        )

    @classmethod
    def from_stored(cls, payload: dict[str, Any]) -> "ManualCommand":
        """Build from a stored JSON object (the manualCommands.json layout)."""
        dm_permission = payload.get("dm_permission")
        return cls(
            id=str(payload.get("id", "")),
            name=payload.get("name", ""),
            description=payload.get("description") or "",
            permission_spec=payload.get("permissions"),
            allow_in_direct_message=True if dm_permission is None else bool(dm_permission),
        )

    def to_stored(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "permissions": self.permission_spec,
            "dm_permission": self.allow_in_direct_message,
            "type": MANUAL_SOURCE,
        }

    def to_dict(self) -> dict[str, Any]:
        return {"source": MANUAL_SOURCE, **self.to_stored()}


CatalogEntry = RemoteCommand | ManualCommand

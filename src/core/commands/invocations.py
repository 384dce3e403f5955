# src/core/commands/invocations.py
"""Bounded in-memory log of command invocations reported by the bot.

Records are kept in arrival order. When the buffer grows past its
capacity it is cut down to the most recent ``retain`` records in one
step. Nothing is persisted; the log is empty after a restart.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000
DEFAULT_RETAIN = 500


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class InvocationRecord:
    """One command usage event."""

    user_id: str | None
    username: str | None
    command_name: str | None
    options: dict[str, Any] = field(default_factory=dict)
    guild_id: str | None = None
    channel_id: str | None = None
    timestamp: str = field(default_factory=_utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "userId": self.user_id,
            "username": self.username,
            "commandName": self.command_name,
            "options": self.options,
            "guildId": self.guild_id,
            "channelId": self.channel_id,
        }


class InvocationLog:
    """Append-only ring of invocation records.

    Attributes:
        capacity: Length above which the buffer is trimmed.
        retain: Number of most recent records kept after a trim.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, retain: int = DEFAULT_RETAIN) -> None:
        if retain > capacity:
            raise ValueError("retain must not exceed capacity")
        self.capacity = capacity
        self.retain = retain
        self._records: list[InvocationRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: InvocationRecord) -> None:
        self._records.append(record)
        if len(self._records) > self.capacity:
            dropped = len(self._records) - self.retain
            self._records = self._records[-self.retain :]
            logger.debug("Invocation log trimmed, %d records dropped", dropped)

    def recent(self, n: int) -> list[InvocationRecord]:
        """Return the last ``n`` records, oldest first."""
        if n <= 0:
            return []
        return self._records[-n:]

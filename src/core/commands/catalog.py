# src/core/commands/catalog.py
"""Merged command catalog: remote Discord commands followed by manual ones.

The catalog is recomputed on every read. Remote commands are never
cached, and a failed remote fetch fails the whole read rather than
returning the manual half alone.
"""

import logging

from src.core.commands.models import CatalogEntry, ManualCommand
from src.core.commands.remote import CommandProvider
from src.core.errors import InvalidInput, NotFound
from src.core.storage import MANUAL_COMMANDS, JsonDocumentStore

logger = logging.getLogger(__name__)


class CommandCatalog:
    """Read model over remote and manual commands, plus manual mutations."""

    def __init__(self, provider: CommandProvider, store: JsonDocumentStore) -> None:
        self._provider = provider
        self._store = store

    async def list_manual(self) -> list[ManualCommand]:
        stored = await self._store.read(MANUAL_COMMANDS)
        return [ManualCommand.from_stored(item) for item in stored if isinstance(item, dict)]

    async def list_commands(self) -> list[CatalogEntry]:
        """Return remote commands followed by manual commands.

        Raises:
            CatalogUnavailable: If the remote listing failed.
            UpstreamTimeout: If the remote listing timed out.
            StorageUnavailable, StorageCorrupt: If the manual list is unreadable.
        """
        remote = await self._provider.list_commands()
        manual = await self.list_manual()
        return [*remote, *manual]

    async def add_manual(
        self,
        name: str,
        description: str = "",
        permission_spec: str | None = None,
        allow_in_direct_message: bool = True,
    ) -> ManualCommand:
        """Create and persist a manual command.

        Name collisions with other manual or remote commands are allowed.

        Raises:
            InvalidInput: If ``name`` is empty.
        """
        if not name:
            raise InvalidInput("Name is required")

        command = ManualCommand.create(
            name=name,
            description=description or "",
            permission_spec=permission_spec or None,
            allow_in_direct_message=allow_in_direct_message,
        )
        await self._store.mutate(
            MANUAL_COMMANDS, lambda current: [*current, command.to_stored()]
        )
        logger.info("Manual command %s added (%s)", command.name, command.id)
        return command

    async def remove_manual(self, name: str) -> ManualCommand:
        """Remove the first manual command whose name matches exactly.

        Returns:
            The removed command.

        Raises:
            InvalidInput: If ``name`` is empty.
            NotFound: If no manual command has that name.
        """
        if not name:
            raise InvalidInput("name is required")

        removed: list[ManualCommand] = []

        def apply(current: list) -> list:
            for index, item in enumerate(current):
                if isinstance(item, dict) and item.get("name") == name:
                    removed.append(ManualCommand.from_stored(item))
                    return current[:index] + current[index + 1 :]
            raise NotFound("Command not found")

        await self._store.mutate(MANUAL_COMMANDS, apply)
        logger.info("Manual command %s removed (%s)", name, removed[0].id)
        return removed[0]

"""Command catalog and invocation log.

This module provides:
- RemoteCommand / ManualCommand: Catalog entry models
- DiscordCommandProvider: Live listing of the bot's registered commands
- CommandCatalog: Remote + manual merge and manual command mutations
- InvocationLog: Bounded in-memory log of command usage
"""

from src.core.commands.catalog import CommandCatalog
from src.core.commands.invocations import InvocationLog, InvocationRecord
from src.core.commands.models import CatalogEntry, ManualCommand, RemoteCommand
from src.core.commands.remote import CommandProvider, DiscordCommandProvider

__all__ = [
    "CatalogEntry",
    "CommandCatalog",
    "CommandProvider",
    "DiscordCommandProvider",
    "InvocationLog",
    "InvocationRecord",
    "ManualCommand",
    "RemoteCommand",
]

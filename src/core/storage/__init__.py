"""Persistent JSON document storage."""

from src.core.storage.store import (
    ADMINS,
    MANUAL_COMMANDS,
    Document,
    JsonDocumentStore,
    admins_document,
    manual_commands_document,
)

__all__ = [
    "ADMINS",
    "MANUAL_COMMANDS",
    "Document",
    "JsonDocumentStore",
    "admins_document",
    "manual_commands_document",
]

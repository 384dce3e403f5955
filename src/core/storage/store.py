# src/core/storage/store.py
"""JSON document store for the admin list and manual commands.

Each document is a single JSON array on disk. Reads return the last
successful write; a missing document is created with its default before
the first read returns. Writes replace the whole document atomically
(temp file + os.replace).

Example:
    >>> store = JsonDocumentStore("data", [admins_document("123")])
    >>> await store.read(ADMINS)
    ['123']
"""

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.core.errors import StorageCorrupt, StorageUnavailable

logger = logging.getLogger(__name__)

ADMINS = "admins"
MANUAL_COMMANDS = "manual_commands"


@dataclass(frozen=True)
class Document:
    """Declaration of a persisted JSON document.

    Attributes:
        name: Logical name used by callers (e.g. "admins").
        filename: File name inside the store directory.
        default_factory: Produces the content written on first access.
    """

    name: str
    filename: str
    default_factory: Callable[[], list[Any]]


def admins_document(protected_id: str) -> Document:
    """Admin list document, seeded with the protected principal."""
    return Document(ADMINS, "admins.json", lambda: [protected_id])


def manual_commands_document() -> Document:
    """Manual command list document, empty by default."""
    return Document(MANUAL_COMMANDS, "manualCommands.json", list)


class JsonDocumentStore:
    """File-backed store of whole JSON documents.

    Plain ``read``/``write`` give no atomicity across a read-modify-write.
    ``mutate`` holds a per-document asyncio.Lock for the duration of the
    sequence, so mutations inside this process are serialized. Writers in
    other processes are not coordinated (last write wins).

    Attributes:
        data_dir: Directory holding the document files.
    """

    def __init__(self, data_dir: str | Path, documents: list[Document]) -> None:
        self.data_dir = Path(data_dir)
        self._documents = {doc.name: doc for doc in documents}
        self._locks = {doc.name: asyncio.Lock() for doc in documents}

    def _document(self, name: str) -> Document:
        try:
            return self._documents[name]
        except KeyError:
            raise KeyError(f"Unknown document: {name}") from None

    async def read(self, name: str) -> list[Any]:
        """Read a document, creating it with its default if missing.

        Raises:
            StorageUnavailable: On filesystem errors.
            StorageCorrupt: If the file is not a JSON array.
        """
        return await asyncio.to_thread(self._read_sync, self._document(name))

    async def write(self, name: str, value: list[Any]) -> None:
        """Replace a document with ``value``.

        Raises:
            StorageUnavailable: On filesystem errors.
        """
        await asyncio.to_thread(self._write_sync, self._document(name), value)

    async def ensure_all(self) -> list[str]:
        """Create every missing document with its default content.

        Existing files are left untouched and are not parsed, so a corrupt
        document only fails the requests that read it.

        Returns:
            Names of the documents that were created.

        Raises:
            StorageUnavailable: If a missing document cannot be written.
        """
        return await asyncio.to_thread(self._ensure_all_sync)

    async def mutate(
        self,
        name: str,
        fn: Callable[[list[Any]], Awaitable[list[Any]] | list[Any]],
    ) -> list[Any]:
        """Run a serialized read-modify-write on one document.

        ``fn`` receives the current content and returns the new content.
        Exceptions raised by ``fn`` abort the mutation without writing.

        Returns:
            The content that was written.
        """
        async with self._locks[self._document(name).name]:
            current = await self.read(name)
            updated = fn(current)
            if asyncio.iscoroutine(updated):
                updated = await updated
            await self.write(name, updated)
            return updated

    def _ensure_all_sync(self) -> list[str]:
        created = []
        for doc in self._documents.values():
            if (self.data_dir / doc.filename).exists():
                continue
            self._write_sync(doc, doc.default_factory())
            created.append(doc.name)
        if created:
            logger.info("Initialized %s in %s", ", ".join(created), self.data_dir)
        return created

    def _read_sync(self, doc: Document) -> list[Any]:
        path = self.data_dir / doc.filename
        try:
            if not path.exists():
                default = doc.default_factory()
                self._write_sync(doc, default)
                logger.info("Initialized %s with default content", path)
                return default
            raw = path.read_text(encoding="utf-8")
        except StorageUnavailable:
            raise
        except OSError as e:
            logger.error("Failed to read %s: %s", path, e)
            raise StorageUnavailable() from e

        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.exception("Document %s at %s is not valid JSON", doc.name, path)
            raise StorageCorrupt() from e

        if not isinstance(value, list):
            logger.error(
                "Document %s at %s holds %s, expected a JSON array",
                doc.name,
                path,
                type(value).__name__,
            )
            raise StorageCorrupt()
        return value

    def _write_sync(self, doc: Document, value: list[Any]) -> None:
        path = self.data_dir / doc.filename
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{doc.filename}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, indent=2)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise StorageUnavailable() from e

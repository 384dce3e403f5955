"""Tests for the JSON document store."""

import asyncio
import json
from pathlib import Path

import pytest

from src.core.errors import StorageCorrupt, StorageUnavailable
from src.core.storage import (
    ADMINS,
    MANUAL_COMMANDS,
    JsonDocumentStore,
    admins_document,
    manual_commands_document,
)

PROTECTED_ID = "510792663210131456"


def make_store(data_dir: str | Path) -> JsonDocumentStore:
    return JsonDocumentStore(data_dir, [admins_document(PROTECTED_ID), manual_commands_document()])


class TestDefaults:
    """Missing documents are created with their defaults on first read."""

    @pytest.mark.asyncio
    async def test_missing_admins_seeded_with_protected_id(self, tmp_path: Path) -> None:
        store = make_store(tmp_path / "data")

        assert await store.read(ADMINS) == [PROTECTED_ID]
        stored = json.loads((tmp_path / "data" / "admins.json").read_text())
        assert stored == [PROTECTED_ID]

    @pytest.mark.asyncio
    async def test_missing_manual_commands_seeded_empty(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)

        assert await store.read(MANUAL_COMMANDS) == []
        assert (tmp_path / "manualCommands.json").exists()

    @pytest.mark.asyncio
    async def test_existing_document_not_overwritten(self, tmp_path: Path) -> None:
        (tmp_path / "admins.json").write_text(json.dumps(["1", "2"]))
        store = make_store(tmp_path)

        assert await store.read(ADMINS) == ["1", "2"]

    @pytest.mark.asyncio
    async def test_ensure_all_creates_only_missing_documents(self, tmp_path: Path) -> None:
        (tmp_path / "admins.json").write_text("{broken")
        store = make_store(tmp_path)

        created = await store.ensure_all()
        again = await store.ensure_all()

        assert created == [MANUAL_COMMANDS]
        assert again == []
        assert (tmp_path / "admins.json").read_text() == "{broken"
        assert json.loads((tmp_path / "manualCommands.json").read_text()) == []


class TestReadWrite:
    @pytest.mark.asyncio
    async def test_read_returns_last_write(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)

        await store.write(MANUAL_COMMANDS, [{"name": "a"}])
        await store.write(MANUAL_COMMANDS, [{"name": "b"}])

        assert await store.read(MANUAL_COMMANDS) == [{"name": "b"}]

    @pytest.mark.asyncio
    async def test_write_leaves_no_temp_files(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)

        await store.write(ADMINS, [PROTECTED_ID, "42"])

        assert sorted(p.name for p in tmp_path.iterdir()) == ["admins.json"]

    @pytest.mark.asyncio
    async def test_unknown_document_rejected(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)

        with pytest.raises(KeyError):
            await store.read("nope")


class TestFailures:
    @pytest.mark.asyncio
    async def test_invalid_json_is_corrupt(self, tmp_path: Path) -> None:
        (tmp_path / "admins.json").write_text("[not json")
        store = make_store(tmp_path)

        with pytest.raises(StorageCorrupt):
            await store.read(ADMINS)

    @pytest.mark.asyncio
    async def test_non_array_is_corrupt(self, tmp_path: Path) -> None:
        (tmp_path / "manualCommands.json").write_text(json.dumps({"name": "x"}))
        store = make_store(tmp_path)

        with pytest.raises(StorageCorrupt):
            await store.read(MANUAL_COMMANDS)

    @pytest.mark.asyncio
    async def test_unwritable_directory_is_unavailable(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = make_store(blocker / "data")

        with pytest.raises(StorageUnavailable):
            await store.read(ADMINS)


class TestMutate:
    @pytest.mark.asyncio
    async def test_concurrent_mutations_are_serialized(self, tmp_path: Path) -> None:
        """Interleaved read-modify-writes must not lose updates."""
        store = make_store(tmp_path)

        async def append(value: str) -> None:
            async def apply(current: list) -> list:
                await asyncio.sleep(0)
                return [*current, value]

            await store.mutate(ADMINS, apply)

        await asyncio.gather(*(append(str(i)) for i in range(20)))

        stored = await store.read(ADMINS)
        assert len(stored) == 21
        assert set(stored) == {PROTECTED_ID, *(str(i) for i in range(20))}

    @pytest.mark.asyncio
    async def test_failed_mutation_does_not_write(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        await store.read(ADMINS)

        def apply(current: list) -> list:
            raise ValueError("abort")

        with pytest.raises(ValueError):
            await store.mutate(ADMINS, apply)

        assert await store.read(ADMINS) == [PROTECTED_ID]

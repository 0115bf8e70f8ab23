"""
Tests for patch semantics.
"""

from __future__ import annotations

import asyncio

import pytest

from relcache.backends.memory import MemoryBackend
from relcache.backends.prefix import PrefixedStorage
from relcache.locks import KeyedLock
from relcache.merge import MergeEngine
from relcache.records import RecordStore
from relcache.types import PatchOutcome


@pytest.fixture
def merger(record_store: RecordStore) -> MergeEngine:
    return MergeEngine(record_store)


class SlowReadBackend(MemoryBackend):
    """Memory backend that yields to the event loop on every read."""

    async def get_item(self, key: str):
        value = await super().get_item(key)
        await asyncio.sleep(0.01)
        return value


class TestPatch:
    """Test single-key patches."""

    @pytest.mark.asyncio
    async def test_merge_over_existing(self, merger: MergeEngine) -> None:
        """Test that incoming fields win and old-only fields survive."""
        await merger.records.set("k", {"a": 1, "b": 2})

        outcome = await merger.patch("k", {"b": 3, "c": 4})

        assert outcome == PatchOutcome.MERGED
        assert await merger.records.get("k") == {"a": 1, "b": 3, "c": 4}

    @pytest.mark.asyncio
    async def test_update_only_skips_absent(self, merger: MergeEngine) -> None:
        """Test that update_only never creates a record."""
        outcome = await merger.patch("k", {"x": 1}, update_only=True)

        assert outcome == PatchOutcome.SKIPPED
        assert await merger.records.get("k") is None
        assert await merger.records.list_keys() == []

    @pytest.mark.asyncio
    async def test_update_only_merges_existing(self, merger: MergeEngine) -> None:
        await merger.records.set("k", {"a": 1})

        outcome = await merger.patch("k", {"b": 2}, update_only=True)

        assert outcome == PatchOutcome.MERGED
        assert await merger.records.get("k") == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_creates_when_absent(self, merger: MergeEngine) -> None:
        outcome = await merger.patch("k", {"x": 1})

        assert outcome == PatchOutcome.CREATED
        assert await merger.records.get("k") == {"x": 1}

    @pytest.mark.asyncio
    async def test_list_replaces_wholesale(self, merger: MergeEngine) -> None:
        """Test that list values are not field-merged."""
        await merger.records.set("k", {"a": 1})

        outcome = await merger.patch("k", [1, 2, 3])

        assert outcome == PatchOutcome.REPLACED
        assert await merger.records.get("k") == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_merge_is_shallow(self, merger: MergeEngine) -> None:
        """Test that nested objects are replaced, not deep-merged."""
        await merger.records.set("k", {"profile": {"name": "ada", "age": 36}})

        await merger.patch("k", {"profile": {"age": 37}})

        assert await merger.records.get("k") == {"profile": {"age": 37}}

    @pytest.mark.asyncio
    async def test_mapping_over_stored_list(self, merger: MergeEngine) -> None:
        """Test that a stored non-mapping contributes no fields."""
        await merger.records.set("k", [1, 2])

        await merger.patch("k", {"a": 1})

        assert await merger.records.get("k") == {"a": 1}

    @pytest.mark.asyncio
    async def test_scalar_value_rejected(self, merger: MergeEngine) -> None:
        with pytest.raises(TypeError):
            await merger.patch("k", 5)  # type: ignore[arg-type]


class TestBulkPatch:
    """Test batch patches."""

    @pytest.mark.asyncio
    async def test_entries_are_independent(
        self, merger: MergeEngine, backend: MemoryBackend
    ) -> None:
        """Test that skips and failures do not affect other entries."""
        await merger.records.set("a", {"v": 1})
        await backend.set_item("records/b", "{broken")

        outcomes = await merger.bulk_patch(
            [("a", {"w": 2}), ("b", {"w": 2}), ("c", {"w": 2}), ("d", [1])],
            update_only=True,
        )

        assert outcomes == [
            PatchOutcome.MERGED,
            PatchOutcome.FAILED,
            PatchOutcome.SKIPPED,
            PatchOutcome.SKIPPED,
        ]
        assert await merger.records.get("a") == {"v": 1, "w": 2}
        assert await merger.records.get("c") is None

    @pytest.mark.asyncio
    async def test_creates_without_update_only(self, merger: MergeEngine) -> None:
        outcomes = await merger.bulk_patch([("a", {"x": 1}), ("b", ["y"])])

        assert outcomes == [PatchOutcome.CREATED, PatchOutcome.REPLACED]
        assert await merger.records.get_many(["a", "b"]) == [{"x": 1}, ["y"]]


class TestPatchConcurrency:
    """Test serialization of concurrent patches."""

    @pytest.mark.asyncio
    async def test_concurrent_patches_keep_all_fields(self) -> None:
        """Test that locked patches to one key never lose each other's fields."""
        store = RecordStore(PrefixedStorage(SlowReadBackend(), "records"))
        merger = MergeEngine(store)
        await store.set("k", {})

        await asyncio.gather(*[merger.patch("k", {f"f{i}": i}) for i in range(10)])

        assert await store.get("k") == {f"f{i}": i for i in range(10)}

    @pytest.mark.asyncio
    async def test_unlocked_patches_can_lose_updates(self) -> None:
        """Test that disabling serialization exposes the lost-update race."""
        store = RecordStore(
            PrefixedStorage(SlowReadBackend(), "records"),
            locks=KeyedLock(enabled=False),
        )
        merger = MergeEngine(store)
        await store.set("k", {})

        await asyncio.gather(*[merger.patch("k", {f"f{i}": i}) for i in range(10)])

        assert len(await store.get("k")) < 10

"""
Tests for wildcard key scanning.
"""

from __future__ import annotations

import pytest

from relcache.backends.memory import MemoryBackend
from relcache.records import RecordStore
from relcache.scan import ScanEngine, matches, parse_pattern


class TestMatches:
    """Test segment matching."""

    @pytest.mark.parametrize(
        ("query", "key", "expected"),
        [
            ("users.*", "users.1", True),
            ("users.1", "users.1", True),
            ("users.1", "users.2", False),
            ("posts.*", "users.1", False),
            ("*.*", "users.1", True),
            ("users.*", "users", False),
            ("users.*", "users.1.avatar", False),
            ("users.*.avatar", "users.1.avatar", True),
            ("users.*", "users.", False),
            ("*", "users", True),
            ("users.x*", "users.xy", False),
        ],
    )
    def test_matches(self, query: str, key: str, expected: bool) -> None:
        assert matches(parse_pattern(query), key) is expected


class TestScanEngine:
    """Test scanning the record store."""

    @pytest.fixture
    async def scanner(self, record_store: RecordStore) -> ScanEngine:
        await record_store.set_many(
            [
                ("users.1", {"id": "1"}),
                ("users.2", {"id": "2"}),
                ("guilds.1", {"id": "g1"}),
                ("guilds.1.members", ["1", "2"]),
            ]
        )
        return ScanEngine(record_store)

    @pytest.mark.asyncio
    async def test_wildcard(self, scanner: ScanEngine) -> None:
        result = await scanner.scan("users.*")

        assert sorted(result, key=lambda r: r["id"]) == [{"id": "1"}, {"id": "2"}]

    @pytest.mark.asyncio
    async def test_exact(self, scanner: ScanEngine) -> None:
        assert await scanner.scan("users.1") == [{"id": "1"}]

    @pytest.mark.asyncio
    async def test_no_match(self, scanner: ScanEngine) -> None:
        assert await scanner.scan("posts.*") == []

    @pytest.mark.asyncio
    async def test_segment_count_must_match(self, scanner: ScanEngine) -> None:
        assert sorted(await scanner.scan_keys("*.*")) == ["guilds.1", "users.1", "users.2"]
        assert await scanner.scan_keys("*.*.*") == ["guilds.1.members"]

    @pytest.mark.asyncio
    async def test_scan_keys(self, scanner: ScanEngine) -> None:
        assert sorted(await scanner.scan_keys("users.*")) == ["users.1", "users.2"]

    @pytest.mark.asyncio
    async def test_malformed_match_skipped(
        self, scanner: ScanEngine, backend: MemoryBackend
    ) -> None:
        """Test that a malformed matching record does not fail the scan."""
        await backend.set_item("records/users.3", "{broken")

        result = await scanner.scan("users.*")

        assert len(result) == 2
        assert "users.3" in await scanner.scan_keys("users.*")

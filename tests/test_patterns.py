"""Tests for PatternRegistry."""

import pytest

from mindspace.features.journaling.patterns import PatternRegistry
from mindspace.shared.errors import PersistenceError

from tests.fakes import FakePatternSource


def _row(pattern_id: str, text: str, confidence: float = 0.5, occurrences: int = 2) -> dict:
    return {
        "id": pattern_id,
        "pattern": text,
        "first_detected": "2026-09-15T08:00:00Z",
        "occurrences": occurrences,
        "confidence": confidence,
    }


class TestPatternRegistry:

    def test_keeps_detector_order(self):
        registry = PatternRegistry([_row("b", "Second", 0.9), _row("a", "First", 0.4)])

        assert [p.id for p in registry.list()] == ["b", "a"]
        assert len(registry) == 2

    def test_repeated_id_keeps_position_and_takes_last_record(self):
        registry = PatternRegistry([
            _row("a", "Old text"),
            _row("b", "Other"),
            _row("a", "New text", occurrences=5),
        ])

        assert [p.id for p in registry] == ["a", "b"]
        assert registry.get("a").pattern == "New text"
        assert registry.get("a").occurrences == 5

    def test_top_and_get(self):
        registry = PatternRegistry([_row(str(i), f"p{i}") for i in range(5)])

        assert [p.id for p in registry.top(2)] == ["0", "1"]
        assert registry.top(0) == []
        assert registry.get("missing") is None

    def test_replace_drops_previous_patterns(self):
        registry = PatternRegistry([_row("a", "One")])

        registry.replace([_row("z", "Two")])

        assert [p.id for p in registry] == ["z"]

    @pytest.mark.asyncio
    async def test_refresh_reads_source_for_user(self):
        source = FakePatternSource([_row("a", "Exercise helps", 0.8)])
        registry = PatternRegistry()

        patterns = await registry.refresh(source, "user-1")

        assert source.calls == ["user-1"]
        assert patterns[0].pattern == "Exercise helps"
        assert patterns[0].confidence == 0.8

    def test_out_of_range_record_is_persistence_error(self):
        registry = PatternRegistry([_row("a", "Kept")])

        with pytest.raises(PersistenceError) as exc_info:
            registry.replace([_row("b", "Fine"), _row("c", "Too sure", confidence=1.5, occurrences=0)])

        assert exc_info.value.operation == "select"
        assert [p.id for p in registry] == ["a"]

    @pytest.mark.asyncio
    async def test_refresh_with_record_missing_fields_is_persistence_error(self):
        source = FakePatternSource([{"id": "a", "confidence": 0.5}])
        registry = PatternRegistry()

        with pytest.raises(PersistenceError):
            await registry.refresh(source, "user-1")

        assert len(registry) == 0

"""Tests for the mood domain and entry models."""

from datetime import datetime, timezone

import pydantic
import pytest

from mindspace.features.journaling.models import EntryDraft, JournalEntry, Mood, Pattern
from mindspace.shared.errors import ValidationError


class TestMoodParse:

    @pytest.mark.parametrize("value, expected", [
        ("good", Mood.GOOD),
        ("  Excellent ", Mood.EXCELLENT),
        ("great", Mood.EXCELLENT),
        ("okay", Mood.NEUTRAL),
        ("bad", Mood.LOW),
        ("terrible", Mood.STRUGGLING),
        (5, Mood.EXCELLENT),
        (1, Mood.STRUGGLING),
        ("3", Mood.NEUTRAL),
        (Mood.LOW, Mood.LOW),
    ])
    def test_accepted_forms(self, value, expected):
        assert Mood.parse(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "ecstatic", 0, 6, True, 2.5])
    def test_rejected_forms(self, value):
        with pytest.raises(ValidationError):
            Mood.parse(value)

    def test_scores_are_ordinal(self):
        assert [mood.score for mood in Mood] == [5, 4, 3, 2, 1]
        assert Mood.from_score(4) == Mood.GOOD

    def test_labels(self):
        assert Mood.NEUTRAL.label == "Okay"
        assert Mood.EXCELLENT.label == "Great"


class TestEntryDraft:

    def test_to_row_fills_missing_text(self):
        draft = EntryDraft(mood="4", gratitude="tea")

        assert draft.to_row("u1") == {
            "user_id": "u1",
            "mood": "good",
            "gratitude": "tea",
            "intentions": "",
            "thoughts": "",
        }

    def test_missing_mood_rejected_at_row_time(self):
        draft = EntryDraft(thoughts="just thoughts")

        assert draft.mood is None
        with pytest.raises(ValidationError):
            draft.to_row("u1")

    def test_invalid_mood_rejected_on_construction(self):
        with pytest.raises(ValidationError):
            EntryDraft(mood="sideways")


class TestJournalEntry:

    def test_from_row_maps_storage_columns(self):
        created = datetime(2026, 10, 1, 9, tzinfo=timezone.utc)

        entry = JournalEntry.from_row({
            "id": 42,
            "user_id": "u1",
            "created_at": created,
            "mood": "great",
            "gratitude": None,
            "insights": "",
        })

        assert entry.id == "42"
        assert entry.date == created
        assert entry.mood == Mood.EXCELLENT
        assert entry.gratitude == ""
        assert entry.ai_insights is None

    def test_from_row_parses_iso_timestamps(self):
        entry = JournalEntry.from_row({
            "id": "e1",
            "created_at": "2026-10-01T09:00:00+00:00",
            "mood": "low",
            "insights": "Be gentle with yourself",
        })

        assert entry.date.year == 2026
        assert entry.ai_insights == "Be gentle with yourself"


class TestPattern:

    @pytest.mark.parametrize("field, value", [("confidence", 1.5), ("confidence", -0.1), ("occurrences", 0)])
    def test_bounds(self, field, value):
        row = {
            "id": "p1",
            "pattern": "Sleep affects mood",
            "first_detected": "2026-09-01T00:00:00Z",
            "occurrences": 3,
            "confidence": 0.6,
        }
        row[field] = value

        with pytest.raises(pydantic.ValidationError):
            Pattern.from_row(row)

"""
Journal data model.

Mood has one canonical form inside the core, the five-label ``Mood`` enum.
Ordinal scores (1..5) and the legacy labels used by older clients are mapped
at the boundary by ``Mood.parse``.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from mindspace.shared.errors import ValidationError


class Mood(str, Enum):
    """Canonical mood domain, best to worst."""

    EXCELLENT = "excellent"
    GOOD = "good"
    NEUTRAL = "neutral"
    LOW = "low"
    STRUGGLING = "struggling"

    @property
    def score(self) -> int:
        """Ordinal value used by trend arithmetic (struggling=1 .. excellent=5)."""
        return _SCORES[self]

    @property
    def label(self) -> str:
        """Display label used in generation prompts."""
        return _LABELS[self]

    @classmethod
    def from_score(cls, score: int) -> "Mood":
        for mood, value in _SCORES.items():
            if value == score:
                return mood
        raise ValidationError(f"Mood score must be between 1 and 5, got {score}", {"field": "mood"})

    @classmethod
    def parse(cls, value: Any) -> "Mood":
        """
        Map any accepted boundary representation to a Mood.

        Accepts a Mood, a label (case-insensitive), a legacy alias such as
        "great" or "terrible", or a 1..5 ordinal as int or numeric string.

        Raises:
            ValidationError: missing or unrecognised mood
        """
        if isinstance(value, Mood):
            return value
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError("Mood is required", {"field": "mood"})
        if isinstance(value, bool):
            raise ValidationError(f"Unrecognised mood: {value!r}", {"field": "mood"})
        if isinstance(value, int):
            return cls.from_score(value)
        if isinstance(value, str):
            key = value.strip().lower()
            if key.isdigit():
                return cls.from_score(int(key))
            if key in _ALIASES:
                return _ALIASES[key]
        raise ValidationError(f"Unrecognised mood: {value!r}", {"field": "mood"})


_SCORES = {
    Mood.EXCELLENT: 5,
    Mood.GOOD: 4,
    Mood.NEUTRAL: 3,
    Mood.LOW: 2,
    Mood.STRUGGLING: 1,
}

_LABELS = {
    Mood.EXCELLENT: "Great",
    Mood.GOOD: "Good",
    Mood.NEUTRAL: "Okay",
    Mood.LOW: "Low",
    Mood.STRUGGLING: "Struggling",
}

_ALIASES = {mood.value: mood for mood in Mood}
_ALIASES.update({
    "great": Mood.EXCELLENT,
    "okay": Mood.NEUTRAL,
    "ok": Mood.NEUTRAL,
    "bad": Mood.LOW,
    "terrible": Mood.STRUGGLING,
})


def _text(value: Optional[str]) -> str:
    return value or ""


# =============================================================================
# ENTRIES
# =============================================================================

class Identity(BaseModel):
    """An authenticated caller, as asserted by the identity service."""
    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None


class EntryDraft(BaseModel):
    """A check-in as submitted, before storage assigns id and date."""
    mood: Optional[Mood] = None
    gratitude: Optional[str] = None
    intentions: Optional[str] = None
    thoughts: Optional[str] = None

    @field_validator("mood", mode="before")
    @classmethod
    def _parse_mood(cls, value: Any) -> Optional[Mood]:
        # Missing mood is allowed here so create_entry can reject it with ValidationError
        if value is None:
            return None
        return Mood.parse(value)

    def to_row(self, user_id: str) -> Dict[str, Any]:
        if self.mood is None:
            raise ValidationError("Mood is required", {"field": "mood"})
        return {
            "user_id": user_id,
            "mood": self.mood.value,
            "gratitude": _text(self.gratitude),
            "intentions": _text(self.intentions),
            "thoughts": _text(self.thoughts),
        }


class JournalEntry(BaseModel):
    """A persisted check-in. ``id`` and ``date`` always come from storage."""
    id: str
    user_id: Optional[str] = None
    date: datetime
    mood: Mood
    gratitude: str = ""
    intentions: str = ""
    thoughts: str = ""
    ai_insights: Optional[str] = None

    @field_validator("mood", mode="before")
    @classmethod
    def _parse_mood(cls, value: Any) -> Mood:
        return Mood.parse(value)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "JournalEntry":
        """Build an entry from a ``journal_entries`` row."""
        return cls(
            id=str(row["id"]),
            user_id=row.get("user_id"),
            date=row.get("created_at") or row.get("date"),
            mood=row.get("mood"),
            gratitude=_text(row.get("gratitude")),
            intentions=_text(row.get("intentions")),
            thoughts=_text(row.get("thoughts")),
            ai_insights=row.get("insights") or None,
        )


# =============================================================================
# PATTERNS
# =============================================================================

class Pattern(BaseModel):
    """A recurring theme reported by the external pattern detector."""
    id: str
    pattern: str
    first_detected: datetime
    occurrences: int = Field(ge=1)
    confidence: float = Field(ge=0.0, le=1.0)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Pattern":
        return cls(
            id=str(row["id"]),
            pattern=row["pattern"],
            first_detected=row.get("first_detected") or row.get("created_at"),
            occurrences=row.get("occurrences", 1),
            confidence=row.get("confidence", 0.0),
        )


# =============================================================================
# ANALYTICS VIEWS
# =============================================================================

class DayMood(BaseModel):
    """Average mood for one calendar day; ``average_mood`` is None on days without entries."""
    day: date
    average_mood: Optional[float] = None
    entry_count: int = 0


class MoodShare(BaseModel):
    mood: Mood
    count: int
    percentage: float
    relative: float


class WeeklyReport(BaseModel):
    window_days: int
    total_entries: int
    gratitude_items: int
    intention_items: int
    mood_counts: Dict[Mood, int] = Field(default_factory=dict)
    most_common_mood: Optional[Mood] = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AnalyticsSummary(BaseModel):
    streak: int
    total_entries: int
    trend: List[DayMood]
    distribution: List[MoodShare]

"""
Mood analytics over a set of journal entries.

Every function is pure: it reads the entries it is given, never the store,
and does not depend on their order. Days are local calendar days; aware
datetimes are converted to local time, naive ones are taken as local already.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from mindspace.features.journaling.models import (
    AnalyticsSummary,
    DayMood,
    JournalEntry,
    Mood,
    MoodShare,
    Pattern,
    WeeklyReport,
)

STREAK_LOOKBACK_DAYS = 365
TREND_DAYS = 30
REPORT_WINDOW_DAYS = 30


def local_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in local time."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone().date()


def _today(today: Optional[date]) -> date:
    return today or datetime.now().astimezone().date()


def calculate_streak(entries: Iterable[JournalEntry], today: Optional[date] = None) -> int:
    """
    Consecutive journaling days counted back from today.

    A missing entry today does not end the streak; the first missing day
    before today does. The walk stops after a year.

    {today, today-1, today-2} -> 3; {today-1} -> 1; {today-3} -> 0
    """
    today = _today(today)
    days = {local_day(entry.date) for entry in entries}

    streak = 0
    for offset in range(STREAK_LOOKBACK_DAYS):
        if today - timedelta(days=offset) in days:
            streak += 1
        elif offset > 0:
            break
    return streak


def mood_trend(
    entries: Iterable[JournalEntry],
    today: Optional[date] = None,
    days: int = TREND_DAYS,
) -> List[DayMood]:
    """Average mood score per day for the trailing ``days`` days, oldest first."""
    today = _today(today)
    scores: Dict[date, List[int]] = {}
    for entry in entries:
        scores.setdefault(local_day(entry.date), []).append(entry.mood.score)

    trend = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_scores = scores.get(day, [])
        trend.append(DayMood(
            day=day,
            average_mood=sum(day_scores) / len(day_scores) if day_scores else None,
            entry_count=len(day_scores),
        ))
    return trend


def mood_distribution(entries: Iterable[JournalEntry]) -> List[MoodShare]:
    """
    Entry count per mood, for every mood in canonical order.

    ``percentage`` is the share of all entries (0 for an empty set) and
    ``relative`` the count divided by the largest count, for bar widths.
    """
    counts = {mood: 0 for mood in Mood}
    for entry in entries:
        counts[entry.mood] += 1

    total = sum(counts.values())
    max_count = max(max(counts.values()), 1)

    return [
        MoodShare(
            mood=mood,
            count=count,
            percentage=(count / total * 100) if total else 0.0,
            relative=count / max_count,
        )
        for mood, count in counts.items()
    ]


def count_items(text: Optional[str]) -> int:
    """Number of non-blank lines in a free-text field."""
    if not text:
        return 0
    return sum(1 for line in text.splitlines() if line.strip())


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.astimezone()


def weekly_report(
    entries: Iterable[JournalEntry],
    now: Optional[datetime] = None,
    window_days: int = REPORT_WINDOW_DAYS,
) -> WeeklyReport:
    """
    Summary statistics over the trailing ``window_days`` days.

    The histogram is filled walking entries newest first, and a tie for the
    most common mood goes to the mood met first in that walk.
    """
    now = _aware(now or datetime.now(timezone.utc))
    cutoff = now - timedelta(days=window_days)

    recent = sorted(
        (entry for entry in entries if _aware(entry.date) >= cutoff),
        key=lambda entry: _aware(entry.date),
        reverse=True,
    )

    mood_counts: Dict[Mood, int] = {}
    for entry in recent:
        mood_counts[entry.mood] = mood_counts.get(entry.mood, 0) + 1

    most_common: Optional[Mood] = None
    best = 0
    for mood, count in mood_counts.items():
        if count > best:
            most_common, best = mood, count

    return WeeklyReport(
        window_days=window_days,
        total_entries=len(recent),
        gratitude_items=sum(count_items(entry.gratitude) for entry in recent),
        intention_items=sum(count_items(entry.intentions) for entry in recent),
        mood_counts=mood_counts,
        most_common_mood=most_common,
        generated_at=now,
    )


def summarize(entries: Sequence[JournalEntry], today: Optional[date] = None) -> AnalyticsSummary:
    """Streak, trend and distribution in one view."""
    return AnalyticsSummary(
        streak=calculate_streak(entries, today),
        total_entries=len(entries),
        trend=mood_trend(entries, today),
        distribution=mood_distribution(entries),
    )


def render_report_text(report: WeeklyReport, patterns: Sequence[Pattern] = ()) -> str:
    """Plain-text progress report for download."""
    lines = [
        "MindSpace Progress Report",
        f"Generated: {report.generated_at.strftime('%B %d, %Y')}",
        f"Period: Last {report.window_days} Days",
        "",
        "SUMMARY",
        "-------",
        f"Total Entries: {report.total_entries}",
        f"Gratitudes Recorded: {report.gratitude_items}",
        f"Intentions Set: {report.intention_items}",
        f"Most Common Mood: {report.most_common_mood.value if report.most_common_mood else 'n/a'}",
        "",
        "PATTERNS DETECTED",
        "-----------------",
    ]
    if patterns:
        lines.extend(f"• {p.pattern} ({round(p.confidence * 100)}% confidence)" for p in patterns)
    else:
        lines.append("None yet")

    lines.extend(["", "MOOD DISTRIBUTION", "-----------------"])
    lines.extend(f"{mood.value}: {count} entries" for mood, count in report.mood_counts.items())
    return "\n".join(lines)

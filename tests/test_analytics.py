"""Tests for streak, trend, distribution and the progress report."""

from datetime import date, datetime, timedelta, timezone

import pytest

from mindspace.features.journaling import analytics
from mindspace.features.journaling.models import Mood, Pattern

from tests.fakes import make_entry

TODAY = date(2026, 10, 18)


def _on(day_offset: int, mood: Mood = Mood.GOOD, hour: int = 12, **fields):
    # naive datetimes are local time, so day boundaries are exact
    moment = datetime.combine(TODAY - timedelta(days=day_offset), datetime.min.time()).replace(hour=hour)
    return make_entry(f"d{day_offset}-{hour}", moment, mood, **fields)


class TestStreak:

    @pytest.mark.parametrize("offsets, expected", [
        ([0, 1, 2], 3),
        ([1], 1),
        ([1, 2, 3], 3),
        ([3], 0),
        ([0, 2], 1),
        ([], 0),
    ])
    def test_streak(self, offsets, expected):
        entries = [_on(offset) for offset in offsets]
        assert analytics.calculate_streak(entries, today=TODAY) == expected

    def test_several_entries_on_one_day_count_once(self):
        entries = [_on(0, hour=8), _on(0, hour=21), _on(1)]
        assert analytics.calculate_streak(entries, today=TODAY) == 2

    def test_walk_stops_after_a_year(self):
        entries = [_on(offset) for offset in range(400)]
        assert analytics.calculate_streak(entries, today=TODAY) == 365

    def test_order_does_not_matter(self):
        entries = [_on(2), _on(0), _on(1)]
        assert analytics.calculate_streak(entries, today=TODAY) == 3


class TestMoodTrend:

    def test_thirty_days_oldest_first(self):
        trend = analytics.mood_trend([], today=TODAY)

        assert len(trend) == 30
        assert trend[0].day == TODAY - timedelta(days=29)
        assert trend[-1].day == TODAY
        assert all(point.average_mood is None for point in trend)

    def test_average_per_day(self):
        entries = [
            _on(0, Mood.EXCELLENT, hour=8),
            _on(0, Mood.LOW, hour=20),
            _on(3, Mood.STRUGGLING),
        ]

        trend = analytics.mood_trend(entries, today=TODAY)

        assert trend[-1].average_mood == pytest.approx(3.5)
        assert trend[-1].entry_count == 2
        assert trend[-4].average_mood == 1
        assert trend[-2].average_mood is None


class TestMoodDistribution:

    def test_every_mood_present_in_canonical_order(self):
        shares = analytics.mood_distribution([])

        assert [share.mood for share in shares] == list(Mood)
        assert all(share.count == 0 and share.percentage == 0 for share in shares)

    def test_percentages_and_relative_widths(self):
        entries = [_on(0, Mood.GOOD), _on(1, Mood.GOOD), _on(2, Mood.LOW), _on(3, Mood.GOOD)]

        shares = {share.mood: share for share in analytics.mood_distribution(entries)}

        assert shares[Mood.GOOD].count == 3
        assert shares[Mood.GOOD].percentage == pytest.approx(75.0)
        assert shares[Mood.GOOD].relative == 1.0
        assert shares[Mood.LOW].relative == pytest.approx(1 / 3)
        assert shares[Mood.EXCELLENT].count == 0


class TestWeeklyReport:

    NOW = datetime(2026, 10, 18, 18, tzinfo=timezone.utc)

    def _entry(self, days: float, mood: Mood, **fields):
        return make_entry(f"r{days}", self.NOW - timedelta(days=days), mood, **fields)

    def test_counts_inside_window_only(self):
        entries = [
            self._entry(1, Mood.GOOD, gratitude="family\nfriends", intentions="walk"),
            self._entry(5, Mood.LOW, gratitude="coffee", intentions="sleep\n\nread"),
            self._entry(40, Mood.EXCELLENT, gratitude="old"),
        ]

        report = analytics.weekly_report(entries, now=self.NOW)

        assert report.window_days == 30
        assert report.total_entries == 2
        assert report.gratitude_items == 3
        assert report.intention_items == 3
        assert Mood.EXCELLENT not in report.mood_counts

    def test_tie_goes_to_the_newest_mood(self):
        entries = [
            self._entry(3, Mood.LOW),
            self._entry(1, Mood.GOOD),
            self._entry(4, Mood.LOW),
            self._entry(2, Mood.GOOD),
        ]

        report = analytics.weekly_report(entries, now=self.NOW)

        assert report.mood_counts == {Mood.GOOD: 2, Mood.LOW: 2}
        assert report.most_common_mood == Mood.GOOD

    def test_empty_report(self):
        report = analytics.weekly_report([], now=self.NOW)

        assert report.total_entries == 0
        assert report.most_common_mood is None

    def test_render_text(self):
        report = analytics.weekly_report(
            [self._entry(1, Mood.GOOD, gratitude="family")], now=self.NOW
        )
        pattern = Pattern(
            id="p1",
            pattern="Better mood after exercise",
            first_detected=self.NOW,
            occurrences=4,
            confidence=0.82,
        )

        text = analytics.render_report_text(report, [pattern])

        assert "Period: Last 30 Days" in text
        assert "Total Entries: 1" in text
        assert "Most Common Mood: good" in text
        assert "• Better mood after exercise (82% confidence)" in text
        assert "good: 1 entries" in text

    def test_render_text_without_patterns(self):
        text = analytics.render_report_text(analytics.weekly_report([], now=self.NOW))

        assert "None yet" in text
        assert "Most Common Mood: n/a" in text


def test_summarize_combines_views():
    entries = [_on(0), _on(1, Mood.NEUTRAL)]

    summary = analytics.summarize(entries, today=TODAY)

    assert summary.streak == 2
    assert summary.total_entries == 2
    assert len(summary.trend) == 30
    assert len(summary.distribution) == 5

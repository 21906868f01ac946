from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .models import Activity, JournalEntry, Mood, MoodEntry

DEFAULT_ANALYTICS_DAYS = 30
TOP_TAGS = 5

KeyT = TypeVar("KeyT")


def days_between(start: datetime, end: datetime) -> int:
    return (end - start).days


def _entries_per_day(total: int, start: datetime, end: datetime) -> float:
    return total / float(max(1, days_between(start, end)))


def _increment(histogram: Dict[KeyT, int], key: KeyT) -> None:
    histogram[key] = histogram.get(key, 0) + 1


def most_frequent(histogram: Dict[KeyT, int]) -> Optional[Tuple[KeyT, int]]:
    """Entry with the highest count; the first one encountered wins ties."""
    best: Optional[Tuple[KeyT, int]] = None
    for key, count in histogram.items():
        if best is None or count > best[1]:
            best = (key, count)
    return best


def _in_window(entries: Iterable, start: datetime, end: datetime) -> List:
    return [entry for entry in entries if start <= entry.timestamp <= end]


@dataclass
class MoodAnalytics:
    mood_frequency: Dict[Mood, int]
    activity_frequency: Dict[Activity, int]
    average_intensity: float
    total_entries: int
    start_date: datetime
    end_date: datetime

    @property
    def most_frequent_mood(self) -> Optional[Tuple[Mood, int]]:
        return most_frequent(self.mood_frequency)

    @property
    def most_frequent_activity(self) -> Optional[Tuple[Activity, int]]:
        return most_frequent(self.activity_frequency)

    @property
    def entries_per_day(self) -> float:
        return _entries_per_day(self.total_entries, self.start_date, self.end_date)


@dataclass
class JournalAnalytics:
    total_entries: int
    mood_improvement_rate: float
    average_mood_change: float
    common_tags: Dict[str, int]
    start_date: datetime
    end_date: datetime
    rated_entries: int = 0

    @property
    def most_common_tags(self) -> List[Tuple[str, int]]:
        # sorted() is stable, so equal counts keep insertion order.
        ranked = sorted(self.common_tags.items(), key=lambda item: -item[1])
        return ranked[:TOP_TAGS]

    @property
    def entries_per_day(self) -> float:
        return _entries_per_day(self.total_entries, self.start_date, self.end_date)


def compute_mood_analytics(
    entries: Sequence[MoodEntry],
    start: datetime,
    end: datetime,
) -> MoodAnalytics:
    window = _in_window(entries, start, end)
    mood_counts: Dict[Mood, int] = {}
    activity_counts: Dict[Activity, int] = {}
    intensity_total = 0

    for entry in window:
        _increment(mood_counts, entry.mood)
        for activity in entry.activities:
            _increment(activity_counts, activity)
        intensity_total += entry.intensity

    average_intensity = intensity_total / float(len(window)) if window else 0.0
    return MoodAnalytics(
        mood_frequency=mood_counts,
        activity_frequency=activity_counts,
        average_intensity=average_intensity,
        total_entries=len(window),
        start_date=start,
        end_date=end,
    )


def compute_journal_analytics(
    entries: Sequence[JournalEntry],
    start: datetime,
    end: datetime,
) -> JournalAnalytics:
    """Journal snapshot for ``[start, end]``.

    The improvement rate divides by every entry in the window, rated or not.
    The average mood change only covers entries with both ratings.
    """
    window = _in_window(entries, start, end)
    improved = 0
    rated = 0
    total_change = 0
    tag_counts: Dict[str, int] = {}

    for entry in window:
        change = entry.mood_change
        if change is not None:
            rated += 1
            total_change += change
            if change > 0:
                improved += 1
        for tag in entry.tags:
            _increment(tag_counts, tag)

    return JournalAnalytics(
        total_entries=len(window),
        mood_improvement_rate=improved / float(len(window)) if window else 0.0,
        average_mood_change=total_change / float(rated) if rated else 0.0,
        common_tags=tag_counts,
        start_date=start,
        end_date=end,
        rated_entries=rated,
    )

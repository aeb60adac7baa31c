import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from .core.models import HistoryEntry, LearningHistory, LearningStatistics
from .lib import clock
from .lib.dates import next_week, parse_date_key, previous_week, week_month
from .topics import count_blog_posts

__all__ = [
    "DayPoint",
    "RatePoint",
    "Streaks",
    "Summary",
    "build_learning_statistics",
    "calculate_streaks",
    "completion_rate",
    "history_window",
    "rate_series",
    "render_summary",
    "summarize",
    "trend_series",
]

SERIES_DAYS = 30


@dataclass(frozen=True)
class Summary:
    total: int
    completed: int
    rate: int

    @property
    def pending(self) -> int:
        return self.total - self.completed


@dataclass(frozen=True)
class DayPoint:
    day: int
    date: str
    completed: int
    incomplete: int


@dataclass(frozen=True)
class RatePoint:
    day: int
    date: str
    rate: int


@dataclass(frozen=True)
class Streaks:
    current: int
    longest: int


def completion_rate(completed: int, total: int) -> int:
    """Whole percent, halves rounded up; 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    return math.floor(completed * 100 / total + 0.5)


def _entry_day(entry: HistoryEntry) -> date:
    return parse_date_key(entry.date) or date.min


def _newest_first(entries: Iterable[HistoryEntry]) -> list[HistoryEntry]:
    return sorted(entries, key=_entry_day, reverse=True)


def history_window(
    entries: Iterable[HistoryEntry], days: int | None = None, today: date | None = None
) -> list[HistoryEntry]:
    """Entries from the last `days` calendar days (today included), newest first."""
    ordered = _newest_first(entries)
    if days is None:
        return ordered
    today = today or clock.today()
    cutoff = today - timedelta(days=days - 1)
    return [e for e in ordered if _entry_day(e) >= cutoff]


def summarize(entries: Iterable[HistoryEntry]) -> Summary:
    total = completed = 0
    for entry in entries:
        total += entry.total
        completed += entry.completed
    return Summary(total=total, completed=completed, rate=completion_rate(completed, total))


def _series_entries(entries: Iterable[HistoryEntry], limit: int) -> list[HistoryEntry]:
    return list(reversed(_newest_first(entries)[:limit]))


def trend_series(entries: Iterable[HistoryEntry], limit: int = SERIES_DAYS) -> list[DayPoint]:
    """Per-day completed/incomplete counts for the most recent `limit` days, oldest first."""
    return [
        DayPoint(day=i, date=e.date, completed=e.completed, incomplete=e.total - e.completed)
        for i, e in enumerate(_series_entries(entries, limit), start=1)
    ]


def rate_series(entries: Iterable[HistoryEntry], limit: int = SERIES_DAYS) -> list[RatePoint]:
    return [
        RatePoint(day=i, date=e.date, rate=completion_rate(e.completed, e.total))
        for i, e in enumerate(_series_entries(entries, limit), start=1)
    ]


def _perfect(entry: HistoryEntry) -> bool:
    return entry.total > 0 and entry.completed == entry.total


def calculate_streaks(entries: Iterable[HistoryEntry]) -> Streaks:
    """
    Runs of days with every root task done, walking from the newest entry.

    An entry with no tasks has rate 0 and breaks a run. `current` is the run
    that includes the newest entry.
    """
    ordered = _newest_first(entries)
    current = 0
    for entry in ordered:
        if not _perfect(entry):
            break
        current += 1

    longest = run = 0
    for entry in ordered:
        run = run + 1 if _perfect(entry) else 0
        longest = max(longest, run)
    return Streaks(current=current, longest=longest)


def render_summary(summary: Summary, streaks: Streaks) -> list[str]:
    return [
        "STATS:",
        f"  done:     {summary.completed}/{summary.total} ({summary.rate}%)",
        f"  pending:  {summary.pending}",
        f"  streak:   {streaks.current}d (best {streaks.longest}d)",
    ]


# ── learning ─────────────────────────────────────────────────────────────────


def _week_streaks(active_weeks: set[str], newest_week: str | None) -> Streaks:
    longest = 0
    for week in active_weeks:
        if previous_week(week) in active_weeks:
            continue
        length = 0
        cursor = week
        while cursor in active_weeks:
            length += 1
            cursor = next_week(cursor)
        longest = max(longest, length)

    current = 0
    cursor = newest_week
    while cursor is not None and cursor in active_weeks:
        current += 1
        cursor = previous_week(cursor)
    return Streaks(current=current, longest=longest)


def build_learning_statistics(history: LearningHistory) -> LearningStatistics:
    """Aggregate archived weeks; week streaks count consecutive ISO weeks with topics."""
    by_week: dict[str, dict[str, int]] = {}
    by_month: dict[str, dict[str, int]] = {}
    total_topics = total_posts = 0

    for week_id in sorted(history):
        entry = history[week_id]
        posts = count_blog_posts(entry.topics)
        by_week[week_id] = {"total": entry.total, "blogPosts": posts}
        month = by_month.setdefault(week_month(week_id), {"total": 0, "blogPosts": 0})
        month["total"] += entry.total
        month["blogPosts"] += posts
        total_topics += entry.total
        total_posts += posts

    active = {week_id for week_id, entry in history.items() if entry.total > 0}
    newest = max(history) if history else None
    streaks = _week_streaks(active, newest)

    return LearningStatistics(
        total_topics=total_topics,
        total_blog_posts=total_posts,
        total_weeks=len(history),
        current_week_streak=streaks.current,
        longest_week_streak=streaks.longest,
        topics_by_month=by_month,
        topics_by_week=by_week,
    )

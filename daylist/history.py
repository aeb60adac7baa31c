import copy
import dataclasses
from datetime import date

from .core.models import (
    HistoryEntry,
    LearningHistory,
    LearningTopic,
    Task,
    TaskHistory,
    WeeklyLearningEntry,
)
from .lib.dates import parse_date_key, week_bounds
from .store import Store
from .tasks import count_root
from .topics import count_topics

__all__ = [
    "add_history_entry",
    "add_week_entry",
    "history_entries",
    "recent_weeks",
    "update_week_entry",
    "weeks_in_range",
    "weeks_with_activity",
]


# ── daily ────────────────────────────────────────────────────────────────────


def add_history_entry(store: Store, day: str, tasks: list[Task]) -> HistoryEntry:
    """
    Archive a day's list under its date key, replacing any entry for that day.

    Root-level counts are frozen into the entry. History is re-read from the
    store right before the merge so a stale in-memory copy can't drop entries.
    """
    counts = count_root(tasks)
    entry = HistoryEntry(
        date=day,
        tasks=copy.deepcopy(tasks),
        completed=counts.completed,
        total=counts.total,
    )
    history = store.get_task_history()
    history[day] = entry
    store.set_task_history(history)
    return entry


def _entry_day(entry: HistoryEntry) -> date:
    return parse_date_key(entry.date) or date.min


def history_entries(history: TaskHistory, limit: int | None = None) -> list[HistoryEntry]:
    """Entries newest first."""
    entries = sorted(history.values(), key=_entry_day, reverse=True)
    return entries[:limit] if limit is not None else entries


# ── weekly ───────────────────────────────────────────────────────────────────


def add_week_entry(store: Store, week_id: str, topics: list[LearningTopic]) -> WeeklyLearningEntry:
    start, end = week_bounds(week_id)
    entry = WeeklyLearningEntry(
        week_id=week_id,
        week_start=start,
        week_end=end,
        topics=copy.deepcopy(topics),
        total=count_topics(topics),
    )
    history = store.get_learning_history()
    history[week_id] = entry
    store.set_learning_history(history)
    return entry


def update_week_entry(
    store: Store, week_id: str, topics: list[LearningTopic]
) -> WeeklyLearningEntry | None:
    """Replace an archived week's topics (total follows). Unknown weeks are ignored."""
    history = store.get_learning_history()
    existing = history.get(week_id)
    if existing is None:
        return None
    entry = dataclasses.replace(existing, topics=copy.deepcopy(topics), total=count_topics(topics))
    history[week_id] = entry
    store.set_learning_history(history)
    return entry


def recent_weeks(history: LearningHistory, limit: int | None = 10) -> list[WeeklyLearningEntry]:
    entries = sorted(history.values(), key=lambda e: e.week_id, reverse=True)
    return entries[:limit] if limit is not None else entries


def weeks_in_range(
    history: LearningHistory, start_week: str, end_week: str
) -> list[WeeklyLearningEntry]:
    return [e for e in recent_weeks(history, limit=None) if start_week <= e.week_id <= end_week]


def weeks_with_activity(history: LearningHistory) -> int:
    return sum(1 for e in history.values() if e.topics)

"""
Day and week boundaries for the live lists.

Each check compares the persisted marker (`lastDate` / `lastWeekId`) with the
clock. When they differ the period that just ended is archived, the live list
is prepared for the new period, and the marker is written last. Once the marker
moves, further checks in the same period do nothing.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Protocol

from . import config
from .history import add_history_entry, add_week_entry
from .lib import clock
from .lib.dates import date_key, is_new_day, is_new_week, is_valid_week_id, week_id_from_date
from .stats import build_learning_statistics
from .store import LAST_DATE, LAST_WEEK_ID, Store
from .tasks import filter_incomplete

__all__ = [
    "DayRollover",
    "Reminder",
    "RolloverScheduler",
    "RolloverState",
    "WeekRollover",
]

logger = logging.getLogger(__name__)


class RolloverState(Enum):
    STABLE = "stable"
    TRANSITION_PENDING = "transition_pending"


class DayRollover:
    """Archives the Today list when the calendar date changes. Must-Do is never touched."""

    def __init__(self, store: Store):
        self.store = store
        self.state = RolloverState.STABLE

    def evaluate(self, now: datetime | None = None) -> RolloverState:
        today = (now or clock.now()).date()
        if self.store.get(LAST_DATE) is None:
            # first run: start tracking from today, nothing to archive yet
            self.store.set_last_date(date_key(today))
            logger.info("day marker initialised to %s", date_key(today))
            self.state = RolloverState.STABLE
            return self.state
        due = is_new_day(self.store.get_last_date(), today)
        self.state = RolloverState.TRANSITION_PENDING if due else RolloverState.STABLE
        return self.state

    def check(self, now: datetime | None = None) -> bool:
        now = now or clock.now()
        if self.evaluate(now) is RolloverState.STABLE:
            return False

        today = date_key(now)
        last_date = self.store.get_last_date()
        tasks = self.store.get_today_tasks()
        if tasks:
            entry = add_history_entry(self.store, last_date, tasks)
            logger.info("archived %s: %d/%d done", last_date, entry.completed, entry.total)

        settings = self.store.get_settings()
        carried = filter_incomplete(tasks) if settings.auto_carry_over else []
        self.store.set_today_tasks(carried)
        self.store.set_last_date(today)
        logger.info("day rollover %s -> %s, carried %d task(s)", last_date, today, len(carried))

        self.state = RolloverState.STABLE
        return True


class WeekRollover:
    """Archives the current-week topics when the ISO week changes. The live list is kept."""

    def __init__(self, store: Store):
        self.store = store
        self.state = RolloverState.STABLE

    def evaluate(self, now: datetime | None = None) -> RolloverState:
        today = (now or clock.now()).date()
        if self.store.get(LAST_WEEK_ID) is None:
            self.store.set_last_week_id(week_id_from_date(today))
            logger.info("week marker initialised to %s", week_id_from_date(today))
            self.state = RolloverState.STABLE
            return self.state
        due = is_new_week(self.store.get_last_week_id(), today)
        self.state = RolloverState.TRANSITION_PENDING if due else RolloverState.STABLE
        return self.state

    def check(self, now: datetime | None = None) -> bool:
        now = now or clock.now()
        if self.evaluate(now) is RolloverState.STABLE:
            return False

        week_id = week_id_from_date(now)
        last_week_id = self.store.get_last_week_id()
        settings = self.store.get_learning_settings()
        topics = self.store.get_current_week_topics()
        if not is_valid_week_id(last_week_id):
            logger.warning("unreadable week marker %r, skipping archive", last_week_id)
        elif settings.auto_create_new_week and topics:
            entry = add_week_entry(self.store, last_week_id, topics)
            logger.info("archived %s: %d topic(s)", last_week_id, entry.total)
            history = self.store.get_learning_history()
            self.store.set_learning_statistics(build_learning_statistics(history))

        self.store.set_last_week_id(week_id)
        logger.info("week rollover %s -> %s", last_week_id, week_id)

        self.state = RolloverState.STABLE
        return True


# ── polling ──────────────────────────────────────────────────────────────────


class Reminder(Protocol):
    def check(self) -> object: ...

    def interval_seconds(self) -> float: ...


class RolloverScheduler:
    """
    Polls the day and week checks on daemon threads until stopped.

    A check that raises is logged and polled again on the next tick. An optional
    reminder (anything with `check()` and `interval_seconds()`) gets its own loop
    and first fires one interval after start.
    """

    def __init__(
        self,
        store: Store,
        reminder: Reminder | None = None,
        day_interval: float | None = None,
        week_interval: float | None = None,
    ):
        self.day = DayRollover(store)
        self.week = WeekRollover(store)
        self.reminder = reminder
        self.day_interval = day_interval or config.get_day_check_interval()
        self.week_interval = week_interval or config.get_week_check_interval()
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def _loop(
        self,
        name: str,
        check: Callable[[], object],
        interval: Callable[[], float],
        wait_first: bool,
    ) -> None:
        logger.info("[%s] started", name)
        if wait_first:
            self._stop.wait(interval())
        while not self._stop.is_set():
            try:
                check()
            except Exception:
                logger.exception("[%s] check failed", name)
            self._stop.wait(interval())
        logger.info("[%s] stopped", name)

    def _spawn(
        self,
        name: str,
        check: Callable[[], object],
        interval: Callable[[], float],
        wait_first: bool = False,
    ) -> None:
        thread = threading.Thread(
            target=self._loop, args=(name, check, interval, wait_first), daemon=True, name=name
        )
        self._threads.append(thread)
        thread.start()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._threads = []
        self._spawn("day", self.day.check, lambda: self.day_interval)
        self._spawn("week", self.week.check, lambda: self.week_interval)
        if self.reminder is not None:
            self._spawn(
                "reminder", self.reminder.check, self.reminder.interval_seconds, wait_first=True
            )

    def stop(self, timeout: float = 5) -> None:
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads = []

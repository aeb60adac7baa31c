import logging
from datetime import date
from pathlib import Path

from .export import ExportOptions, generate_markdown_export, write_export
from .lib import clock
from .lib.log import setup_logging
from .reminders import MustDoReminder, Notifier
from .rollover import RolloverScheduler
from .stats import Streaks, Summary, calculate_streaks, history_window, summarize
from .store import MUST_DO_TASKS, TODAY_TASKS, Store
from .tasks import TaskList
from .topics import TopicList

__all__ = ["App"]

logger = logging.getLogger(__name__)


class App:
    """
    One open store plus the live lists and the rollover poller.

    Rollover checks run once on open so the lists are current before anything
    reads them.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        notifier: Notifier | None = None,
        permission_granted: bool = False,
        log_path: Path | None = None,
    ):
        setup_logging(log_path)
        self.store = Store(db_path).open()
        reminder = (
            MustDoReminder(self.store, notifier, permission_granted) if notifier is not None else None
        )
        self.scheduler = RolloverScheduler(self.store, reminder=reminder)
        self.scheduler.day.check()
        self.scheduler.week.check()
        self.today = TaskList(self.store, TODAY_TASKS)
        self.must_do = TaskList(self.store, MUST_DO_TASKS)
        self.topics = TopicList(self.store)
        logger.info("opened %s", self.store.db_path)

    def __enter__(self) -> "App":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def start(self) -> None:
        self.scheduler.start()

    def close(self) -> None:
        self.scheduler.stop()
        self.store.close()

    def reload(self) -> None:
        """Re-read live lists after a rollover or import."""
        self.today.reload()
        self.must_do.reload()
        self.topics.reload()

    def stats(self, days: int | None = 7, today: date | None = None) -> tuple[Summary, Streaks]:
        history = self.store.get_task_history().values()
        window = history_window(history, days, today)
        return summarize(window), calculate_streaks(history)

    def export(
        self,
        options: ExportOptions | None = None,
        directory: Path | None = None,
        today: date | None = None,
    ) -> Path:
        today = today or clock.today()
        content = generate_markdown_export(
            self.store.get_task_history(), self.today.reload(), options, today
        )
        return write_export(content, directory, today)

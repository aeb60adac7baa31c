import logging
from typing import Protocol

from .core.models import Task
from .store import Store

__all__ = ["MustDoReminder", "Notifier", "interval_ms", "reminder_message"]

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Must-Do Tasks Reminder"


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None: ...


def interval_ms(hours: int) -> int:
    return hours * 60 * 60 * 1000


def reminder_message(tasks: list[Task]) -> tuple[str, str] | None:
    """Title and body for the incomplete root tasks, or None when there are none."""
    pending = sum(1 for t in tasks if not t.completed)
    if pending == 0:
        return None
    plural = "s" if pending > 1 else ""
    return REMINDER_TITLE, f"You have {pending} incomplete Must-Do task{plural}!"


class MustDoReminder:
    def __init__(self, store: Store, notifier: Notifier, permission_granted: bool = False):
        self.store = store
        self.notifier = notifier
        self.permission_granted = permission_granted

    def interval_seconds(self) -> float:
        return interval_ms(self.store.get_settings().notify_interval) / 1000

    def check(self) -> bool:
        if not self.permission_granted:
            return False
        message = reminder_message(self.store.get_must_do_tasks())
        if message is None:
            return False
        title, body = message
        try:
            self.notifier.notify(title, body)
        except Exception:
            logger.exception("reminder delivery failed")
            return False
        return True

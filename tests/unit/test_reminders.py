from daylist.reminders import MustDoReminder, interval_ms, reminder_message
from tests.conftest import make_task


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.sent: list[tuple[str, str]] = []
        self.fail = fail

    def notify(self, title: str, body: str) -> None:
        if self.fail:
            raise RuntimeError("notification daemon unavailable")
        self.sent.append((title, body))


def test_interval_ms():
    assert interval_ms(1) == 3_600_000
    assert interval_ms(3) == 10_800_000


def test_reminder_message_counts_incomplete_roots():
    tasks = [make_task(1), make_task(2, completed=True), make_task(3, subtasks=[make_task(4)])]
    assert reminder_message(tasks) == (
        "Must-Do Tasks Reminder",
        "You have 2 incomplete Must-Do tasks!",
    )
    assert reminder_message([make_task(1)])[1] == "You have 1 incomplete Must-Do task!"
    assert reminder_message([make_task(1, completed=True)]) is None


def test_reminder_requires_permission(store):
    store.set_must_do_tasks([make_task(1)])
    notifier = RecordingNotifier()
    assert MustDoReminder(store, notifier, permission_granted=False).check() is False
    assert notifier.sent == []

    assert MustDoReminder(store, notifier, permission_granted=True).check() is True
    assert len(notifier.sent) == 1


def test_reminder_skips_when_nothing_pending(store):
    notifier = RecordingNotifier()
    assert MustDoReminder(store, notifier, permission_granted=True).check() is False
    assert notifier.sent == []


def test_delivery_failure_is_swallowed(store):
    store.set_must_do_tasks([make_task(1)])
    reminder = MustDoReminder(store, RecordingNotifier(fail=True), permission_granted=True)
    assert reminder.check() is False


def test_interval_follows_settings(store):
    assert MustDoReminder(store, RecordingNotifier()).interval_seconds() == 3 * 3600

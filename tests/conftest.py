from datetime import datetime, timedelta, timezone

import pytest

from daylist import config
from daylist.core.models import Task
from daylist.lib import clock
from daylist.store import Store

UTC = timezone.utc


@pytest.fixture
def tmp_daylist_dir(tmp_path, monkeypatch):
    root = tmp_path / ".daylist"
    monkeypatch.setattr(config, "DAYLIST_DIR", root)
    monkeypatch.setattr(config, "DB_PATH", root / "store.db")
    monkeypatch.setattr(config, "CONFIG_PATH", root / "config.yaml")
    monkeypatch.setattr(config, "BACKUP_DIR", root / "backups")
    monkeypatch.setattr(config, "LOG_PATH", root / "daylist.log")
    config._config.reload()
    return root


@pytest.fixture
def store(tmp_daylist_dir):
    with Store() as s:
        yield s


class FrozenClock:
    def __init__(self, monkeypatch, start: datetime):
        self.current = start
        monkeypatch.setattr(clock, "now", lambda: self.current)

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def frozen_clock(monkeypatch):
    return FrozenClock(monkeypatch, datetime(2024, 1, 2, 9, 0, tzinfo=UTC))


def make_task(
    task_id: float,
    text: str = "",
    completed: bool = False,
    subtasks: list[Task] | None = None,
    created_at: str = "2024-01-01T10:00:00.000Z",
    finished_at: str | None = None,
    expanded: bool = False,
) -> Task:
    return Task(
        id=task_id,
        text=text or f"task {int(task_id)}",
        completed=completed,
        subtasks=subtasks or [],
        expanded=expanded,
        created_at=created_at,
        finished_at=finished_at,
    )

import logging
from datetime import date

import pytest

from daylist.app import App
from daylist.core.models import HistoryEntry
from daylist.export import ExportOptions
from daylist.lib.log import LOGGER_NAME
from tests.conftest import make_task


@pytest.fixture
def app(tmp_daylist_dir, frozen_clock):
    instance = App()
    yield instance
    instance.close()
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_app_opens_lists(app, tmp_daylist_dir):
    app.today.add("morning run")
    app.must_do.add("pay rent")
    app.topics.add("ISO weeks")
    assert app.store.get_today_tasks()[0].text == "morning run"
    assert app.store.get_must_do_tasks()[0].text == "pay rent"
    assert (tmp_daylist_dir / "daylist.log").exists()


def test_app_runs_rollover_on_open(tmp_daylist_dir, frozen_clock):
    with App() as first:
        first.store.set_last_date("2024-01-01")
        first.today.add("yesterday's work")

    with App() as second:
        assert "2024-01-01" in second.store.get_task_history()
        assert second.store.get_last_date() == "2024-01-02"
        assert [t.text for t in second.today.tasks] == ["yesterday's work"]

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_app_stats(app):
    app.store.set_task_history(
        {
            "2024-01-01": HistoryEntry(date="2024-01-01", completed=2, total=2),
            "2023-12-01": HistoryEntry(date="2023-12-01", completed=0, total=3),
        }
    )
    summary, streaks = app.stats(days=7, today=date(2024, 1, 2))
    assert (summary.total, summary.completed, summary.rate) == (2, 2, 100)
    assert streaks.current == 1


def test_app_export_writes_file(app, tmp_path):
    app.today.replace([make_task(1, "write docs", created_at="2024-01-02T08:00:00Z")])
    path = app.export(ExportOptions(date_range="all"), directory=tmp_path)
    assert path.name == "todo-history-2024-01-02.md"
    assert "- write docs" in path.read_text(encoding="utf-8")


def test_scheduler_start_stop(app):
    app.start()
    assert app.scheduler.running
    app.close()
    assert not app.scheduler.running

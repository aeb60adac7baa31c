"""Key-value persistence gateway over the sqlite store.

Values are JSON documents addressed by the keys below. Single-key reads and
writes never raise: a failed read falls back to the caller's default and a
failed write is logged and lost. The batch writers replace several keys in one
transaction and raise StorageError so an import can report the failure.
"""

import json
import logging
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from . import config, db
from .core.errors import StorageError
from .core.models import (
    LearningHistory,
    LearningSettings,
    LearningStatistics,
    LearningTopic,
    Settings,
    Task,
    TaskHistory,
)
from .lib import converters
from .lib.dates import current_week_id, date_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

TODAY_TASKS = "todayTasks"
MUST_DO_TASKS = "mustDoTasks"
TASK_HISTORY = "taskHistory"
LAST_DATE = "lastDate"
SETTINGS = "settings"

CURRENT_WEEK_TOPICS = "currentWeekTopics"
LEARNING_HISTORY = "learningHistory"
LAST_WEEK_ID = "lastWeekId"
LEARNING_SETTINGS = "learningSettings"
LEARNING_STATISTICS = "learningStatistics"

_UPSERT = (
    "INSERT INTO store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at"
)


class Store:
    """Explicitly opened handle on one store database. Open once, pass it around."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path if db_path else config.DB_PATH
        self._opened = False

    def open(self) -> "Store":
        if not self._opened:
            db.init(self.db_path)
            self._opened = True
        return self

    def close(self) -> None:
        self._opened = False

    @property
    def is_open(self) -> bool:
        return self._opened

    def __enter__(self) -> "Store":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def _require_open(self) -> None:
        if not self._opened:
            raise StorageError(f"store at {self.db_path} is not open")

    # ----- generic -----
    def get(self, key: str, default: Any = None) -> Any:
        self._require_open()
        try:
            with db.get_db(self.db_path) as conn:
                row = conn.execute("SELECT value FROM store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error:
            logger.exception("Error reading %s from storage", key)
            return default
        if row is None:
            return default
        try:
            value = json.loads(row[0])
        except json.JSONDecodeError:
            logger.error("Error reading %s from storage: stored value is not JSON", key)
            return default
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        self._require_open()
        try:
            payload = json.dumps(value, ensure_ascii=False)
            with db.get_db(self.db_path) as conn:
                conn.execute(_UPSERT, (key, payload))
        except (sqlite3.Error, TypeError, ValueError):
            logger.exception("Error writing %s to storage", key)

    def _set_many(self, values: dict[str, Any], label: str) -> None:
        self._require_open()
        try:
            rows = [(key, json.dumps(value, ensure_ascii=False)) for key, value in values.items()]
            with db.get_db(self.db_path) as conn:
                conn.executemany(_UPSERT, rows)
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.exception("Error writing all %s to storage", label)
            raise StorageError(f"Failed to write {label}: {e}") from e

    def _load(self, key: str, default: T, convert: Callable[[Any], T]) -> T:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return convert(raw)
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.exception("Error decoding %s from storage", key)
            return default

    # ----- tasks -----
    def get_tasks(self, key: str) -> list[Task]:
        return self._load(key, [], converters.tasks_from_list)

    def set_tasks(self, key: str, tasks: list[Task]) -> None:
        self.set(key, converters.tasks_to_list(tasks))

    def get_today_tasks(self) -> list[Task]:
        return self.get_tasks(TODAY_TASKS)

    def set_today_tasks(self, tasks: list[Task]) -> None:
        self.set_tasks(TODAY_TASKS, tasks)

    def get_must_do_tasks(self) -> list[Task]:
        return self.get_tasks(MUST_DO_TASKS)

    def set_must_do_tasks(self, tasks: list[Task]) -> None:
        self.set_tasks(MUST_DO_TASKS, tasks)

    def get_task_history(self) -> TaskHistory:
        return self._load(TASK_HISTORY, {}, converters.history_from_dict)

    def set_task_history(self, history: TaskHistory) -> None:
        self.set(TASK_HISTORY, converters.history_to_dict(history))

    def get_last_date(self) -> str:
        value = self.get(LAST_DATE)
        return value if isinstance(value, str) else date_key()

    def set_last_date(self, value: str) -> None:
        self.set(LAST_DATE, value)

    def get_settings(self) -> Settings:
        return self._load(SETTINGS, Settings(), converters.settings_from_dict)

    def set_settings(self, settings: Settings) -> None:
        self.set(SETTINGS, converters.settings_to_dict(settings))

    def set_all(
        self,
        *,
        today_tasks: list[Task],
        must_do_tasks: list[Task],
        task_history: TaskHistory,
        last_date: str,
        settings: Settings,
    ) -> None:
        self._set_many(
            {
                TODAY_TASKS: converters.tasks_to_list(today_tasks),
                MUST_DO_TASKS: converters.tasks_to_list(must_do_tasks),
                TASK_HISTORY: converters.history_to_dict(task_history),
                LAST_DATE: last_date,
                SETTINGS: converters.settings_to_dict(settings),
            },
            "data",
        )

    # ----- learning -----
    def get_current_week_topics(self) -> list[LearningTopic]:
        return self._load(CURRENT_WEEK_TOPICS, [], converters.topics_from_list)

    def set_current_week_topics(self, topics: list[LearningTopic]) -> None:
        self.set(CURRENT_WEEK_TOPICS, converters.topics_to_list(topics))

    def get_learning_history(self) -> LearningHistory:
        return self._load(LEARNING_HISTORY, {}, converters.learning_history_from_dict)

    def set_learning_history(self, history: LearningHistory) -> None:
        self.set(LEARNING_HISTORY, converters.learning_history_to_dict(history))

    def get_last_week_id(self) -> str:
        value = self.get(LAST_WEEK_ID)
        return value if isinstance(value, str) else current_week_id()

    def set_last_week_id(self, week_id: str) -> None:
        self.set(LAST_WEEK_ID, week_id)

    def get_learning_settings(self) -> LearningSettings:
        return self._load(
            LEARNING_SETTINGS, LearningSettings(), converters.learning_settings_from_dict
        )

    def set_learning_settings(self, settings: LearningSettings) -> None:
        self.set(LEARNING_SETTINGS, converters.learning_settings_to_dict(settings))

    def get_learning_statistics(self) -> LearningStatistics:
        return self._load(
            LEARNING_STATISTICS, LearningStatistics(), converters.learning_statistics_from_dict
        )

    def set_learning_statistics(self, stats: LearningStatistics) -> None:
        self.set(LEARNING_STATISTICS, converters.learning_statistics_to_dict(stats))

    def set_all_learning_data(
        self,
        *,
        current_week_topics: list[LearningTopic],
        learning_history: LearningHistory,
        last_week_id: str,
        learning_settings: LearningSettings,
        learning_statistics: LearningStatistics | None = None,
    ) -> None:
        values: dict[str, Any] = {
            CURRENT_WEEK_TOPICS: converters.topics_to_list(current_week_topics),
            LEARNING_HISTORY: converters.learning_history_to_dict(learning_history),
            LAST_WEEK_ID: last_week_id,
            LEARNING_SETTINGS: converters.learning_settings_to_dict(learning_settings),
        }
        if learning_statistics is not None:
            values[LEARNING_STATISTICS] = converters.learning_statistics_to_dict(
                learning_statistics
            )
        self._set_many(values, "learning data")

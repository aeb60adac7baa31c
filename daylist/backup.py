"""Whole-store JSON dumps and validated restores."""

import json
import logging
from pathlib import Path
from typing import Any

from .core.errors import ValidationError
from .lib import converters
from .lib.validate import messages, validate_learning_data, validate_store_data
from .stats import build_learning_statistics
from .store import (
    CURRENT_WEEK_TOPICS,
    LAST_DATE,
    LAST_WEEK_ID,
    LEARNING_HISTORY,
    LEARNING_SETTINGS,
    LEARNING_STATISTICS,
    MUST_DO_TASKS,
    SETTINGS,
    TASK_HISTORY,
    TODAY_TASKS,
    Store,
)

__all__ = [
    "dump_data",
    "dump_learning_data",
    "import_data",
    "import_learning_data",
    "read_backup_file",
    "write_backup_file",
]

logger = logging.getLogger(__name__)


def dump_data(store: Store) -> dict[str, Any]:
    return {
        TODAY_TASKS: converters.tasks_to_list(store.get_today_tasks()),
        MUST_DO_TASKS: converters.tasks_to_list(store.get_must_do_tasks()),
        TASK_HISTORY: converters.history_to_dict(store.get_task_history()),
        LAST_DATE: store.get_last_date(),
        SETTINGS: converters.settings_to_dict(store.get_settings()),
    }


def dump_learning_data(store: Store) -> dict[str, Any]:
    return {
        CURRENT_WEEK_TOPICS: converters.topics_to_list(store.get_current_week_topics()),
        LEARNING_HISTORY: converters.learning_history_to_dict(store.get_learning_history()),
        LAST_WEEK_ID: store.get_last_week_id(),
        LEARNING_SETTINGS: converters.learning_settings_to_dict(store.get_learning_settings()),
        LEARNING_STATISTICS: converters.learning_statistics_to_dict(
            store.get_learning_statistics()
        ),
    }


def import_data(store: Store, data: Any) -> list[str]:
    """
    Replace all task data with `data`.

    Returns the validation messages and writes nothing when the shape is wrong.
    A failed write raises StorageError.
    """
    violations = validate_store_data(data)
    if violations:
        logger.warning("rejected task data import: %d problem(s)", len(violations))
        return messages(violations)
    store.set_all(
        today_tasks=converters.tasks_from_list(data[TODAY_TASKS]),
        must_do_tasks=converters.tasks_from_list(data[MUST_DO_TASKS]),
        task_history=converters.history_from_dict(data[TASK_HISTORY]),
        last_date=data[LAST_DATE],
        settings=converters.settings_from_dict(data[SETTINGS]),
    )
    logger.info("imported task data")
    return []


def import_learning_data(store: Store, data: Any) -> list[str]:
    """Learning counterpart of import_data; statistics are rebuilt when absent."""
    violations = validate_learning_data(data)
    if violations:
        logger.warning("rejected learning data import: %d problem(s)", len(violations))
        return messages(violations)
    history = converters.learning_history_from_dict(data[LEARNING_HISTORY])
    raw_stats = data.get(LEARNING_STATISTICS)
    statistics = (
        converters.learning_statistics_from_dict(raw_stats)
        if raw_stats
        else build_learning_statistics(history)
    )
    store.set_all_learning_data(
        current_week_topics=converters.topics_from_list(data[CURRENT_WEEK_TOPICS]),
        learning_history=history,
        last_week_id=data[LAST_WEEK_ID],
        learning_settings=converters.learning_settings_from_dict(data[LEARNING_SETTINGS]),
        learning_statistics=statistics,
    )
    logger.info("imported learning data")
    return []


def read_backup_file(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError([f"{path.name}: not valid JSON ({e.msg} at line {e.lineno})"]) from e


def write_backup_file(data: dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return path

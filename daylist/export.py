import logging
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path

from . import config
from .core.models import Task, TaskHistory
from .core.types import DateRange, ExportStatus
from .lib import clock
from .lib.dates import date_key, format_date, parse_date_key, timestamp_date
from .tasks import flatten_tasks

__all__ = [
    "ExportOptions",
    "export_filename",
    "format_task",
    "generate_markdown_export",
    "group_by_date",
    "write_export",
]

logger = logging.getLogger(__name__)

HEADER = "# Task History Export"
EMPTY = "_No tasks found for the selected criteria._"


@dataclass(frozen=True)
class ExportOptions:
    status: ExportStatus = "all"
    date_range: DateRange = 7
    include_subtasks: bool = True
    # Group every node on its own date and render it without children.
    flatten: bool = False


def format_task(task: Task, depth: int = 0, include_subtasks: bool = True) -> list[str]:
    indent = "  " * depth
    bullet = "-" if depth == 0 else "*"
    lines = [f"{indent}{bullet} {task.text}"]
    if include_subtasks:
        for subtask in task.subtasks:
            lines.extend(format_task(subtask, depth + 1, include_subtasks))
    return lines


def _matches(task: Task, status: ExportStatus) -> bool:
    if status == "completed":
        return task.completed
    if status == "incomplete":
        return not task.completed
    return True


def _task_day(task: Task, fallback: date) -> date:
    """Completed tasks date by finished_at, the rest by created_at."""
    stamp = task.finished_at if task.completed and task.finished_at else task.created_at
    return timestamp_date(stamp) or fallback


def group_by_date(
    sources: list[tuple[date, list[Task]]], status: ExportStatus, flatten: bool = False
) -> dict[date, list[Task]]:
    """
    Bucket tasks by calendar date. Each source is (owning day, tasks); the owning
    day is used when a task's own timestamp is missing or unparsable.
    """
    groups: dict[date, list[Task]] = {}
    for day, tasks in sources:
        for task in flatten_tasks(tasks) if flatten else tasks:
            if not _matches(task, status):
                continue
            groups.setdefault(_task_day(task, day), []).append(task)
    return groups


def _in_range(day: date, date_range: DateRange, today: date) -> bool:
    if date_range == "all":
        return True
    return day >= today - timedelta(days=date_range - 1)


def generate_markdown_export(
    history: TaskHistory,
    today_tasks: list[Task],
    options: ExportOptions | None = None,
    today: date | None = None,
) -> str:
    options = options or ExportOptions()
    today = today or clock.today()
    today_key = date_key(today)

    # Today's live list wins over an archived entry under the same key.
    sources = [
        (parse_date_key(key) or today, entry.tasks)
        for key, entry in history.items()
        if key != today_key
    ]
    sources.append((today, today_tasks))

    groups = group_by_date(sources, options.status, flatten=options.flatten)
    days = sorted((d for d in groups if _in_range(d, options.date_range, today)), reverse=True)

    lines = [HEADER, ""]
    if not days:
        lines.append(EMPTY)
        return "\n".join(lines) + "\n"

    include_subtasks = options.include_subtasks and not options.flatten
    for day in days:
        lines.append(f"## {format_date(day)}")
        lines.append("")
        for task in groups[day]:
            lines.extend(format_task(task, 0, include_subtasks))
        lines.append("")
    return "\n".join(lines) + "\n"


def export_filename(today: date | None = None) -> str:
    return f"todo-history-{(today or clock.today()).isoformat()}.md"


def write_export(
    content: str,
    directory: Path | None = None,
    today: date | None = None,
    filename: str | None = None,
) -> Path:
    directory = directory or config.get_export_dir()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (f"{filename}.md" if filename else export_filename(today))
    path.write_text(content, encoding="utf-8")
    logger.info("exported history to %s", path)
    return path

"""Schema and data migrations, applied in name order by db.init()."""

import dataclasses
import json
import sqlite3

from .lib import converters


def migration_001_store(conn: sqlite3.Connection) -> None:
    conn.execute(
        "CREATE TABLE IF NOT EXISTS store ("
        "key TEXT PRIMARY KEY, "
        "value TEXT NOT NULL, "
        "updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP)"
    )


def _read(conn: sqlite3.Connection, key: str):
    row = conn.execute("SELECT value FROM store WHERE key = ?", (key,)).fetchone()
    if row is None:
        return None
    try:
        return json.loads(row[0])
    except json.JSONDecodeError:
        return None


def _write(conn: sqlite3.Connection, key: str, value) -> None:
    conn.execute(
        "UPDATE store SET value = ?, updated_at = CURRENT_TIMESTAMP WHERE key = ?",
        (json.dumps(value, ensure_ascii=False), key),
    )


def migration_002_task_created_at(conn: sqlite3.Connection) -> None:
    """Backfill created_at on tasks saved before timestamps existed. Best effort."""
    from .tasks import migrate_tasks, needs_migration

    for key in ("todayTasks", "mustDoTasks"):
        raw = _read(conn, key)
        if not isinstance(raw, list):
            continue
        try:
            tasks = converters.tasks_from_list(raw)
        except (KeyError, TypeError, ValueError):
            continue
        if needs_migration(tasks):
            _write(conn, key, converters.tasks_to_list(migrate_tasks(tasks)))

    raw_history = _read(conn, "taskHistory")
    if not isinstance(raw_history, dict):
        return
    try:
        history = converters.history_from_dict(raw_history)
    except (KeyError, TypeError, ValueError, AttributeError):
        return
    changed = False
    for key, entry in history.items():
        if needs_migration(entry.tasks):
            history[key] = dataclasses.replace(entry, tasks=migrate_tasks(entry.tasks))
            changed = True
    if changed:
        _write(conn, "taskHistory", converters.history_to_dict(history))

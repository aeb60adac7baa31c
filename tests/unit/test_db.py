import json
import sqlite3

import pytest

from daylist import config, db
from daylist.db import load_migrations


def test_init_creates_schema(tmp_daylist_dir):
    db.init()
    with db.get_db() as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "store" in tables
    assert "_migrations" in tables


def test_migrations_are_ordered_and_recorded(tmp_daylist_dir):
    names = [name for name, _ in load_migrations()]
    assert names == sorted(names)
    assert names[0] == "001_store"

    db.init()
    with db.get_db() as conn:
        applied = [row[0] for row in conn.execute("SELECT name FROM _migrations ORDER BY id")]
    assert applied == names


def test_init_is_idempotent(tmp_daylist_dir):
    db.init()
    db.init()
    with db.get_db() as conn:
        count = conn.execute("SELECT COUNT(*) FROM _migrations").fetchone()[0]
    assert count == len(load_migrations())


def test_get_db_auto_commit(tmp_daylist_dir):
    db.init()
    with db.get_db() as conn:
        conn.execute("INSERT INTO store (key, value) VALUES ('k', '1')")
    with db.get_db() as conn:
        assert conn.execute("SELECT value FROM store WHERE key = 'k'").fetchone()[0] == "1"


def test_get_db_auto_rollback(tmp_daylist_dir):
    db.init()
    with pytest.raises(sqlite3.IntegrityError), db.get_db() as conn:
        conn.execute("INSERT INTO store (key, value) VALUES ('k', '1')")
        conn.execute("INSERT INTO store (key, value) VALUES ('k', '2')")
    with db.get_db() as conn:
        assert conn.execute("SELECT COUNT(*) FROM store").fetchone()[0] == 0


def test_created_at_backfill_migration(tmp_daylist_dir):
    config.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    legacy = [{"id": 1, "text": "old", "completed": False, "subtasks": [], "expanded": False}]
    conn = sqlite3.connect(config.DB_PATH)
    for name, migration in load_migrations():
        if name == "001_store":
            migration(conn)
    conn.execute(
        "CREATE TABLE _migrations (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL UNIQUE,"
        " applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP)"
    )
    conn.execute("INSERT INTO _migrations (name) VALUES ('001_store')")
    conn.execute("INSERT INTO store (key, value) VALUES ('todayTasks', ?)", (json.dumps(legacy),))
    conn.commit()
    conn.close()

    db.init()

    with db.get_db() as conn:
        raw = conn.execute("SELECT value FROM store WHERE key = 'todayTasks'").fetchone()[0]
    task = json.loads(raw)[0]
    assert task["created_at"] == "2025-01-01T00:00:00.000Z"
    assert "finished_at" not in task
    assert not list((config.BACKUP_DIR / "migrations").glob("*.backup"))

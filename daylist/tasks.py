import dataclasses
from collections.abc import Callable, Iterator
from datetime import timedelta

from .core.models import Counts, Task
from .lib import clock
from .lib.converters import DEFAULT_CREATED_AT
from .lib.dates import parse_timestamp
from .store import MUST_DO_TASKS, TODAY_TASKS, Store

__all__ = [
    "TaskList",
    "add_subtask",
    "add_task",
    "are_all_expanded",
    "are_all_subtasks_completed",
    "collapse_all",
    "count_all",
    "count_direct_children",
    "count_root",
    "create_task",
    "delete_task",
    "expand_all",
    "filter_incomplete",
    "find_task",
    "flatten_tasks",
    "is_fully_completed",
    "migrate_tasks",
    "needs_migration",
    "task_duration",
    "toggle_completion",
    "toggle_expand_collapse",
    "toggle_expansion",
    "update_text",
]


# ── domain ───────────────────────────────────────────────────────────────────
#
# Every function takes a forest and returns a new one. Nodes are frozen, so
# untouched branches are shared between the old and new forest. An id that
# isn't found leaves the forest unchanged.


def create_task(text: str) -> Task | None:
    if not text.strip():
        return None
    return Task(id=clock.generate_id(), text=text, created_at=clock.now_iso())


def add_task(tasks: list[Task], text: str) -> list[Task]:
    task = create_task(text)
    if task is None:
        return tasks
    return [*tasks, task]


def _map_node(
    tasks: list[Task], task_id: float, fn: Callable[[Task], Task]
) -> tuple[list[Task], bool]:
    """Apply fn to the node with task_id; rebuild only the path leading to it."""
    for i, task in enumerate(tasks):
        if task.id == task_id:
            return [*tasks[:i], fn(task), *tasks[i + 1 :]], True
        if task.subtasks:
            subtasks, found = _map_node(task.subtasks, task_id, fn)
            if found:
                updated = dataclasses.replace(task, subtasks=subtasks)
                return [*tasks[:i], updated, *tasks[i + 1 :]], True
    return tasks, False


def find_task(tasks: list[Task], task_id: float) -> Task | None:
    for task in tasks:
        if task.id == task_id:
            return task
        found = find_task(task.subtasks, task_id)
        if found is not None:
            return found
    return None


def _complete_target(task: Task, completed: bool, now: str) -> Task:
    if completed:
        subtasks = [
            dataclasses.replace(st, completed=True, finished_at=st.finished_at or now)
            for st in task.subtasks
        ]
    else:
        # unchecking a parent keeps the children's checkmarks
        subtasks = [dataclasses.replace(st, finished_at=None) for st in task.subtasks]

    finished_at = None
    if completed and all(st.completed for st in subtasks):
        finished_at = task.finished_at or now
    return dataclasses.replace(
        task, completed=completed, subtasks=subtasks, finished_at=finished_at
    )


def _recompute_ancestor(task: Task, subtasks: list[Task], now: str) -> Task:
    all_done = bool(subtasks) and all(st.completed for st in subtasks)
    completed = all_done or task.completed
    if completed and all_done:
        finished_at = task.finished_at or now
    else:
        finished_at = None
    return dataclasses.replace(
        task, subtasks=subtasks, completed=completed, finished_at=finished_at
    )


def toggle_completion(tasks: list[Task], task_id: float, status: bool | None = None) -> list[Task]:
    """
    Toggle (or set, when status is given) a task's completion.

    Checking a task checks its direct subtasks. Unchecking clears the direct
    subtasks' finished_at but leaves them checked. On the way back up, an
    ancestor whose direct subtasks are all done becomes completed too, and any
    ancestor that is no longer fully done loses its finished_at.
    """
    now = clock.now_iso()

    def walk(task_list: list[Task]) -> tuple[list[Task], bool]:
        for i, task in enumerate(task_list):
            if task.id == task_id:
                completed = status if status is not None else not task.completed
                updated = _complete_target(task, completed, now)
            elif task.subtasks:
                subtasks, found = walk(task.subtasks)
                if not found:
                    continue
                updated = _recompute_ancestor(task, subtasks, now)
            else:
                continue
            return [*task_list[:i], updated, *task_list[i + 1 :]], True
        return task_list, False

    result, _ = walk(tasks)
    return result


def add_subtask(tasks: list[Task], parent_id: float, text: str) -> list[Task]:
    subtask = create_task(text)
    if subtask is None:
        return tasks
    result, _ = _map_node(
        tasks,
        parent_id,
        lambda t: dataclasses.replace(t, subtasks=[*t.subtasks, subtask], expanded=True),
    )
    return result


def delete_task(tasks: list[Task], task_id: float) -> list[Task]:
    return [
        dataclasses.replace(t, subtasks=delete_task(t.subtasks, task_id)) if t.subtasks else t
        for t in tasks
        if t.id != task_id
    ]


def toggle_expansion(tasks: list[Task], task_id: float) -> list[Task]:
    result, _ = _map_node(tasks, task_id, lambda t: dataclasses.replace(t, expanded=not t.expanded))
    return result


def expand_all(tasks: list[Task]) -> list[Task]:
    return [
        dataclasses.replace(t, expanded=bool(t.subtasks), subtasks=expand_all(t.subtasks))
        for t in tasks
    ]


def collapse_all(tasks: list[Task]) -> list[Task]:
    return [dataclasses.replace(t, expanded=False, subtasks=collapse_all(t.subtasks)) for t in tasks]


def _has_children(tasks: list[Task]) -> bool:
    return any(t.subtasks for t in tasks)


def _all_parents_expanded(tasks: list[Task]) -> bool:
    for task in tasks:
        if task.subtasks:
            if not task.expanded or not _all_parents_expanded(task.subtasks):
                return False
    return True


def are_all_expanded(tasks: list[Task]) -> bool:
    """False when no task has subtasks: there is nothing to call expanded."""
    if not _has_children(tasks):
        return False
    return _all_parents_expanded(tasks)


def toggle_expand_collapse(tasks: list[Task]) -> list[Task]:
    return collapse_all(tasks) if are_all_expanded(tasks) else expand_all(tasks)


def update_text(tasks: list[Task], task_id: float, text: str) -> list[Task]:
    if not text.strip():
        return tasks
    result, _ = _map_node(tasks, task_id, lambda t: dataclasses.replace(t, text=text))
    return result


def filter_incomplete(tasks: list[Task]) -> list[Task]:
    """Prune completed tasks at every level; used for carry-over."""
    return [
        dataclasses.replace(t, subtasks=filter_incomplete(t.subtasks))
        for t in tasks
        if not t.completed
    ]


def _walk(tasks: list[Task]) -> Iterator[Task]:
    for task in tasks:
        yield task
        yield from _walk(task.subtasks)


def flatten_tasks(tasks: list[Task]) -> list[Task]:
    return list(_walk(tasks))


def count_all(tasks: list[Task]) -> Counts:
    total = completed = 0
    for task in _walk(tasks):
        total += 1
        completed += task.completed
    return Counts(total=total, completed=completed)


def count_root(tasks: list[Task]) -> Counts:
    return Counts(total=len(tasks), completed=sum(1 for t in tasks if t.completed))


def count_direct_children(task: Task) -> Counts:
    """Counts behind the "(x/y)" badge."""
    return count_root(task.subtasks)


def are_all_subtasks_completed(task: Task) -> bool:
    return bool(task.subtasks) and all(st.completed for st in task.subtasks)


def is_fully_completed(task: Task) -> bool:
    return task.completed and all(is_fully_completed(st) for st in task.subtasks)


def task_duration(task: Task) -> timedelta | None:
    created = parse_timestamp(task.created_at)
    finished = parse_timestamp(task.finished_at)
    if created is None or finished is None:
        return None
    if (created.tzinfo is None) != (finished.tzinfo is None):
        return None
    return finished - created


def needs_migration(tasks: list[Task]) -> bool:
    return any(not t.created_at for t in _walk(tasks))


def migrate_tasks(tasks: list[Task]) -> list[Task]:
    """Backfill created_at on tasks saved before it existed. finished_at stays unset."""
    return [
        dataclasses.replace(
            t,
            created_at=t.created_at or DEFAULT_CREATED_AT,
            subtasks=migrate_tasks(t.subtasks),
        )
        for t in tasks
    ]


# ── lists ────────────────────────────────────────────────────────────────────


class TaskList:
    """A persisted forest ("Today" or "Must-Do"); each change is written through."""

    def __init__(self, store: Store, key: str = TODAY_TASKS):
        if key not in (TODAY_TASKS, MUST_DO_TASKS):
            raise ValueError(f"Unknown task list key: {key}")
        self.store = store
        self.key = key
        self.tasks: list[Task] = []
        self.reload()

    def reload(self) -> list[Task]:
        self.tasks = self.store.get_tasks(self.key)
        return self.tasks

    def _apply(self, tasks: list[Task]) -> list[Task]:
        if tasks is not self.tasks:
            self.tasks = tasks
            self.store.set_tasks(self.key, tasks)
        return self.tasks

    def replace(self, tasks: list[Task]) -> list[Task]:
        self.tasks = tasks
        self.store.set_tasks(self.key, tasks)
        return tasks

    def add(self, text: str) -> list[Task]:
        return self._apply(add_task(self.tasks, text))

    def toggle(self, task_id: float, status: bool | None = None) -> list[Task]:
        return self._apply(toggle_completion(self.tasks, task_id, status))

    def add_subtask(self, parent_id: float, text: str) -> list[Task]:
        return self._apply(add_subtask(self.tasks, parent_id, text))

    def delete(self, task_id: float) -> list[Task]:
        return self._apply(delete_task(self.tasks, task_id))

    def rename(self, task_id: float, text: str) -> list[Task]:
        return self._apply(update_text(self.tasks, task_id, text))

    def toggle_expansion(self, task_id: float) -> list[Task]:
        return self._apply(toggle_expansion(self.tasks, task_id))

    def expand_all(self) -> list[Task]:
        return self._apply(expand_all(self.tasks))

    def collapse_all(self) -> list[Task]:
        return self._apply(collapse_all(self.tasks))

    def toggle_expand_collapse(self) -> list[Task]:
        return self._apply(toggle_expand_collapse(self.tasks))

    @property
    def all_expanded(self) -> bool:
        return are_all_expanded(self.tasks)

    def counts(self) -> Counts:
        return count_all(self.tasks)

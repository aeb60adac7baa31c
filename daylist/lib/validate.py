"""Shape checks for imported store data, run before anything is written."""

from dataclasses import dataclass
from typing import Any

from .dates import is_valid_week_id

__all__ = ["Violation", "messages", "validate_learning_data", "validate_store_data"]

_KINDS: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


@dataclass(frozen=True)
class Violation:
    path: str
    expected: str
    missing: bool = False

    @property
    def message(self) -> str:
        if self.missing:
            return f"{self.path}: missing (expected {self.expected})"
        return f"{self.path}: expected {self.expected}"


def messages(violations: list[Violation]) -> list[str]:
    return [v.message for v in violations]


def _is(value: Any, kind: str) -> bool:
    if kind == "number" and isinstance(value, bool):
        return False
    return isinstance(value, _KINDS[kind])


class _Checker:
    def __init__(self):
        self.violations: list[Violation] = []

    def field(self, obj: dict, key: str, kind: str, path: str, required: bool = True) -> bool:
        """True when obj[key] is present and of the right kind."""
        where = f"{path}.{key}" if path else key
        if key not in obj:
            if required:
                self.violations.append(Violation(where, kind, missing=True))
            return False
        if not _is(obj[key], kind):
            self.violations.append(Violation(where, kind))
            return False
        return True

    def value(self, value: Any, kind: str, path: str) -> bool:
        if not _is(value, kind):
            self.violations.append(Violation(path, kind))
            return False
        return True

    def task(self, data: Any, path: str) -> None:
        if not self.value(data, "object", path):
            return
        self.field(data, "id", "number", path)
        self.field(data, "text", "string", path)
        self.field(data, "completed", "boolean", path)
        self.field(data, "expanded", "boolean", path)
        self.field(data, "created_at", "string", path, required=False)
        if data.get("finished_at") is not None:
            self.field(data, "finished_at", "string", path)
        if self.field(data, "subtasks", "array", path):
            for i, sub in enumerate(data["subtasks"]):
                self.task(sub, f"{path}.subtasks[{i}]")

    def tasks(self, data: dict, key: str) -> None:
        if self.field(data, key, "array", ""):
            for i, task in enumerate(data[key]):
                self.task(task, f"{key}[{i}]")

    def topic(self, data: Any, path: str) -> None:
        if not self.value(data, "object", path):
            return
        self.field(data, "id", "number", path)
        self.field(data, "title", "string", path)
        self.field(data, "notes", "string", path, required=False)
        self.field(data, "expanded", "boolean", path)
        self.field(data, "createdAt", "string", path, required=False)
        self.field(data, "updatedAt", "string", path, required=False)
        if self.field(data, "referenceLinks", "array", path, required=False):
            for i, link in enumerate(data["referenceLinks"]):
                where = f"{path}.referenceLinks[{i}]"
                if self.value(link, "object", where):
                    self.field(link, "id", "number", where)
                    self.field(link, "url", "string", where)
        if self.field(data, "blogPost", "object", path, required=False):
            where = f"{path}.blogPost"
            self.field(data["blogPost"], "written", "boolean", where)
            if data["blogPost"].get("url") is not None:
                self.field(data["blogPost"], "url", "string", where)
        if self.field(data, "subtopics", "array", path):
            for i, sub in enumerate(data["subtopics"]):
                self.topic(sub, f"{path}.subtopics[{i}]")


def validate_store_data(data: Any) -> list[Violation]:
    check = _Checker()
    if not check.value(data, "object", "data"):
        return check.violations

    check.tasks(data, "todayTasks")
    check.tasks(data, "mustDoTasks")
    check.field(data, "lastDate", "string", "")

    if check.field(data, "taskHistory", "object", ""):
        for key, entry in data["taskHistory"].items():
            path = f"taskHistory.{key}"
            if not check.value(entry, "object", path):
                continue
            check.field(entry, "date", "string", path)
            check.field(entry, "completed", "number", path)
            check.field(entry, "total", "number", path)
            if check.field(entry, "tasks", "array", path):
                for i, task in enumerate(entry["tasks"]):
                    check.task(task, f"{path}.tasks[{i}]")

    if check.field(data, "settings", "object", ""):
        settings = data["settings"]
        check.field(settings, "autoCarryOver", "boolean", "settings")
        if check.field(settings, "notifyInterval", "number", "settings"):
            if not 1 <= settings["notifyInterval"] <= 24:
                check.violations.append(Violation("settings.notifyInterval", "number from 1 to 24"))
        check.field(settings, "darkMode", "boolean", "settings")
        check.field(settings, "autoStart", "boolean", "settings")

    return check.violations


def validate_learning_data(data: Any) -> list[Violation]:
    check = _Checker()
    if not check.value(data, "object", "data"):
        return check.violations

    if check.field(data, "currentWeekTopics", "array", ""):
        for i, topic in enumerate(data["currentWeekTopics"]):
            check.topic(topic, f"currentWeekTopics[{i}]")

    if check.field(data, "lastWeekId", "string", ""):
        if not is_valid_week_id(data["lastWeekId"]):
            check.violations.append(Violation("lastWeekId", "week id (YYYY-Www)"))

    if check.field(data, "learningHistory", "object", ""):
        for key, entry in data["learningHistory"].items():
            path = f"learningHistory.{key}"
            if not is_valid_week_id(key):
                check.violations.append(Violation(path, "week id key (YYYY-Www)"))
            if not check.value(entry, "object", path):
                continue
            check.field(entry, "weekId", "string", path)
            check.field(entry, "weekStart", "string", path)
            check.field(entry, "weekEnd", "string", path)
            check.field(entry, "total", "number", path)
            if check.field(entry, "topics", "array", path):
                for i, topic in enumerate(entry["topics"]):
                    check.topic(topic, f"{path}.topics[{i}]")

    if check.field(data, "learningSettings", "object", ""):
        settings = data["learningSettings"]
        check.field(settings, "autoCreateNewWeek", "boolean", "learningSettings")
        check.field(settings, "weekStartDay", "number", "learningSettings")

    if "learningStatistics" in data and data["learningStatistics"] is not None:
        check.field(data, "learningStatistics", "object", "")

    return check.violations

from typing import Any, cast

from daylist.core.models import (
    BlogPost,
    HistoryEntry,
    LearningHistory,
    LearningSettings,
    LearningStatistics,
    LearningTopic,
    ReferenceLink,
    Settings,
    Task,
    TaskHistory,
    WeeklyLearningEntry,
)

# Tasks saved before timestamps existed get this creation time.
DEFAULT_CREATED_AT = "2025-01-01T00:00:00.000Z"

JsonDict = dict[str, Any]


def _number(val) -> float:
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise TypeError(f"expected a number, got {type(val).__name__}")
    return val


def _optional_str(val) -> str | None:
    return cast(str, val) if val else None


def task_to_dict(task: Task) -> JsonDict:
    """
    Converts a Task into its persisted JSON shape.
    finished_at is omitted, not written as null, while the task is unfinished.
    """
    data: JsonDict = {
        "id": task.id,
        "text": task.text,
        "completed": task.completed,
        "subtasks": [task_to_dict(st) for st in task.subtasks],
        "expanded": task.expanded,
        "created_at": task.created_at,
    }
    if task.finished_at is not None:
        data["finished_at"] = task.finished_at
    return data


def task_from_dict(data: JsonDict) -> Task:
    return Task(
        id=_number(data["id"]),
        text=cast(str, data["text"]),
        completed=bool(data.get("completed", False)),
        subtasks=[task_from_dict(st) for st in data.get("subtasks") or []],
        expanded=bool(data.get("expanded", False)),
        created_at=cast(str, data.get("created_at") or ""),
        finished_at=_optional_str(data.get("finished_at")),
    )


def tasks_to_list(tasks: list[Task]) -> list[JsonDict]:
    return [task_to_dict(t) for t in tasks]


def tasks_from_list(data: list[JsonDict]) -> list[Task]:
    return [task_from_dict(t) for t in data]


def history_entry_to_dict(entry: HistoryEntry) -> JsonDict:
    return {
        "date": entry.date,
        "tasks": tasks_to_list(entry.tasks),
        "completed": entry.completed,
        "total": entry.total,
    }


def history_entry_from_dict(data: JsonDict) -> HistoryEntry:
    return HistoryEntry(
        date=cast(str, data["date"]),
        tasks=tasks_from_list(data.get("tasks") or []),
        completed=int(data.get("completed", 0)),
        total=int(data.get("total", 0)),
    )


def history_to_dict(history: TaskHistory) -> JsonDict:
    return {key: history_entry_to_dict(entry) for key, entry in history.items()}


def history_from_dict(data: JsonDict) -> TaskHistory:
    return {key: history_entry_from_dict(entry) for key, entry in data.items()}


def settings_to_dict(settings: Settings) -> JsonDict:
    return {
        "autoCarryOver": settings.auto_carry_over,
        "notifyInterval": settings.notify_interval,
        "darkMode": settings.dark_mode,
        "autoStart": settings.auto_start,
    }


def settings_from_dict(data: JsonDict) -> Settings:
    """Missing keys fall back to defaults so older saves keep loading."""
    defaults = Settings()
    return Settings(
        auto_carry_over=bool(data.get("autoCarryOver", defaults.auto_carry_over)),
        notify_interval=int(data.get("notifyInterval", defaults.notify_interval)),
        dark_mode=bool(data.get("darkMode", defaults.dark_mode)),
        auto_start=bool(data.get("autoStart", defaults.auto_start)),
    )


# ── learning ─────────────────────────────────────────────────────────────────


def link_to_dict(link: ReferenceLink) -> JsonDict:
    return {"id": link.id, "url": link.url}


def link_from_dict(data: JsonDict) -> ReferenceLink:
    return ReferenceLink(id=_number(data["id"]), url=cast(str, data["url"]))


def blog_post_to_dict(post: BlogPost) -> JsonDict:
    data: JsonDict = {"written": post.written}
    if post.url is not None:
        data["url"] = post.url
    return data


def blog_post_from_dict(data: JsonDict | None) -> BlogPost:
    if not data:
        return BlogPost()
    return BlogPost(written=bool(data.get("written", False)), url=_optional_str(data.get("url")))


def topic_to_dict(topic: LearningTopic) -> JsonDict:
    return {
        "id": topic.id,
        "title": topic.title,
        "notes": topic.notes,
        "referenceLinks": [link_to_dict(link) for link in topic.reference_links],
        "subtopics": [topic_to_dict(st) for st in topic.subtopics],
        "expanded": topic.expanded,
        "blogPost": blog_post_to_dict(topic.blog_post),
        "createdAt": topic.created_at,
        "updatedAt": topic.updated_at,
    }


def topic_from_dict(data: JsonDict) -> LearningTopic:
    return LearningTopic(
        id=_number(data["id"]),
        title=cast(str, data["title"]),
        notes=cast(str, data.get("notes") or ""),
        reference_links=[link_from_dict(link) for link in data.get("referenceLinks") or []],
        subtopics=[topic_from_dict(st) for st in data.get("subtopics") or []],
        expanded=bool(data.get("expanded", False)),
        blog_post=blog_post_from_dict(data.get("blogPost")),
        created_at=cast(str, data.get("createdAt") or ""),
        updated_at=cast(str, data.get("updatedAt") or ""),
    )


def topics_to_list(topics: list[LearningTopic]) -> list[JsonDict]:
    return [topic_to_dict(t) for t in topics]


def topics_from_list(data: list[JsonDict]) -> list[LearningTopic]:
    return [topic_from_dict(t) for t in data]


def week_entry_to_dict(entry: WeeklyLearningEntry) -> JsonDict:
    return {
        "weekId": entry.week_id,
        "weekStart": entry.week_start,
        "weekEnd": entry.week_end,
        "topics": topics_to_list(entry.topics),
        "total": entry.total,
    }


def week_entry_from_dict(data: JsonDict) -> WeeklyLearningEntry:
    return WeeklyLearningEntry(
        week_id=cast(str, data["weekId"]),
        week_start=cast(str, data.get("weekStart") or ""),
        week_end=cast(str, data.get("weekEnd") or ""),
        topics=topics_from_list(data.get("topics") or []),
        total=int(data.get("total", 0)),
    )


def learning_history_to_dict(history: LearningHistory) -> JsonDict:
    return {key: week_entry_to_dict(entry) for key, entry in history.items()}


def learning_history_from_dict(data: JsonDict) -> LearningHistory:
    return {key: week_entry_from_dict(entry) for key, entry in data.items()}


def learning_settings_to_dict(settings: LearningSettings) -> JsonDict:
    return {
        "autoCreateNewWeek": settings.auto_create_new_week,
        "weekStartDay": settings.week_start_day,
    }


def learning_settings_from_dict(data: JsonDict) -> LearningSettings:
    defaults = LearningSettings()
    return LearningSettings(
        auto_create_new_week=bool(data.get("autoCreateNewWeek", defaults.auto_create_new_week)),
        week_start_day=int(data.get("weekStartDay", defaults.week_start_day)),
    )


def learning_statistics_to_dict(stats: LearningStatistics) -> JsonDict:
    return {
        "totalTopics": stats.total_topics,
        "totalBlogPosts": stats.total_blog_posts,
        "totalWeeks": stats.total_weeks,
        "currentWeekStreak": stats.current_week_streak,
        "longestWeekStreak": stats.longest_week_streak,
        "topicsByMonth": {k: dict(v) for k, v in stats.topics_by_month.items()},
        "topicsByWeek": {k: dict(v) for k, v in stats.topics_by_week.items()},
    }


def learning_statistics_from_dict(data: JsonDict) -> LearningStatistics:
    return LearningStatistics(
        total_topics=int(data.get("totalTopics", 0)),
        total_blog_posts=int(data.get("totalBlogPosts", 0)),
        total_weeks=int(data.get("totalWeeks", 0)),
        current_week_streak=int(data.get("currentWeekStreak", 0)),
        longest_week_streak=int(data.get("longestWeekStreak", 0)),
        topics_by_month={k: dict(v) for k, v in (data.get("topicsByMonth") or {}).items()},
        topics_by_week={k: dict(v) for k, v in (data.get("topicsByWeek") or {}).items()},
    )

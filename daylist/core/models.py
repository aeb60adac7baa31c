import dataclasses


@dataclasses.dataclass(frozen=True)
class Task:
    id: float
    text: str
    completed: bool = False
    subtasks: list["Task"] = dataclasses.field(default_factory=list, hash=False)
    expanded: bool = False
    created_at: str = ""
    finished_at: str | None = None


@dataclasses.dataclass(frozen=True)
class Counts:
    total: int = 0
    completed: int = 0


@dataclasses.dataclass(frozen=True)
class HistoryEntry:
    date: str
    tasks: list[Task] = dataclasses.field(default_factory=list, hash=False)
    completed: int = 0
    total: int = 0


@dataclasses.dataclass(frozen=True)
class Settings:
    auto_carry_over: bool = True
    notify_interval: int = 3
    dark_mode: bool = False
    auto_start: bool = False


@dataclasses.dataclass(frozen=True)
class ReferenceLink:
    id: float
    url: str


@dataclasses.dataclass(frozen=True)
class BlogPost:
    written: bool = False
    url: str | None = None


@dataclasses.dataclass(frozen=True)
class LearningTopic:
    id: float
    title: str
    notes: str = ""
    reference_links: list[ReferenceLink] = dataclasses.field(default_factory=list, hash=False)
    subtopics: list["LearningTopic"] = dataclasses.field(default_factory=list, hash=False)
    expanded: bool = False
    blog_post: BlogPost = BlogPost()
    created_at: str = ""
    updated_at: str = ""


@dataclasses.dataclass(frozen=True)
class WeeklyLearningEntry:
    week_id: str
    week_start: str
    week_end: str
    topics: list[LearningTopic] = dataclasses.field(default_factory=list, hash=False)
    total: int = 0


@dataclasses.dataclass(frozen=True)
class LearningSettings:
    auto_create_new_week: bool = True
    week_start_day: int = 1


@dataclasses.dataclass(frozen=True)
class LearningStatistics:
    total_topics: int = 0
    total_blog_posts: int = 0
    total_weeks: int = 0
    current_week_streak: int = 0
    longest_week_streak: int = 0
    topics_by_month: dict[str, dict[str, int]] = dataclasses.field(
        default_factory=dict, hash=False
    )
    topics_by_week: dict[str, dict[str, int]] = dataclasses.field(
        default_factory=dict, hash=False
    )


TaskHistory = dict[str, HistoryEntry]
LearningHistory = dict[str, WeeklyLearningEntry]

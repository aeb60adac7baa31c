from datetime import date

from daylist.core.models import BlogPost, HistoryEntry, LearningTopic, WeeklyLearningEntry
from daylist.stats import (
    Streaks,
    Summary,
    build_learning_statistics,
    calculate_streaks,
    completion_rate,
    history_window,
    rate_series,
    render_summary,
    summarize,
    trend_series,
)


def entry(day: str, completed: int, total: int) -> HistoryEntry:
    return HistoryEntry(date=day, completed=completed, total=total)


def test_completion_rate_rounds_half_up():
    assert completion_rate(1, 3) == 33
    assert completion_rate(2, 3) == 67
    assert completion_rate(1, 8) == 13
    assert completion_rate(0, 0) == 0


def test_streak_scenario():
    entries = [entry("2024-01-01", 1, 2), entry("2024-01-03", 3, 3), entry("2024-01-02", 2, 2)]
    assert calculate_streaks(entries) == Streaks(current=2, longest=2)


def test_streak_longest_in_the_past():
    entries = [
        entry("2024-01-05", 0, 1),
        entry("2024-01-04", 1, 1),
        entry("2024-01-03", 1, 1),
        entry("2024-01-02", 1, 1),
        entry("2024-01-01", 0, 2),
    ]
    assert calculate_streaks(entries) == Streaks(current=0, longest=3)


def test_empty_day_breaks_streak():
    entries = [entry("2024-01-03", 1, 1), entry("2024-01-02", 0, 0), entry("2024-01-01", 1, 1)]
    assert calculate_streaks(entries) == Streaks(current=1, longest=1)


def test_no_history():
    assert calculate_streaks([]) == Streaks(current=0, longest=0)
    assert summarize([]) == Summary(total=0, completed=0, rate=0)


def test_history_window_includes_today():
    entries = [entry(f"2024-01-{d:02d}", 1, 1) for d in range(1, 11)]
    window = history_window(entries, 7, today=date(2024, 1, 10))
    assert [e.date for e in window] == [f"2024-01-{d:02d}" for d in range(10, 3, -1)]
    assert len(history_window(entries, None)) == 10


def test_summarize():
    summary = summarize([entry("2024-01-01", 1, 2), entry("2024-01-02", 2, 4)])
    assert summary == Summary(total=6, completed=3, rate=50)
    assert summary.pending == 3


def test_series_are_oldest_first_and_capped():
    entries = [entry(f"2024-02-{d:02d}", d % 3, 2) for d in range(1, 29)]
    entries += [entry(f"2024-01-{d:02d}", 0, 1) for d in range(1, 32)]
    trend = trend_series(entries)
    assert len(trend) == 30
    assert trend[0].day == 1
    assert trend[-1].date == "2024-02-28"
    assert trend[-1].incomplete == 2 - (28 % 3)

    rates = rate_series([entry("2024-01-01", 1, 4), entry("2024-01-02", 0, 0)])
    assert [(p.date, p.rate) for p in rates] == [("2024-01-01", 25), ("2024-01-02", 0)]


def test_render_summary():
    lines = render_summary(Summary(total=4, completed=3, rate=75), Streaks(current=2, longest=5))
    assert "  done:     3/4 (75%)" in lines
    assert "  streak:   2d (best 5d)" in lines


def _week(week_id: str, count: int, posts: int = 0) -> WeeklyLearningEntry:
    topics = [
        LearningTopic(id=i, title=f"t{i}", blog_post=BlogPost(written=i < posts))
        for i in range(count)
    ]
    return WeeklyLearningEntry(
        week_id=week_id, week_start="", week_end="", topics=topics, total=count
    )


def test_learning_statistics():
    history = {
        "2025-W01": _week("2025-W01", 2, posts=1),
        "2025-W02": _week("2025-W02", 1),
        "2025-W04": _week("2025-W04", 3, posts=2),
        "2025-W05": _week("2025-W05", 1),
    }
    stats = build_learning_statistics(history)
    assert stats.total_topics == 7
    assert stats.total_blog_posts == 3
    assert stats.total_weeks == 4
    assert stats.current_week_streak == 2
    assert stats.longest_week_streak == 2
    assert stats.topics_by_week["2025-W04"] == {"total": 3, "blogPosts": 2}
    assert stats.topics_by_month["2024-12"] == {"total": 2, "blogPosts": 1}
    assert stats.topics_by_month["2025-01"]["total"] == 5


def test_learning_statistics_streak_across_year_boundary():
    history = {
        "2024-W52": _week("2024-W52", 1),
        "2025-W01": _week("2025-W01", 1),
        "2025-W02": _week("2025-W02", 1),
    }
    stats = build_learning_statistics(history)
    assert stats.current_week_streak == 3
    assert stats.longest_week_streak == 3


def test_learning_statistics_empty():
    stats = build_learning_statistics({})
    assert stats.total_weeks == 0
    assert stats.current_week_streak == 0
    assert stats.topics_by_month == {}

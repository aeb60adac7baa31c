import pytest

from daylist.core.models import (
    BlogPost,
    HistoryEntry,
    LearningTopic,
    ReferenceLink,
    Settings,
    Task,
)
from daylist.lib.converters import (
    blog_post_to_dict,
    history_from_dict,
    history_to_dict,
    learning_settings_from_dict,
    settings_from_dict,
    task_from_dict,
    task_to_dict,
    topic_from_dict,
    topic_to_dict,
)


def test_unfinished_task_omits_finished_at():
    data = task_to_dict(Task(id=1.5, text="a", created_at="2024-01-01T00:00:00.000Z"))
    assert "finished_at" not in data
    assert data == {
        "id": 1.5,
        "text": "a",
        "completed": False,
        "subtasks": [],
        "expanded": False,
        "created_at": "2024-01-01T00:00:00.000Z",
    }


def test_task_round_trip_with_subtasks():
    task = Task(
        id=1,
        text="parent",
        completed=True,
        subtasks=[Task(id=2, text="child", completed=True, finished_at="2024-01-02T00:00:00Z")],
        expanded=True,
        created_at="2024-01-01T00:00:00Z",
        finished_at="2024-01-02T00:00:00Z",
    )
    assert task_from_dict(task_to_dict(task)) == task


def test_task_from_dict_tolerates_legacy_shape():
    task = task_from_dict({"id": 7, "text": "old", "completed": False, "subtasks": []})
    assert task.created_at == ""
    assert task.finished_at is None
    assert task.expanded is False


def test_task_from_dict_rejects_non_numeric_id():
    with pytest.raises(TypeError):
        task_from_dict({"id": "7", "text": "x"})
    with pytest.raises(TypeError):
        task_from_dict({"id": True, "text": "x"})


def test_blog_post_url_omitted_when_absent():
    assert blog_post_to_dict(BlogPost()) == {"written": False}
    assert blog_post_to_dict(BlogPost(True, "https://b")) == {"written": True, "url": "https://b"}


def test_topic_uses_camel_case_keys():
    topic = LearningTopic(
        id=3,
        title="t",
        reference_links=[ReferenceLink(id=4, url="https://x")],
        created_at="c",
        updated_at="u",
    )
    data = topic_to_dict(topic)
    assert set(data) == {
        "id",
        "title",
        "notes",
        "referenceLinks",
        "subtopics",
        "expanded",
        "blogPost",
        "createdAt",
        "updatedAt",
    }
    assert topic_from_dict(data) == topic


def test_topic_from_dict_defaults_missing_blog_post():
    topic = topic_from_dict({"id": 1, "title": "t", "subtopics": []})
    assert topic.blog_post == BlogPost()
    assert topic.reference_links == []


def test_history_round_trip():
    history = {"2024-01-01": HistoryEntry(date="2024-01-01", tasks=[], completed=0, total=0)}
    assert history_from_dict(history_to_dict(history)) == history


def test_settings_defaults_fill_missing_keys():
    assert settings_from_dict({}) == Settings()
    assert settings_from_dict({"notifyInterval": 6}).notify_interval == 6
    assert learning_settings_from_dict({"autoCreateNewWeek": False}).auto_create_new_week is False

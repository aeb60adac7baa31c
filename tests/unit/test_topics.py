from daylist.core.models import BlogPost, LearningTopic, ReferenceLink
from daylist.topics import (
    TopicList,
    add_reference_link,
    add_subtopic,
    add_topic,
    are_all_expanded,
    collapse_all,
    count_blog_posts,
    count_reference_links,
    count_root_topics,
    count_topics,
    delete_reference_link,
    delete_topic,
    expand_all,
    find_topic,
    set_blog_post_url,
    toggle_blog_post,
    toggle_expansion,
    update_notes,
    update_reference_link,
    update_title,
    update_topic,
)

STAMP = "2024-01-01T00:00:00.000Z"
NOW = "2024-01-02T09:00:00.000+00:00"


def topic(topic_id, title="", subtopics=None, **kwargs):
    return LearningTopic(
        id=topic_id,
        title=title or f"topic {int(topic_id)}",
        subtopics=subtopics or [],
        created_at=STAMP,
        updated_at=STAMP,
        **kwargs,
    )


def _tree():
    return [topic(1, "rust", subtopics=[topic(2, "ownership"), topic(3, "traits")]), topic(4)]


def test_add_topic(frozen_clock):
    result = add_topic([], "graphs")
    assert result[0].title == "graphs"
    assert result[0].created_at == result[0].updated_at == NOW
    assert result[0].blog_post == BlogPost(written=False)


def test_add_topic_blank_is_noop():
    topics = _tree()
    assert add_topic(topics, " ") is topics


def test_add_subtopic_stamps_and_expands_parent(frozen_clock):
    result = add_subtopic(_tree(), 4, "child")
    assert result[1].expanded is True
    assert result[1].updated_at == NOW
    assert result[1].subtopics[0].title == "child"


def test_edit_stamps_only_the_edited_topic(frozen_clock):
    result = update_title(_tree(), 2, "borrowing")
    assert result[0].subtopics[0].title == "borrowing"
    assert result[0].subtopics[0].updated_at == NOW
    assert result[0].updated_at == STAMP


def test_update_title_blank_is_noop():
    topics = _tree()
    assert update_title(topics, 2, "") is topics


def test_update_notes(frozen_clock):
    assert update_notes(_tree(), 4, "read chapter 3")[1].notes == "read chapter 3"


def test_update_topic_partial(frozen_clock):
    result = update_topic(_tree(), 1, notes="n")
    assert result[0].title == "rust"
    assert result[0].notes == "n"


def test_unknown_id_returns_same_list():
    topics = _tree()
    assert update_topic(topics, 99, title="x") is topics


def test_delete_topic_removes_subtree():
    result = delete_topic(_tree(), 1)
    assert [t.id for t in result] == [4]
    assert count_topics(delete_topic(_tree(), 3)) == 3


def test_expansion_does_not_stamp():
    result = toggle_expansion(_tree(), 1)
    assert result[0].expanded is True
    assert result[0].updated_at == STAMP


def test_expand_collapse_all():
    assert are_all_expanded(expand_all(_tree()))
    assert not are_all_expanded(collapse_all(_tree()))
    assert not are_all_expanded([topic(1)])


def test_reference_links(frozen_clock):
    result = add_reference_link(_tree(), 2, "https://doc.rust-lang.org/book/")
    link = result[0].subtopics[0].reference_links[0]
    assert link.url == "https://doc.rust-lang.org/book/"

    result = update_reference_link(result, 2, link.id, "https://rust-book.cs.brown.edu/")
    assert result[0].subtopics[0].reference_links[0].url == "https://rust-book.cs.brown.edu/"
    assert count_reference_links(result) == 1

    result = delete_reference_link(result, 2, link.id)
    assert result[0].subtopics[0].reference_links == []


def test_blank_link_is_noop():
    topics = [topic(1, reference_links=[ReferenceLink(id=5, url="https://a")])]
    assert add_reference_link(topics, 1, "") is topics
    assert update_reference_link(topics, 1, 5, "  ") is topics


def test_blog_post(frozen_clock):
    result = toggle_blog_post(_tree(), 3)
    assert result[0].subtopics[1].blog_post.written is True
    assert count_blog_posts(result) == 1

    result = set_blog_post_url(_tree(), 4, "https://blog.example/graphs")
    assert result[1].blog_post == BlogPost(written=True, url="https://blog.example/graphs")

    topics = _tree()
    assert set_blog_post_url(topics, 4, "") is topics


def test_counts():
    assert count_topics(_tree()) == 4
    assert count_root_topics(_tree()) == 2
    assert find_topic(_tree(), 3).title == "traits"


def test_topic_list_persists(store, frozen_clock):
    topics = TopicList(store)
    topics.add("sqlite internals")
    topic_id = topics.topics[0].id
    topics.add_subtopic(topic_id, "btree pages")
    topics.add_link(topic_id, "https://sqlite.org/fileformat.html")
    topics.toggle_blog_post(topic_id)

    reloaded = TopicList(store)
    assert count_topics(reloaded.topics) == 2
    assert reloaded.topics[0].blog_post.written is True
    assert reloaded.all_expanded is True

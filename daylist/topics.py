import dataclasses
from collections.abc import Callable, Iterator

from .core.models import BlogPost, LearningTopic, ReferenceLink
from .core.types import UNSET, Unset
from .lib import clock
from .store import Store

__all__ = [
    "TopicList",
    "add_reference_link",
    "add_subtopic",
    "add_topic",
    "are_all_expanded",
    "collapse_all",
    "count_blog_posts",
    "count_reference_links",
    "count_root_topics",
    "count_topics",
    "create_reference_link",
    "create_topic",
    "delete_reference_link",
    "delete_topic",
    "expand_all",
    "find_topic",
    "set_blog_post_url",
    "toggle_blog_post",
    "toggle_expansion",
    "update_notes",
    "update_reference_link",
    "update_title",
    "update_topic",
]


# ── domain ───────────────────────────────────────────────────────────────────
#
# Same shape as the task engine, without completion. Edits stamp updated_at on
# the edited topic only; ancestors keep theirs. Expansion is view state and
# does not count as an edit.


def create_topic(title: str) -> LearningTopic | None:
    if not title.strip():
        return None
    now = clock.now_iso()
    return LearningTopic(id=clock.generate_id(), title=title, created_at=now, updated_at=now)


def create_reference_link(url: str) -> ReferenceLink | None:
    if not url.strip():
        return None
    return ReferenceLink(id=clock.generate_id(), url=url)


def add_topic(topics: list[LearningTopic], title: str) -> list[LearningTopic]:
    topic = create_topic(title)
    if topic is None:
        return topics
    return [*topics, topic]


def _map_node(
    topics: list[LearningTopic],
    topic_id: float,
    fn: Callable[[LearningTopic], LearningTopic],
) -> list[LearningTopic]:
    for i, topic in enumerate(topics):
        if topic.id == topic_id:
            return [*topics[:i], fn(topic), *topics[i + 1 :]]
        if topic.subtopics:
            subtopics = _map_node(topic.subtopics, topic_id, fn)
            if subtopics is not topic.subtopics:
                updated = dataclasses.replace(topic, subtopics=subtopics)
                return [*topics[:i], updated, *topics[i + 1 :]]
    return topics


def _edit(
    topics: list[LearningTopic], topic_id: float, fn: Callable[[LearningTopic], LearningTopic]
) -> list[LearningTopic]:
    now = clock.now_iso()
    return _map_node(topics, topic_id, lambda t: dataclasses.replace(fn(t), updated_at=now))


def find_topic(topics: list[LearningTopic], topic_id: float) -> LearningTopic | None:
    for topic in topics:
        if topic.id == topic_id:
            return topic
        found = find_topic(topic.subtopics, topic_id)
        if found is not None:
            return found
    return None


def update_topic(
    topics: list[LearningTopic],
    topic_id: float,
    *,
    title: str | Unset = UNSET,
    notes: str | Unset = UNSET,
    reference_links: list[ReferenceLink] | Unset = UNSET,
    blog_post: BlogPost | Unset = UNSET,
) -> list[LearningTopic]:
    """Partial update of one topic; fields left UNSET are kept."""
    updates: dict[str, object] = {}
    if title is not UNSET:
        updates["title"] = title
    if notes is not UNSET:
        updates["notes"] = notes
    if reference_links is not UNSET:
        updates["reference_links"] = reference_links
    if blog_post is not UNSET:
        updates["blog_post"] = blog_post
    return _edit(topics, topic_id, lambda t: dataclasses.replace(t, **updates))


def update_title(topics: list[LearningTopic], topic_id: float, title: str) -> list[LearningTopic]:
    if not title.strip():
        return topics
    return update_topic(topics, topic_id, title=title)


def update_notes(topics: list[LearningTopic], topic_id: float, notes: str) -> list[LearningTopic]:
    return update_topic(topics, topic_id, notes=notes)


def delete_topic(topics: list[LearningTopic], topic_id: float) -> list[LearningTopic]:
    return [
        dataclasses.replace(t, subtopics=delete_topic(t.subtopics, topic_id)) if t.subtopics else t
        for t in topics
        if t.id != topic_id
    ]


def add_subtopic(topics: list[LearningTopic], parent_id: float, title: str) -> list[LearningTopic]:
    subtopic = create_topic(title)
    if subtopic is None:
        return topics
    return _edit(
        topics,
        parent_id,
        lambda t: dataclasses.replace(t, subtopics=[*t.subtopics, subtopic], expanded=True),
    )


def toggle_expansion(topics: list[LearningTopic], topic_id: float) -> list[LearningTopic]:
    return _map_node(topics, topic_id, lambda t: dataclasses.replace(t, expanded=not t.expanded))


def expand_all(topics: list[LearningTopic]) -> list[LearningTopic]:
    return [
        dataclasses.replace(t, expanded=bool(t.subtopics), subtopics=expand_all(t.subtopics))
        for t in topics
    ]


def collapse_all(topics: list[LearningTopic]) -> list[LearningTopic]:
    return [
        dataclasses.replace(t, expanded=False, subtopics=collapse_all(t.subtopics)) for t in topics
    ]


def _all_parents_expanded(topics: list[LearningTopic]) -> bool:
    for topic in topics:
        if topic.subtopics:
            if not topic.expanded or not _all_parents_expanded(topic.subtopics):
                return False
    return True


def are_all_expanded(topics: list[LearningTopic]) -> bool:
    if not any(t.subtopics for t in topics):
        return False
    return _all_parents_expanded(topics)


def add_reference_link(topics: list[LearningTopic], topic_id: float, url: str) -> list[LearningTopic]:
    link = create_reference_link(url)
    if link is None:
        return topics
    return _edit(
        topics, topic_id, lambda t: dataclasses.replace(t, reference_links=[*t.reference_links, link])
    )


def update_reference_link(
    topics: list[LearningTopic], topic_id: float, link_id: float, url: str
) -> list[LearningTopic]:
    if not url.strip():
        return topics
    return _edit(
        topics,
        topic_id,
        lambda t: dataclasses.replace(
            t,
            reference_links=[
                dataclasses.replace(link, url=url) if link.id == link_id else link
                for link in t.reference_links
            ],
        ),
    )


def delete_reference_link(
    topics: list[LearningTopic], topic_id: float, link_id: float
) -> list[LearningTopic]:
    return _edit(
        topics,
        topic_id,
        lambda t: dataclasses.replace(
            t, reference_links=[link for link in t.reference_links if link.id != link_id]
        ),
    )


def toggle_blog_post(topics: list[LearningTopic], topic_id: float) -> list[LearningTopic]:
    return _edit(
        topics,
        topic_id,
        lambda t: dataclasses.replace(
            t, blog_post=dataclasses.replace(t.blog_post, written=not t.blog_post.written)
        ),
    )


def set_blog_post_url(topics: list[LearningTopic], topic_id: float, url: str) -> list[LearningTopic]:
    """Recording a URL marks the post as written."""
    if not url.strip():
        return topics
    return update_topic(topics, topic_id, blog_post=BlogPost(written=True, url=url))


def _walk(topics: list[LearningTopic]) -> Iterator[LearningTopic]:
    for topic in topics:
        yield topic
        yield from _walk(topic.subtopics)


def count_topics(topics: list[LearningTopic]) -> int:
    return sum(1 for _ in _walk(topics))


def count_root_topics(topics: list[LearningTopic]) -> int:
    return len(topics)


def count_blog_posts(topics: list[LearningTopic]) -> int:
    """Topics, at any depth, whose blog post is written."""
    return sum(1 for t in _walk(topics) if t.blog_post.written)


def count_reference_links(topics: list[LearningTopic]) -> int:
    return sum(len(t.reference_links) for t in _walk(topics))


# ── lists ────────────────────────────────────────────────────────────────────


class TopicList:
    """The persisted current-week topic forest."""

    def __init__(self, store: Store):
        self.store = store
        self.topics: list[LearningTopic] = []
        self.reload()

    def reload(self) -> list[LearningTopic]:
        self.topics = self.store.get_current_week_topics()
        return self.topics

    def _apply(self, topics: list[LearningTopic]) -> list[LearningTopic]:
        if topics is not self.topics:
            self.topics = topics
            self.store.set_current_week_topics(topics)
        return self.topics

    def add(self, title: str) -> list[LearningTopic]:
        return self._apply(add_topic(self.topics, title))

    def rename(self, topic_id: float, title: str) -> list[LearningTopic]:
        return self._apply(update_title(self.topics, topic_id, title))

    def update_notes(self, topic_id: float, notes: str) -> list[LearningTopic]:
        return self._apply(update_notes(self.topics, topic_id, notes))

    def delete(self, topic_id: float) -> list[LearningTopic]:
        return self._apply(delete_topic(self.topics, topic_id))

    def add_subtopic(self, parent_id: float, title: str) -> list[LearningTopic]:
        return self._apply(add_subtopic(self.topics, parent_id, title))

    def add_link(self, topic_id: float, url: str) -> list[LearningTopic]:
        return self._apply(add_reference_link(self.topics, topic_id, url))

    def update_link(self, topic_id: float, link_id: float, url: str) -> list[LearningTopic]:
        return self._apply(update_reference_link(self.topics, topic_id, link_id, url))

    def delete_link(self, topic_id: float, link_id: float) -> list[LearningTopic]:
        return self._apply(delete_reference_link(self.topics, topic_id, link_id))

    def toggle_blog_post(self, topic_id: float) -> list[LearningTopic]:
        return self._apply(toggle_blog_post(self.topics, topic_id))

    def set_blog_post_url(self, topic_id: float, url: str) -> list[LearningTopic]:
        return self._apply(set_blog_post_url(self.topics, topic_id, url))

    def toggle_expansion(self, topic_id: float) -> list[LearningTopic]:
        return self._apply(toggle_expansion(self.topics, topic_id))

    def expand_all(self) -> list[LearningTopic]:
        return self._apply(expand_all(self.topics))

    def collapse_all(self) -> list[LearningTopic]:
        return self._apply(collapse_all(self.topics))

    @property
    def all_expanded(self) -> bool:
        return are_all_expanded(self.topics)

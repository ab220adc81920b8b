"""Status machine tests."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from contentkit.domain.entities import ContentItem
from contentkit.domain.state import DEFAULT_TRANSITIONS, can_transition, publish_stamp

NOW = datetime(2026, 6, 15, 12, 0, 0, tzinfo=UTC)


def make_item(**kwargs) -> ContentItem:
    return ContentItem(
        model_id=uuid4(), model_slug="post", author_id="user-1", **kwargs
    )


@pytest.mark.parametrize(
    ("current", "new"),
    [
        ("draft", "published"),
        ("draft", "archived"),
        ("published", "draft"),
        ("published", "archived"),
        ("archived", "draft"),
        ("archived", "published"),
    ],
)
def test_default_allows_every_transition(current: str, new: str) -> None:
    assert can_transition(current, new)


def test_same_status_always_allowed() -> None:
    assert can_transition("archived", "archived", {"archived": []})


def test_configured_machine_restricts() -> None:
    machine = {"draft": ["published"], "published": ["archived"], "archived": []}
    assert can_transition("draft", "published", machine)
    assert not can_transition("draft", "archived", machine)
    assert not can_transition("archived", "draft", machine)


def test_default_transitions_cover_all_statuses() -> None:
    assert set(DEFAULT_TRANSITIONS) == {"draft", "published", "archived"}


class TestPublishStamp:
    def test_first_publish_stamps(self) -> None:
        assert publish_stamp(make_item(), "published", NOW) == NOW

    def test_republish_keeps_original(self) -> None:
        item = make_item(status="draft", published_at=datetime(2026, 1, 1, tzinfo=UTC))
        assert publish_stamp(item, "published", NOW) is None

    @pytest.mark.parametrize("status", [None, "draft", "archived"])
    def test_other_statuses_do_not_stamp(self, status) -> None:
        assert publish_stamp(make_item(), status, NOW) is None

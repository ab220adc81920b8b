"""
Content item status machine.

Statuses: draft, published, archived. Which transitions are allowed comes
from rules (content.status_machine); the default allows every transition.
`published_at` is stamped on the first transition into published and is
never cleared afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from contentkit.domain.entities import CONTENT_STATUSES, ContentItem, ContentStatus

DEFAULT_TRANSITIONS: dict[str, list[str]] = {
    status: [other for other in CONTENT_STATUSES if other != status]
    for status in CONTENT_STATUSES
}


def can_transition(
    current: ContentStatus | str,
    new: ContentStatus | str,
    transitions: Mapping[str, list[str]] | None = None,
) -> bool:
    """Determine if a state transition is allowed. Staying put always is."""
    if current == new:
        return True
    allowed = (transitions if transitions is not None else DEFAULT_TRANSITIONS).get(current, [])
    return new in allowed


def publish_stamp(
    item: ContentItem,
    new_status: ContentStatus | str | None,
    now: datetime,
) -> datetime | None:
    """Timestamp to record as published_at, or None when nothing changes."""
    if new_status == "published" and item.published_at is None:
        return now
    return None

"""
Content item manager port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from contentkit.domain.entities import ContentItem, ContentModel, ContentStatus


class ContentItemRepoPort(Protocol):
    """Repository interface for content item persistence."""

    def create(self, item: ContentItem) -> None:
        """Insert a new item. Raises ConflictError if (model, slug) is taken."""
        ...

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        """Get item by ID."""
        ...

    def get_by_slug(self, model_slug: str, slug_or_id: str) -> ContentItem | None:
        """Get item of a model by slug, falling back to its ID."""
        ...

    def query(
        self,
        model_slug: str,
        *,
        status: ContentStatus | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[ContentItem], int]:
        """List a model's items with filters. Returns (items, total_count)."""
        ...

    def update(
        self,
        item_id: UUID,
        *,
        updated_at: datetime,
        status: ContentStatus | None = None,
        data: dict[str, Any] | None = None,
        published_at: datetime | None = None,
    ) -> None:
        """
        Apply a partial update.

        Increments version by exactly one in storage, and only sets
        published_at when the stored value is still empty.
        """
        ...

    def delete(self, item_id: UUID) -> None:
        """Delete item by ID."""
        ...

    def slug_exists(self, model_slug: str, slug: str) -> bool:
        """Probe the item slug namespace of one model."""
        ...

    def count_by_model(self, model_id: UUID) -> int:
        """Number of items owned by a model."""
        ...


class ContentModelLookupPort(Protocol):
    """Read access to content models."""

    def get_by_slug(self, slug: str) -> ContentModel | None:
        """Get model by slug."""
        ...

    def get_by_id(self, model_id: UUID) -> ContentModel | None:
        """Get model by ID."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

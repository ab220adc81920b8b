"""
Content item manager input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from contentkit.domain.entities import ContentItem, ContentStatus
from contentkit.domain.errors import ContentValidationError, summarize

SortOrder = Literal["asc", "desc"]

# --- Input Models ---


@dataclass(frozen=True)
class CreateItemInput:
    """Input for creating a content item under a model."""

    model_slug: str
    data: dict[str, Any]
    author_id: str
    status: ContentStatus = "draft"


@dataclass(frozen=True)
class UpdateItemInput:
    """
    Input for a partial item update.

    `data` is merged over the stored data and the result is re-validated.
    """

    model_slug: str
    slug: str
    data: dict[str, Any] | None = None
    status: ContentStatus | None = None


@dataclass(frozen=True)
class GetItemInput:
    """Input for retrieving an item by slug (or ID) within a model."""

    model_slug: str
    slug: str


@dataclass(frozen=True)
class ListItemsInput:
    """Input for listing a model's items with filters."""

    model_slug: str
    status: ContentStatus | None = None
    search: str | None = None
    sort_by: str = "created_at"
    sort_order: SortOrder = "desc"
    limit: int | None = None
    offset: int = 0


@dataclass(frozen=True)
class DeleteItemInput:
    """Input for deleting an item."""

    model_slug: str
    slug: str


# --- Output Models ---


@dataclass(frozen=True)
class ItemOutput:
    """Output containing a single content item."""

    item: ContentItem | None
    errors: list[ContentValidationError] = field(default_factory=list)
    success: bool = True

    @property
    def message(self) -> str:
        return summarize(self.errors)


@dataclass(frozen=True)
class ItemListOutput:
    """Output containing a page of items and the total matching count."""

    items: list[ContentItem]
    total: int
    limit: int
    offset: int
    errors: list[ContentValidationError] = field(default_factory=list)
    success: bool = True

    @property
    def message(self) -> str:
        return summarize(self.errors)


@dataclass(frozen=True)
class ItemOperationOutput:
    """Output for item operations (create, update, delete)."""

    item: ContentItem | None = None
    errors: list[ContentValidationError] = field(default_factory=list)
    success: bool = True

    @property
    def message(self) -> str:
        return summarize(self.errors)

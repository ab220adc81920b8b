"""
Content model manager port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from contentkit.domain.entities import ContentModel


class ContentModelRepoPort(Protocol):
    """Repository interface for content model persistence."""

    def create(self, model: ContentModel) -> None:
        """Insert a new model. Raises ConflictError if the slug is taken."""
        ...

    def get_by_slug(self, slug: str) -> ContentModel | None:
        """Get model by slug."""
        ...

    def get_by_id(self, model_id: UUID) -> ContentModel | None:
        """Get model by ID."""
        ...

    def list_all(self) -> list[ContentModel]:
        """List all models, newest first."""
        ...

    def update(self, model_id: UUID, changes: dict[str, Any]) -> None:
        """Apply a partial update of name, display_name, description, fields, settings."""
        ...

    def delete(self, model_id: UUID) -> None:
        """Delete model by ID."""
        ...

    def slug_exists(self, slug: str) -> bool:
        """Probe the global model slug namespace."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

"""
Content model manager input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from contentkit.domain.entities import ContentField, ContentModel, ModelSettings
from contentkit.domain.errors import ContentValidationError, summarize

# --- Input Models ---


@dataclass(frozen=True)
class CreateModelInput:
    """Input for creating a content model."""

    name: str
    fields: list[ContentField]
    display_name: str | None = None
    description: str | None = None
    settings: ModelSettings | dict[str, Any] | None = None
    created_by: str | None = None


@dataclass(frozen=True)
class UpdateModelInput:
    """
    Input for a partial model update.

    `updates` may hold name, display_name, description, fields, settings.
    """

    slug: str
    updates: dict[str, Any]


@dataclass(frozen=True)
class GetModelInput:
    """Input for retrieving a model by slug."""

    slug: str


@dataclass(frozen=True)
class ListModelsInput:
    """Input for listing models (newest first)."""


@dataclass(frozen=True)
class DeleteModelInput:
    """Input for deleting a model."""

    slug: str


# --- Output Models ---


@dataclass(frozen=True)
class ModelOutput:
    """Output containing a single content model."""

    model: ContentModel | None
    errors: list[ContentValidationError] = field(default_factory=list)
    success: bool = True

    @property
    def message(self) -> str:
        return summarize(self.errors)


@dataclass(frozen=True)
class ModelListOutput:
    """Output containing all content models."""

    models: list[ContentModel]
    errors: list[ContentValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ModelOperationOutput:
    """Output for model operations (create, update, delete)."""

    model: ContentModel | None = None
    errors: list[ContentValidationError] = field(default_factory=list)
    success: bool = True

    @property
    def message(self) -> str:
        return summarize(self.errors)

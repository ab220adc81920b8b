from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from contentkit.domain.entities import ContentField, ContentItem, ContentStatus, ModelSettings


# --- Content Models ---
class ModelCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    display_name: str | None = Field(default=None, alias="displayName")
    description: str | None = None
    fields: list[ContentField]
    settings: ModelSettings | None = None


class ModelUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    description: str | None = None
    fields: list[ContentField] | None = None
    settings: ModelSettings | None = None


# --- Content Items ---
class ItemCreateRequest(BaseModel):
    status: ContentStatus = "draft"
    data: dict[str, Any]


class ItemUpdateRequest(BaseModel):
    status: ContentStatus | None = None
    data: dict[str, Any] | None = None


class ItemListResponse(BaseModel):
    items: list[ContentItem]
    total: int
    limit: int
    offset: int

"""
Domain entities for contentkit.

A ContentModel is a runtime-defined schema (an ordered list of ContentFields)
and a ContentItem is one record whose `data` conforms to that schema.

Invariants:
- field names are unique within a model
- model slugs are unique across all models
- item slugs are unique within their owning model
- item `data` keys are exactly the model's field names after processing
- `version` starts at 1 and grows by exactly 1 per update
"""

from datetime import UTC, datetime
from typing import Any, Literal, get_args
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
FieldType = Literal[
    "text",
    "richtext",
    "number",
    "boolean",
    "date",
    "datetime",
    "email",
    "url",
    "slug",
    "json",
    "reference",
    "media",
    "select",
    "multiselect",
    "array",
]
# Arrays cannot nest arrays.
ArrayItemType = Literal[
    "text",
    "richtext",
    "number",
    "boolean",
    "date",
    "datetime",
    "email",
    "url",
    "slug",
    "json",
    "reference",
    "media",
    "select",
    "multiselect",
]
ReferenceType = Literal["one", "many"]
ContentStatus = Literal["draft", "published", "archived"]

FIELD_TYPES: tuple[str, ...] = get_args(FieldType)
CONTENT_STATUSES: tuple[str, ...] = get_args(ContentStatus)


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Fields ---

class FieldValidation(BaseModel):
    required: bool = False
    min: int | None = None
    max: int | None = None
    pattern: str | None = None
    unique: bool = False
    enum: list[str] | None = None


class FieldOption(BaseModel):
    label: str
    value: str


class ContentField(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    type: FieldType
    label: str | None = None
    description: str | None = None
    validation: FieldValidation | None = None
    default_value: Any = Field(default=None, alias="defaultValue")

    # reference fields
    reference_to: str | None = Field(default=None, alias="referenceTo")
    reference_type: ReferenceType | None = Field(default=None, alias="referenceType")

    # select / multiselect fields
    options: list[FieldOption] | None = None

    # array fields
    array_of: ArrayItemType | None = Field(default=None, alias="arrayOf")
    array_reference_to: str | None = Field(default=None, alias="arrayReferenceTo")

    @property
    def required(self) -> bool:
        return bool(self.validation and self.validation.required)


# --- Models ---

class ModelSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    singleton: bool = False
    drafts: bool = True
    versioning: bool = False
    timestamps: bool = True
    slug_field: str | None = Field(default=None, alias="slugField")


class ContentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    slug: str
    display_name: str = Field(alias="displayName")
    description: str | None = None
    fields: list[ContentField] = Field(default_factory=list)
    settings: ModelSettings = Field(default_factory=ModelSettings)
    created_by: str | None = Field(default=None, alias="createdBy")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


# --- Items ---

class ContentItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    id: UUID = Field(default_factory=uuid4)
    model_id: UUID = Field(alias="modelId")
    model_slug: str = Field(alias="modelSlug")
    slug: str | None = None
    status: ContentStatus = "draft"
    published_at: datetime | None = Field(default=None, alias="publishedAt")
    data: dict[str, Any] = Field(default_factory=dict)
    author_id: str = Field(alias="authorId")
    version: int = 1
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

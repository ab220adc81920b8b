from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from contentkit.domain.entities import CONTENT_STATUSES
from contentkit.domain.state import DEFAULT_TRANSITIONS


class ProjectRules(BaseModel):
    slug: str = "contentkit"
    rules_version: str = "1"


class SlugRules(BaseModel):
    max_attempts: int = Field(default=100, ge=1)


class DataRules(BaseModel):
    unknown_keys: Literal["ignore", "reject"] = "ignore"


class ListingRules(BaseModel):
    default_limit: int = Field(default=20, ge=1)
    max_limit: int = Field(default=100, ge=1)
    sortable_fields: list[str] = Field(
        default_factory=lambda: [
            "created_at",
            "updated_at",
            "published_at",
            "slug",
            "status",
            "version",
        ]
    )

    @model_validator(mode="after")
    def _default_within_max(self) -> "ListingRules":
        if self.default_limit > self.max_limit:
            raise ValueError("default_limit must not exceed max_limit")
        return self


class ModelDefaults(BaseModel):
    singleton: bool = False
    drafts: bool = True
    versioning: bool = False
    timestamps: bool = True


class ContentRules(BaseModel):
    slugs: SlugRules = Field(default_factory=SlugRules)
    data: DataRules = Field(default_factory=DataRules)
    listing: ListingRules = Field(default_factory=ListingRules)
    model_defaults: ModelDefaults = Field(default_factory=ModelDefaults)
    status_machine: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_TRANSITIONS.items()}
    )

    model_config = ConfigDict(protected_namespaces=())

    @model_validator(mode="after")
    def _known_statuses(self) -> "ContentRules":
        for source, targets in self.status_machine.items():
            for status in [source, *targets]:
                if status not in CONTENT_STATUSES:
                    raise ValueError(f"Unknown status '{status}' in status_machine")
        return self


class Rules(BaseModel):
    project: ProjectRules = Field(default_factory=ProjectRules)
    content: ContentRules = Field(default_factory=ContentRules)

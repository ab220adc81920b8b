"""In-memory content storage adapters.

These adapters implement the content model and content item repository
ports with the same semantics as the SQLite adapters: slug uniqueness is
enforced (ConflictError), versions are incremented by the store, the first
publish timestamp is kept, and deleting a model removes its items.
Suitable for tests and single-process deployments.
"""

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from contentkit.domain.entities import ContentItem, ContentModel
from contentkit.domain.errors import ConflictError

_MISSING_LAST = {"asc": "\uffff", "desc": ""}


class InMemoryContentStore:
    """Shared backing store so item storage can see model deletions."""

    def __init__(self) -> None:
        self.models: dict[UUID, ContentModel] = {}
        self.items: dict[UUID, ContentItem] = {}

    def clear(self) -> None:
        """Clear everything - useful for testing."""
        self.models.clear()
        self.items.clear()


class InMemoryContentModelRepo:
    def __init__(self, store: InMemoryContentStore | None = None) -> None:
        self.store = store or InMemoryContentStore()

    def create(self, model: ContentModel) -> None:
        if self.slug_exists(model.slug):
            raise ConflictError(f"Content model slug '{model.slug}' already exists")
        self.store.models[model.id] = model.model_copy(deep=True)

    def get_by_slug(self, slug: str) -> ContentModel | None:
        for model in self.store.models.values():
            if model.slug == slug:
                return model.model_copy(deep=True)
        return None

    def get_by_id(self, model_id: UUID) -> ContentModel | None:
        model = self.store.models.get(model_id)
        return model.model_copy(deep=True) if model else None

    def list_all(self) -> list[ContentModel]:
        # dicts keep insertion order; reverse it to break created_at ties
        models = list(reversed(self.store.models.values()))
        models.sort(key=lambda m: m.created_at, reverse=True)
        return [m.model_copy(deep=True) for m in models]

    def update(self, model_id: UUID, changes: dict[str, Any]) -> None:
        model = self.store.models.get(model_id)
        if model is None:
            return
        self.store.models[model_id] = model.model_copy(update=changes, deep=True)

    def delete(self, model_id: UUID) -> None:
        self.store.models.pop(model_id, None)
        for item_id in [i.id for i in self.store.items.values() if i.model_id == model_id]:
            del self.store.items[item_id]

    def slug_exists(self, slug: str) -> bool:
        return any(m.slug == slug for m in self.store.models.values())


class InMemoryContentItemRepo:
    def __init__(self, store: InMemoryContentStore | None = None) -> None:
        self.store = store or InMemoryContentStore()

    def create(self, item: ContentItem) -> None:
        if item.slug is not None and any(
            i.model_id == item.model_id and i.slug == item.slug for i in self.store.items.values()
        ):
            raise ConflictError(f"Item slug '{item.slug}' already exists in '{item.model_slug}'")
        self.store.items[item.id] = item.model_copy(deep=True)

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        item = self.store.items.get(item_id)
        return item.model_copy(deep=True) if item else None

    def get_by_slug(self, model_slug: str, slug_or_id: str) -> ContentItem | None:
        for item in self.store.items.values():
            if item.model_slug != model_slug:
                continue
            if item.slug == slug_or_id or str(item.id) == slug_or_id:
                return item.model_copy(deep=True)
        return None

    def query(
        self,
        model_slug: str,
        *,
        status: str | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[ContentItem], int]:
        matches = [i for i in self.store.items.values() if i.model_slug == model_slug]
        if status:
            matches = [i for i in matches if i.status == status]
        if search:
            needle = search.lower()
            matches = [
                i
                for i in matches
                if needle in json.dumps(i.data, ensure_ascii=False).lower()
                or needle in (i.slug or "").lower()
            ]

        total = len(matches)
        descending = sort_order.lower() != "asc"

        def sort_key(item: ContentItem) -> Any:
            value = getattr(item, sort_by)
            if value is None:
                return _MISSING_LAST["desc" if descending else "asc"]
            if isinstance(value, datetime):
                return value.isoformat()
            return value

        if descending:
            matches.reverse()
        matches.sort(key=sort_key, reverse=descending)

        window = matches[offset:] if limit is None else matches[offset : offset + limit]
        return [i.model_copy(deep=True) for i in window], total

    def update(
        self,
        item_id: UUID,
        *,
        updated_at: datetime,
        status: str | None = None,
        data: dict[str, Any] | None = None,
        published_at: datetime | None = None,
    ) -> None:
        item = self.store.items.get(item_id)
        if item is None:
            return
        changes: dict[str, Any] = {"updated_at": updated_at, "version": item.version + 1}
        if status is not None:
            changes["status"] = status
        if data is not None:
            changes["data"] = data
        if published_at is not None and item.published_at is None:
            changes["published_at"] = published_at
        self.store.items[item_id] = item.model_copy(update=changes, deep=True)

    def delete(self, item_id: UUID) -> None:
        self.store.items.pop(item_id, None)

    def slug_exists(self, model_slug: str, slug: str) -> bool:
        return any(
            i.model_slug == model_slug and i.slug == slug for i in self.store.items.values()
        )

    def count_by_model(self, model_id: UUID) -> int:
        return sum(1 for i in self.store.items.values() if i.model_id == model_id)

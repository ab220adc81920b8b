from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, Response

from contentkit.api.deps import (
    get_author_id,
    get_content_rules,
    get_item_repo,
    get_model_repo,
    get_time_port,
)
from contentkit.api.errors import raise_for_errors
from contentkit.api.schemas import ItemCreateRequest, ItemListResponse, ItemUpdateRequest
from contentkit.components.content import (
    CreateItemInput,
    DeleteItemInput,
    GetItemInput,
    ListItemsInput,
    UpdateItemInput,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from contentkit.domain.entities import ContentItem, ContentStatus
from contentkit.rules.models import ContentRules

router = APIRouter()


@router.get("/{model}", response_model=ItemListResponse)
def list_items(
    model: str,
    status: ContentStatus | None = None,
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    limit: int | None = Query(default=None),
    offset: int = 0,
    items: Any = Depends(get_item_repo),
    models: Any = Depends(get_model_repo),
    rules: ContentRules = Depends(get_content_rules),
) -> ItemListResponse:
    """List a model's items with filtering, sorting and pagination."""
    inp = ListItemsInput(
        model_slug=model,
        status=status,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    result = run_list(inp, items=items, models=models, rules=rules)
    raise_for_errors(result.errors)
    return ItemListResponse(
        items=result.items,
        total=result.total,
        limit=result.limit,
        offset=result.offset,
    )


@router.post("/{model}", response_model=ContentItem, status_code=201)
def create_item(
    model: str,
    req: ItemCreateRequest,
    author_id: str = Depends(get_author_id),
    items: Any = Depends(get_item_repo),
    models: Any = Depends(get_model_repo),
    time: Any = Depends(get_time_port),
    rules: ContentRules = Depends(get_content_rules),
) -> ContentItem:
    inp = CreateItemInput(model_slug=model, data=req.data, author_id=author_id, status=req.status)
    result = run_create(inp, items=items, models=models, time=time, rules=rules)
    raise_for_errors(result.errors)
    assert result.item is not None
    return result.item


@router.get("/{model}/{slug}", response_model=ContentItem)
def get_item(
    model: str,
    slug: str,
    items: Any = Depends(get_item_repo),
) -> ContentItem:
    """Fetch one item by slug or id."""
    result = run_get(GetItemInput(model_slug=model, slug=slug), items=items)
    raise_for_errors(result.errors)
    assert result.item is not None
    return result.item


@router.put("/{model}/{slug}", response_model=ContentItem)
def update_item(
    model: str,
    slug: str,
    req: ItemUpdateRequest,
    author_id: str = Depends(get_author_id),
    items: Any = Depends(get_item_repo),
    models: Any = Depends(get_model_repo),
    time: Any = Depends(get_time_port),
    rules: ContentRules = Depends(get_content_rules),
) -> ContentItem:
    inp = UpdateItemInput(model_slug=model, slug=slug, data=req.data, status=req.status)
    result = run_update(inp, items=items, models=models, time=time, rules=rules)
    raise_for_errors(result.errors)
    assert result.item is not None
    return result.item


@router.delete("/{model}/{slug}", status_code=204)
def delete_item(
    model: str,
    slug: str,
    author_id: str = Depends(get_author_id),
    items: Any = Depends(get_item_repo),
) -> Response:
    result = run_delete(DeleteItemInput(model_slug=model, slug=slug), items=items)
    raise_for_errors(result.errors)
    return Response(status_code=204)

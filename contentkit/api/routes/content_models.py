from typing import Any

from fastapi import APIRouter, Depends, Response

from contentkit.api.deps import get_author_id, get_content_rules, get_model_repo, get_time_port
from contentkit.api.errors import raise_for_errors
from contentkit.api.schemas import ModelCreateRequest, ModelUpdateRequest
from contentkit.components.content_models import (
    CreateModelInput,
    DeleteModelInput,
    GetModelInput,
    ListModelsInput,
    UpdateModelInput,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from contentkit.domain.entities import ContentModel
from contentkit.rules.models import ContentRules

router = APIRouter()


@router.get("", response_model=list[ContentModel])
def list_models(repo: Any = Depends(get_model_repo)) -> list[ContentModel]:
    """List all content models, newest first."""
    result = run_list(ListModelsInput(), repo=repo)
    raise_for_errors(result.errors)
    return result.models


@router.post("", response_model=ContentModel, status_code=201)
def create_model(
    req: ModelCreateRequest,
    author_id: str = Depends(get_author_id),
    repo: Any = Depends(get_model_repo),
    time: Any = Depends(get_time_port),
    rules: ContentRules = Depends(get_content_rules),
) -> ContentModel:
    inp = CreateModelInput(
        name=req.name,
        fields=req.fields,
        display_name=req.display_name,
        description=req.description,
        settings=req.settings,
        created_by=author_id,
    )
    result = run_create(inp, repo=repo, time=time, rules=rules)
    raise_for_errors(result.errors)
    assert result.model is not None
    return result.model


@router.get("/{slug}", response_model=ContentModel)
def get_model(slug: str, repo: Any = Depends(get_model_repo)) -> ContentModel:
    result = run_get(GetModelInput(slug=slug), repo=repo)
    raise_for_errors(result.errors)
    assert result.model is not None
    return result.model


@router.put("/{slug}", response_model=ContentModel)
def update_model(
    slug: str,
    req: ModelUpdateRequest,
    author_id: str = Depends(get_author_id),
    repo: Any = Depends(get_model_repo),
    time: Any = Depends(get_time_port),
) -> ContentModel:
    """Apply a partial update; only keys present in the body change."""
    updates = req.model_dump(exclude_unset=True)
    if req.settings is not None:
        # Keep the caller's partial settings so unset flags stay as stored.
        updates["settings"] = req.settings.model_dump(exclude_unset=True)
    if req.fields is not None:
        updates["fields"] = req.fields

    result = run_update(UpdateModelInput(slug=slug, updates=updates), repo=repo, time=time)
    raise_for_errors(result.errors)
    assert result.model is not None
    return result.model


@router.delete("/{slug}", status_code=204)
def delete_model(
    slug: str,
    author_id: str = Depends(get_author_id),
    repo: Any = Depends(get_model_repo),
) -> Response:
    """Delete a model; its items go with it."""
    result = run_delete(DeleteModelInput(slug=slug), repo=repo)
    raise_for_errors(result.errors)
    return Response(status_code=204)

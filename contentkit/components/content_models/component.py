"""
Content model manager - CRUD for runtime-defined content schemas.

Create runs the model validator, derives a globally unique slug from the
model name and stamps timestamps. Update is partial: fields and settings are
re-validated only when they are part of the update, and the stored record
is re-fetched so callers see what was actually persisted. The slug is fixed
at creation and survives renames.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from contentkit.domain.entities import ContentField, ContentModel, ModelSettings
from contentkit.domain.errors import (
    CONFLICT,
    ConflictError,
    ContentValidationError,
    invalid,
    not_found,
)
from contentkit.domain.schema import validate_model_fields
from contentkit.domain.slug import allocate_slug, slugify
from contentkit.rules.models import ContentRules

from .models import (
    CreateModelInput,
    DeleteModelInput,
    GetModelInput,
    ListModelsInput,
    ModelListOutput,
    ModelOperationOutput,
    ModelOutput,
    UpdateModelInput,
)
from .ports import ContentModelRepoPort, TimePort

logger = logging.getLogger(__name__)

UPDATABLE_KEYS = ("name", "display_name", "description", "fields", "settings")


# --- Parsing helpers ---


def _schema_errors(e: PydanticValidationError, prefix: str) -> list[ContentValidationError]:
    errors = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        where = f"{prefix}.{loc}" if loc else prefix
        errors.append(invalid(f"Invalid {where}: {err['msg']}", field=prefix))
    return errors


def _parse_fields(
    raw: list[ContentField] | list[dict[str, Any]],
) -> tuple[list[ContentField], list[ContentValidationError]]:
    fields: list[ContentField] = []
    errors: list[ContentValidationError] = []
    for i, f in enumerate(raw):
        if isinstance(f, ContentField):
            fields.append(f.model_copy(deep=True))
            continue
        try:
            fields.append(ContentField.model_validate(f))
        except PydanticValidationError as e:
            errors.extend(_schema_errors(e, f"fields[{i}]"))
    return fields, errors


def _merge_settings(
    base: dict[str, Any],
    overrides: ModelSettings | dict[str, Any] | None,
) -> tuple[ModelSettings | None, list[ContentValidationError]]:
    try:
        if isinstance(overrides, ModelSettings):
            partial = overrides.model_dump(exclude_unset=True)
        elif overrides:
            partial = ModelSettings.model_validate(overrides).model_dump(exclude_unset=True)
        else:
            partial = {}
        return ModelSettings.model_validate({**base, **partial}), []
    except PydanticValidationError as e:
        return None, _schema_errors(e, "settings")


# --- Component Entry Points ---


def run_get(inp: GetModelInput, *, repo: ContentModelRepoPort) -> ModelOutput:
    """
    Get a content model by slug.

    Args:
        inp: Input containing the model slug.
        repo: Content model repository port.

    Returns:
        ModelOutput with the model or a not_found error.
    """
    model = repo.get_by_slug(inp.slug)
    if model is None:
        return ModelOutput(
            model=None,
            errors=[not_found(f"Content model '{inp.slug}' not found")],
            success=False,
        )
    return ModelOutput(model=model)


def run_list(inp: ListModelsInput, *, repo: ContentModelRepoPort) -> ModelListOutput:
    """List all content models, newest first."""
    return ModelListOutput(models=repo.list_all())


def run_create(
    inp: CreateModelInput,
    *,
    repo: ContentModelRepoPort,
    time: TimePort,
    rules: ContentRules | None = None,
) -> ModelOperationOutput:
    """
    Create a new content model.

    Args:
        inp: Input containing name, fields and optional settings.
        repo: Content model repository port.
        time: Time port for timestamps.
        rules: Content rules (slug ceiling, model defaults).

    Returns:
        ModelOperationOutput with the created model or validation errors.
    """
    rules = rules or ContentRules()
    name = (inp.name or "").strip()

    errors: list[ContentValidationError] = []
    if not name:
        errors.append(invalid("Model name is required", field="name"))
    elif not slugify(name):
        errors.append(invalid("Model name must contain at least one letter or digit", "name"))

    fields, field_errors = _parse_fields(inp.fields)
    errors.extend(field_errors)

    settings, settings_errors = _merge_settings(rules.model_defaults.model_dump(), inp.settings)
    errors.extend(settings_errors)

    if not field_errors and not settings_errors:
        errors.extend(validate_model_fields(fields, settings))

    if errors or settings is None:
        return ModelOperationOutput(errors=errors, success=False)

    now = time.now_utc()

    for _ in range(rules.slugs.max_attempts):
        slug = allocate_slug(name, repo.slug_exists, max_attempts=rules.slugs.max_attempts)

        model = ContentModel(
            id=uuid4(),
            name=name,
            slug=slug,
            display_name=(inp.display_name or "").strip() or name,
            description=inp.description,
            fields=fields,
            settings=settings,
            created_by=inp.created_by,
            created_at=now,
            updated_at=now,
        )
        try:
            repo.create(model)
        except ConflictError:
            logger.warning("Model slug %r claimed concurrently, allocating again", slug)
            continue

        logger.info("Created content model %s (%s)", model.slug, model.id)
        return ModelOperationOutput(model=model)

    return ModelOperationOutput(
        errors=[
            ContentValidationError(
                code=CONFLICT,
                message=f"Could not allocate a unique slug for model '{name}'",
            )
        ],
        success=False,
    )


def run_update(
    inp: UpdateModelInput,
    *,
    repo: ContentModelRepoPort,
    time: TimePort,
) -> ModelOperationOutput:
    """
    Partially update a content model.

    Args:
        inp: Input containing the model slug and the updates to apply.
        repo: Content model repository port.
        time: Time port for timestamps.

    Returns:
        ModelOperationOutput with the re-fetched model or errors.
    """
    model = repo.get_by_slug(inp.slug)
    if model is None:
        return ModelOperationOutput(
            errors=[not_found(f"Content model '{inp.slug}' not found")],
            success=False,
        )

    updates = {k: v for k, v in inp.updates.items() if k in UPDATABLE_KEYS}
    changes: dict[str, Any] = {}
    errors: list[ContentValidationError] = []

    if "name" in updates:
        name = (updates["name"] or "").strip()
        if not name:
            errors.append(invalid("Model name is required", field="name"))
        changes["name"] = name

    if "display_name" in updates:
        display_name = (updates["display_name"] or "").strip()
        changes["display_name"] = display_name or changes.get("name", model.name)

    if "description" in updates:
        changes["description"] = updates["description"]

    fields = model.fields
    settings = model.settings
    parse_failed = False

    if updates.get("fields") is not None:
        fields, field_errors = _parse_fields(updates["fields"])
        errors.extend(field_errors)
        parse_failed = parse_failed or bool(field_errors)
        changes["fields"] = fields

    if updates.get("settings") is not None:
        merged, settings_errors = _merge_settings(model.settings.model_dump(), updates["settings"])
        errors.extend(settings_errors)
        parse_failed = parse_failed or bool(settings_errors)
        if merged is not None:
            settings = merged
            changes["settings"] = settings

    if ("fields" in changes or "settings" in changes) and not parse_failed:
        errors.extend(validate_model_fields(fields, settings))

    if errors:
        return ModelOperationOutput(model=model, errors=errors, success=False)

    changes["updated_at"] = time.now_utc()
    repo.update(model.id, changes)

    updated = repo.get_by_id(model.id)
    if updated is None:
        return ModelOperationOutput(
            errors=[not_found("Failed to retrieve updated content model")],
            success=False,
        )

    logger.info("Updated content model %s (%s)", updated.slug, ", ".join(sorted(changes)))
    return ModelOperationOutput(model=updated)


def run_delete(inp: DeleteModelInput, *, repo: ContentModelRepoPort) -> ModelOperationOutput:
    """
    Delete a content model.

    What happens to the model's items is decided by the storage layer
    (the bundled adapters cascade).
    """
    model = repo.get_by_slug(inp.slug)
    if model is None:
        return ModelOperationOutput(
            errors=[not_found(f"Content model '{inp.slug}' not found")],
            success=False,
        )

    repo.delete(model.id)
    logger.info("Deleted content model %s (%s)", model.slug, model.id)
    return ModelOperationOutput(model=None)


def run(
    inp: (
        GetModelInput
        | ListModelsInput
        | CreateModelInput
        | UpdateModelInput
        | DeleteModelInput
    ),
    *,
    repo: ContentModelRepoPort,
    time: TimePort | None = None,
    rules: ContentRules | None = None,
) -> ModelOutput | ModelListOutput | ModelOperationOutput:
    """
    Main entry point for the content model component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, GetModelInput):
        return run_get(inp, repo=repo)

    elif isinstance(inp, ListModelsInput):
        return run_list(inp, repo=repo)

    elif isinstance(inp, CreateModelInput):
        if time is None:
            raise ValueError("TimePort is required for create operations")
        return run_create(inp, repo=repo, time=time, rules=rules)

    elif isinstance(inp, UpdateModelInput):
        if time is None:
            raise ValueError("TimePort is required for update operations")
        return run_update(inp, repo=repo, time=time)

    elif isinstance(inp, DeleteModelInput):
        return run_delete(inp, repo=repo)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")

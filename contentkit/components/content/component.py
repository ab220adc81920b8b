"""
Content item manager - validated CRUD and lifecycle for content items.

Every write runs the model's fields through the data validator. Items are
versioned: creation stores version 1 and every successful update bumps the
version by exactly one inside storage (no read-modify-write here).

Status machine:
- draft | published | archived, initial status chosen by the caller
- allowed transitions come from rules.content.status_machine
- published_at is stamped on the first transition into published only

Slugs:
- derived from the model's slugField value, unique within the model
- allocation probes storage; a storage conflict re-runs the allocation
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from contentkit.domain.entities import CONTENT_STATUSES, ContentItem, ContentModel
from contentkit.domain.errors import (
    CONFLICT,
    ConflictError,
    ContentValidationError,
    invalid,
    not_found,
)
from contentkit.domain.fields import is_absent, validate_data
from contentkit.domain.slug import allocate_slug
from contentkit.domain.state import can_transition, publish_stamp
from contentkit.rules.models import ContentRules

from .models import (
    CreateItemInput,
    DeleteItemInput,
    GetItemInput,
    ItemListOutput,
    ItemOperationOutput,
    ItemOutput,
    ListItemsInput,
    UpdateItemInput,
)
from .ports import ContentItemRepoPort, ContentModelLookupPort, TimePort

logger = logging.getLogger(__name__)


# --- Validation Functions ---


def _validate_status(status: str) -> list[ContentValidationError]:
    if status not in CONTENT_STATUSES:
        return [
            invalid(
                f"Status must be one of: {', '.join(CONTENT_STATUSES)}",
                field="status",
            )
        ]
    return []


def _validate_payload(
    model: ContentModel,
    data: dict[str, Any],
    rules: ContentRules,
    stored: dict[str, Any] | None = None,
) -> tuple[dict[str, Any] | None, list[ContentValidationError]]:
    result = validate_data(
        model.fields, data, unknown_keys=rules.data.unknown_keys, stored=stored
    )
    errors = [invalid(message, field="data") for message in result.errors]
    return result.data, errors


def _slug_source(model: ContentModel, data: dict[str, Any]) -> str | None:
    slug_field = model.settings.slug_field
    if not slug_field:
        return None
    value = data.get(slug_field)
    if is_absent(value):
        return None
    return str(value)


def _model_not_found(slug: str) -> ContentValidationError:
    return not_found(f"Content model '{slug}' not found")


# --- Component Entry Points ---


def run_get(
    inp: GetItemInput,
    *,
    items: ContentItemRepoPort,
) -> ItemOutput:
    """
    Get an item of a model by slug or ID.

    Args:
        inp: Input containing model slug and item slug (or ID).
        items: Content item repository port.

    Returns:
        ItemOutput with the item or a not_found error.
    """
    item = items.get_by_slug(inp.model_slug, inp.slug)
    if item is None:
        return ItemOutput(item=None, errors=[not_found("Content item not found")], success=False)
    return ItemOutput(item=item)


def run_list(
    inp: ListItemsInput,
    *,
    items: ContentItemRepoPort,
    models: ContentModelLookupPort,
    rules: ContentRules | None = None,
) -> ItemListOutput:
    """
    List a model's items with filters.

    The total is counted over every matching row, independent of the
    limit/offset window.

    Args:
        inp: Input containing model slug and filters.
        items: Content item repository port.
        models: Content model lookup port.
        rules: Content rules (listing limits, sortable fields).

    Returns:
        ItemListOutput with the page and the total count.
    """
    rules = rules or ContentRules()
    listing = rules.listing
    limit = listing.default_limit if inp.limit is None else min(inp.limit, listing.max_limit)

    errors: list[ContentValidationError] = []
    if inp.status is not None:
        errors.extend(_validate_status(inp.status))
    if inp.sort_by not in listing.sortable_fields:
        errors.append(
            invalid(
                f"Cannot sort by '{inp.sort_by}'. Allowed: {', '.join(listing.sortable_fields)}",
                field="sort_by",
            )
        )
    if inp.sort_order not in ("asc", "desc"):
        errors.append(invalid("Sort order must be 'asc' or 'desc'", field="sort_order"))
    if limit < 1:
        errors.append(invalid("Limit must be at least 1", field="limit"))
    if inp.offset < 0:
        errors.append(invalid("Offset must not be negative", field="offset"))

    if errors:
        return ItemListOutput(
            items=[], total=0, limit=limit, offset=inp.offset, errors=errors, success=False
        )

    if models.get_by_slug(inp.model_slug) is None:
        return ItemListOutput(
            items=[],
            total=0,
            limit=limit,
            offset=inp.offset,
            errors=[_model_not_found(inp.model_slug)],
            success=False,
        )

    page, total = items.query(
        inp.model_slug,
        status=inp.status,
        search=inp.search or None,
        sort_by=inp.sort_by,
        sort_order=inp.sort_order,
        limit=limit,
        offset=inp.offset,
    )
    return ItemListOutput(items=page, total=total, limit=limit, offset=inp.offset)


def run_create(
    inp: CreateItemInput,
    *,
    items: ContentItemRepoPort,
    models: ContentModelLookupPort,
    time: TimePort,
    rules: ContentRules | None = None,
) -> ItemOperationOutput:
    """
    Create a content item under a model.

    Args:
        inp: Input containing model slug, raw data, author and status.
        items: Content item repository port.
        models: Content model lookup port.
        time: Time port for timestamps.
        rules: Content rules (unknown keys policy, slug ceiling).

    Returns:
        ItemOperationOutput with the created item or errors.
    """
    rules = rules or ContentRules()

    model = models.get_by_slug(inp.model_slug)
    if model is None:
        return ItemOperationOutput(errors=[_model_not_found(inp.model_slug)], success=False)

    errors = _validate_status(inp.status)
    data, data_errors = _validate_payload(model, inp.data, rules)
    errors.extend(data_errors)
    if errors or data is None:
        return ItemOperationOutput(errors=errors, success=False)

    if model.settings.singleton and items.count_by_model(model.id) > 0:
        return ItemOperationOutput(
            errors=[
                ContentValidationError(
                    code=CONFLICT,
                    message=f"Content model '{model.slug}' is a singleton and already has an item",
                )
            ],
            success=False,
        )

    now = time.now_utc()
    source = _slug_source(model, data)

    for _ in range(rules.slugs.max_attempts):
        slug = None
        if source is not None:
            slug = allocate_slug(
                source,
                lambda candidate: items.slug_exists(model.slug, candidate),
                max_attempts=rules.slugs.max_attempts,
            ) or None

        item = ContentItem(
            id=uuid4(),
            model_id=model.id,
            model_slug=model.slug,
            slug=slug,
            status=inp.status,
            published_at=now if inp.status == "published" else None,
            data=data,
            author_id=inp.author_id,
            version=1,
            created_at=now,
            updated_at=now,
        )
        try:
            items.create(item)
        except ConflictError:
            if slug is None:
                raise
            logger.warning(
                "Item slug %r in %s claimed concurrently, allocating again", slug, model.slug
            )
            continue

        logger.info("Created %s item %s (%s)", model.slug, item.slug or "-", item.id)
        return ItemOperationOutput(item=item)

    return ItemOperationOutput(
        errors=[
            ContentValidationError(
                code=CONFLICT,
                message=f"Could not allocate a unique slug in '{model.slug}'",
            )
        ],
        success=False,
    )


def run_update(
    inp: UpdateItemInput,
    *,
    items: ContentItemRepoPort,
    models: ContentModelLookupPort,
    time: TimePort,
    rules: ContentRules | None = None,
) -> ItemOperationOutput:
    """
    Partially update a content item.

    Args:
        inp: Input containing model slug, item slug and the changes.
        items: Content item repository port.
        models: Content model lookup port.
        time: Time port for timestamps.
        rules: Content rules (status machine, unknown keys policy).

    Returns:
        ItemOperationOutput with the re-fetched item or errors.
    """
    rules = rules or ContentRules()

    item = items.get_by_slug(inp.model_slug, inp.slug)
    if item is None:
        return ItemOperationOutput(errors=[not_found("Content item not found")], success=False)

    errors: list[ContentValidationError] = []
    data: dict[str, Any] | None = None

    if inp.data is not None:
        model = models.get_by_id(item.model_id)
        if model is None:
            return ItemOperationOutput(
                errors=[_model_not_found(item.model_slug)], success=False
            )
        # Only the keys sent now are coerced; stored values are already normalized
        data, data_errors = _validate_payload(model, inp.data, rules, stored=item.data)
        errors.extend(data_errors)

    if inp.status is not None:
        status_errors = _validate_status(inp.status)
        if not status_errors and not can_transition(
            item.status, inp.status, rules.status_machine
        ):
            allowed = rules.status_machine.get(item.status, [])
            status_errors = [
                invalid(
                    f"Cannot transition from '{item.status}' to '{inp.status}'. "
                    f"Allowed: {allowed}",
                    field="status",
                )
            ]
        errors.extend(status_errors)

    if errors:
        return ItemOperationOutput(item=item, errors=errors, success=False)

    now = time.now_utc()
    items.update(
        item.id,
        updated_at=now,
        status=inp.status,
        data=data,
        published_at=publish_stamp(item, inp.status, now),
    )

    updated = items.get_by_id(item.id)
    if updated is None:
        return ItemOperationOutput(
            errors=[not_found("Failed to retrieve updated content item")], success=False
        )

    logger.info(
        "Updated %s item %s to version %d", updated.model_slug, updated.id, updated.version
    )
    return ItemOperationOutput(item=updated)


def run_delete(
    inp: DeleteItemInput,
    *,
    items: ContentItemRepoPort,
) -> ItemOperationOutput:
    """
    Delete a content item.

    Args:
        inp: Input containing model slug and item slug (or ID).
        items: Content item repository port.

    Returns:
        ItemOperationOutput indicating success or failure.
    """
    item = items.get_by_slug(inp.model_slug, inp.slug)
    if item is None:
        return ItemOperationOutput(errors=[not_found("Content item not found")], success=False)

    items.delete(item.id)
    logger.info("Deleted %s item %s", item.model_slug, item.id)
    return ItemOperationOutput(item=None)


def run(
    inp: (
        GetItemInput
        | ListItemsInput
        | CreateItemInput
        | UpdateItemInput
        | DeleteItemInput
    ),
    *,
    items: ContentItemRepoPort,
    models: ContentModelLookupPort,
    time: TimePort | None = None,
    rules: ContentRules | None = None,
) -> ItemOutput | ItemListOutput | ItemOperationOutput:
    """
    Main entry point for the content item component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, GetItemInput):
        return run_get(inp, items=items)

    elif isinstance(inp, ListItemsInput):
        return run_list(inp, items=items, models=models, rules=rules)

    elif isinstance(inp, CreateItemInput):
        if time is None:
            raise ValueError("TimePort is required for create operations")
        return run_create(inp, items=items, models=models, time=time, rules=rules)

    elif isinstance(inp, UpdateItemInput):
        if time is None:
            raise ValueError("TimePort is required for update operations")
        return run_update(inp, items=items, models=models, time=time, rules=rules)

    elif isinstance(inp, DeleteItemInput):
        return run_delete(inp, items=items)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")

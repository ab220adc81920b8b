"""
Structural validation of content model definitions.

Runs before a model is persisted. Any error aborts the create/update so a
partially valid model is never stored.
"""

from __future__ import annotations

import re

from contentkit.domain.entities import ContentField, ModelSettings
from contentkit.domain.errors import ContentValidationError, invalid


def validate_model_fields(
    fields: list[ContentField],
    settings: ModelSettings | None = None,
) -> list[ContentValidationError]:
    """
    Validate a proposed field list (and the settings that refer to it).

    Returns list of validation errors (empty if valid).
    """
    errors: list[ContentValidationError] = []

    if not fields:
        errors.append(invalid("At least one field is required", field="fields"))

    seen: set[str] = set()
    reported: set[str] = set()

    for f in fields:
        if f.name in seen:
            if f.name not in reported:
                errors.append(invalid(f"Duplicate field name: {f.name}", field=f.name))
                reported.add(f.name)
            continue
        seen.add(f.name)

        if f.type == "reference" and not f.reference_to:
            errors.append(
                invalid(f"Reference field '{f.name}' must specify referenceTo", field=f.name)
            )

        if f.type in ("select", "multiselect") and not f.options:
            errors.append(invalid(f"Select field '{f.name}' must have options", field=f.name))

        if f.type == "array" and f.array_of == "reference" and not f.array_reference_to:
            errors.append(
                invalid(
                    f"Array field '{f.name}' of references must specify arrayReferenceTo",
                    field=f.name,
                )
            )

        if f.validation and f.validation.pattern:
            try:
                re.compile(f.validation.pattern)
            except re.error:
                errors.append(
                    invalid(f"Field '{f.name}' has an invalid pattern", field=f.name)
                )

    if settings is not None and settings.slug_field and settings.slug_field not in seen:
        errors.append(
            invalid(
                f"Slug field '{settings.slug_field}' is not a field of this model",
                field="settings",
            )
        )

    return errors

"""
Field type registry and data validation/coercion.

Each field type maps to a pure coercion function. A coercer receives a
present (non-absent) value and returns the normalized value, or raises
FieldCoercionError with the reason appended to "Field '<name>' ...".

validate_data() walks the model's fields in declaration order, collects
every error and only returns normalized data when no error occurred.
"""

from __future__ import annotations

import copy
import json
import math
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any, Literal
from urllib.parse import urlparse

from contentkit.domain.entities import FIELD_TYPES, ContentField
from contentkit.domain.slug import slugify

UnknownKeyPolicy = Literal["ignore", "reject"]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


class FieldCoercionError(ValueError):
    """Raised by a coercer when a value cannot be accepted."""


Coercer = Callable[[Any], Any]


# --- Coercers ---


def _passthrough(value: Any) -> Any:
    # Copy so that no structured value is shared between items.
    return copy.deepcopy(value)


def _coerce_email(value: Any) -> Any:
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
        raise FieldCoercionError("must be a valid email")
    return value


def _coerce_url(value: Any) -> Any:
    if not isinstance(value, str):
        raise FieldCoercionError("must be a valid URL")
    try:
        parsed = urlparse(value.strip())
    except ValueError as e:
        raise FieldCoercionError("must be a valid URL") from e
    if not parsed.scheme or not parsed.netloc:
        raise FieldCoercionError("must be a valid URL")
    return value


def _coerce_number(value: Any) -> Any:
    # bool is int in python
    if isinstance(value, bool):
        raise FieldCoercionError("must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FieldCoercionError("must be a number")
        return value
    if isinstance(value, str):
        text = value.strip()
        # int() and float() accept digit grouping like "1_000"
        if "_" in text:
            raise FieldCoercionError("must be a number")
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError as e:
            raise FieldCoercionError("must be a number") from e
        if not math.isfinite(number):
            raise FieldCoercionError("must be a number")
        return number
    raise FieldCoercionError("must be a number")


def _coerce_boolean(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise FieldCoercionError("must be a boolean")


def _coerce_slug(value: Any) -> Any:
    return slugify(str(value))


def format_timestamp(dt: datetime) -> str:
    """Canonical UTC timestamp, e.g. 2026-01-02T03:04:05.000Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, bool):
        raise FieldCoercionError("must be a valid date")
    if isinstance(value, int | float):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError) as e:
            raise FieldCoercionError("must be a valid date") from e
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise FieldCoercionError("must be a valid date") from e
    raise FieldCoercionError("must be a valid date")


def _coerce_datetime(value: Any) -> Any:
    return format_timestamp(_parse_datetime(value))


def _coerce_json(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise FieldCoercionError("must be valid JSON") from e
    return copy.deepcopy(value)


FIELD_COERCERS: dict[str, Coercer] = {
    "text": _passthrough,
    "richtext": _passthrough,
    "number": _coerce_number,
    "boolean": _coerce_boolean,
    "date": _coerce_datetime,
    "datetime": _coerce_datetime,
    "email": _coerce_email,
    "url": _coerce_url,
    "slug": _coerce_slug,
    "json": _coerce_json,
    "reference": _passthrough,
    "media": _passthrough,
    "select": _passthrough,
    "multiselect": _passthrough,
    "array": _passthrough,
}

if set(FIELD_COERCERS) != set(FIELD_TYPES):  # pragma: no cover
    raise RuntimeError("Every field type needs a registered coercer")


def get_coercer(field_type: str) -> Coercer:
    """Look up the coercer for a field type."""
    try:
        return FIELD_COERCERS[field_type]
    except KeyError as e:
        raise ValueError(f"Unknown field type '{field_type}'") from e


# --- Constraints ---


def textual(value: Any) -> str:
    """Textual form used by length and pattern constraints."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict | list):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _check_constraints(field_def: ContentField, value: Any) -> list[str]:
    rules = field_def.validation
    if rules is None:
        return []

    errors: list[str] = []
    name = field_def.name
    text = textual(value)

    if rules.min is not None and len(text) < rules.min:
        errors.append(f"Field '{name}' must be at least {rules.min} characters")
    if rules.max is not None and len(text) > rules.max:
        errors.append(f"Field '{name}' must be at most {rules.max} characters")

    if rules.pattern:
        try:
            matched = re.search(rules.pattern, text) is not None
        except re.error:
            matched = False
        if not matched:
            errors.append(f"Field '{name}' must match pattern {rules.pattern}")

    if rules.enum is not None and text not in rules.enum:
        errors.append(f"Field '{name}' must be one of: {', '.join(rules.enum)}")

    return errors


# --- Validation ---


@dataclass(frozen=True)
class DataValidationResult:
    """Normalized data or the complete list of errors, never both."""

    data: dict[str, Any] | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def is_absent(value: Any) -> bool:
    return value is None or value == ""


def validate_data(
    fields: Iterable[ContentField],
    data: dict[str, Any],
    *,
    unknown_keys: UnknownKeyPolicy = "ignore",
    stored: dict[str, Any] | None = None,
) -> DataValidationResult:
    """
    Validate and normalize a data payload against a model's fields.

    Args:
        fields: The model's field definitions (declaration order matters).
        data: Raw payload, field name to arbitrary value.
        unknown_keys: "ignore" drops keys the model does not declare,
            "reject" reports each of them as an error.
        stored: Previously normalized values (partial update). A field
            missing from `data` keeps its stored value, which is checked
            for presence and constraints but not coerced again. Stored
            keys the model no longer declares are dropped silently.

    Returns:
        DataValidationResult with `data` keyed exactly by the field names
        when valid, otherwise `errors` with every violation.
    """
    field_list = list(fields)
    processed: dict[str, Any] = {}
    errors: list[str] = []

    for field_def in field_list:
        carried = field_def.name not in data and stored is not None and field_def.name in stored
        value = stored[field_def.name] if carried else data.get(field_def.name)

        if is_absent(value):
            if field_def.required:
                errors.append(f"Field '{field_def.name}' is required")
                continue
            processed[field_def.name] = copy.deepcopy(field_def.default_value)
            continue

        if carried:
            coerced = copy.deepcopy(value)
        else:
            try:
                coerced = get_coercer(field_def.type)(value)
            except FieldCoercionError as e:
                errors.append(f"Field '{field_def.name}' {e}")
                continue

        errors.extend(_check_constraints(field_def, coerced))
        processed[field_def.name] = coerced

    if unknown_keys == "reject":
        declared = {f.name for f in field_list}
        for key in data:
            if key not in declared:
                errors.append(f"Field '{key}' is not defined in this model")

    if errors:
        return DataValidationResult(data=None, errors=errors)
    return DataValidationResult(data=processed, errors=[])

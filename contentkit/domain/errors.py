"""
Error taxonomy for the content engine.

Expected failures (unknown model/item, invalid schema or payload) are
reported as ContentValidationError values on component outputs. Exceptions
are reserved for storage-level conditions that the caller has to handle:
uniqueness violations (ConflictError) and failures no rule anticipates
(UnexpectedError).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Error codes carried by component outputs.
NOT_FOUND = "not_found"
VALIDATION = "validation"
CONFLICT = "conflict"
UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ContentValidationError:
    """A single, human-readable failure reported by a component."""

    code: str
    message: str
    field: str | None = None


def summarize(errors: list[ContentValidationError]) -> str:
    """Join all messages into one line, validation failures prefixed."""
    if not errors:
        return ""
    messages = ", ".join(e.message for e in errors)
    if all(e.code == VALIDATION for e in errors):
        return f"Validation failed: {messages}"
    return messages


def not_found(message: str) -> ContentValidationError:
    return ContentValidationError(code=NOT_FOUND, message=message)


def invalid(message: str, field: str | None = None) -> ContentValidationError:
    return ContentValidationError(code=VALIDATION, message=message, field=field)


class ContentKitError(Exception):
    """Base error with a stable code."""

    code = UNEXPECTED

    def __init__(self, message: str, detail: Any = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.detail:
            d["detail"] = self.detail
        return d


class ConflictError(ContentKitError):
    """Raised by storage when a uniqueness constraint is violated."""

    code = CONFLICT


class UnexpectedError(ContentKitError):
    """Raised for failures not covered by a specific rule (e.g. corrupt stored JSON)."""

    code = UNEXPECTED

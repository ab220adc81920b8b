from collections.abc import Sequence

from fastapi import HTTPException

from contentkit.domain.errors import (
    CONFLICT,
    NOT_FOUND,
    VALIDATION,
    ContentValidationError,
    summarize,
)

STATUS_BY_CODE = {
    NOT_FOUND: 404,
    VALIDATION: 400,
    CONFLICT: 409,
}


def raise_for_errors(errors: Sequence[ContentValidationError]) -> None:
    """Translate component errors into an HTTP error response."""
    if not errors:
        return
    status_code = 500
    for code in (NOT_FOUND, CONFLICT, VALIDATION):
        if any(e.code == code for e in errors):
            status_code = STATUS_BY_CODE[code]
            break
    raise HTTPException(
        status_code=status_code,
        detail={
            "message": summarize(list(errors)),
            "errors": [
                {"code": e.code, "message": e.message, "field": e.field} for e in errors
            ],
        },
    )

"""
Slug normalization and collision-free allocation.

A namespace is either "all models" or "the items of one model". Allocation
is probe-then-assign, so callers must rely on a storage uniqueness
constraint and re-run allocation when the insert conflicts.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Callable

from contentkit.domain.errors import UnexpectedError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 100

_DISALLOWED = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(text: str) -> str:
    """Create a URL-safe slug from text."""
    # Fold accents to ASCII so the result only ever holds [a-z0-9-]
    text = unicodedata.normalize("NFKD", str(text))
    text = text.encode("ascii", "ignore").decode("ascii")

    slug = text.lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


def is_valid_slug(slug: str) -> bool:
    """Check if slug is valid (lowercase alphanumeric + hyphens)."""
    return bool(SLUG_PATTERN.match(slug))


def candidates(base: str):
    """Yield base, base-1, base-2, ..."""
    yield base
    counter = 1
    while True:
        yield f"{base}-{counter}"
        counter += 1


def allocate_slug(
    text: str,
    is_taken: Callable[[str], bool],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """
    Derive a slug from text that is unused in the probed namespace.

    Args:
        text: Source text (model name or slug-source field value).
        is_taken: Namespace probe, True when a slug already has an occupant.
        max_attempts: Ceiling on probes before giving up.

    Returns:
        The first free candidate, or "" when text has no slug characters.

    Raises:
        UnexpectedError: If every candidate up to the ceiling is taken.
    """
    base = slugify(text)
    if not base:
        return ""

    for attempt, candidate in enumerate(candidates(base)):
        if attempt >= max_attempts:
            break
        if not is_taken(candidate):
            return candidate
        logger.debug("Slug %r taken, probing next candidate", candidate)

    raise UnexpectedError(
        f"Could not allocate a unique slug for '{base}' after {max_attempts} attempts"
    )

"""
Rules file loading.

rules.yaml is either a plain YAML document or a markdown file carrying the
rules in its first fenced yaml block. Loading fails fast: a missing file,
broken YAML and schema violations all raise before the service starts.
"""

import logging
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from contentkit.rules.models import Rules

logger = logging.getLogger(__name__)

_FENCED_YAML = re.compile(r"^```ya?ml[^\n]*\n(.*?)^```", re.MULTILINE | re.DOTALL)


def extract_yaml(text: str) -> str:
    """The first fenced yaml block of a markdown document, or the text itself."""
    match = _FENCED_YAML.search(text)
    return match.group(1) if match else text


def load_rules(path: Path | str) -> Rules:
    """
    Load and validate the rules file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the YAML or the rules schema is invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data = yaml.safe_load(extract_yaml(path.read_text(encoding="utf-8")))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file {path}: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Rules file {path} must contain a mapping at the top level")

    try:
        rules = Rules.model_validate(data or {})
    except ValidationError as e:
        raise ValueError(f"Rules validation failed for {path}:\n{e}") from e

    logger.debug(
        "Loaded rules %s v%s from %s", rules.project.slug, rules.project.rules_version, path
    )
    return rules

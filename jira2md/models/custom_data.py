"""Custom data configuration.

Selects extra values from an issue's fields, either rendered inline with the
built-in metadata (simple fields) or as full sections. Each entry is a
label and a path of keys walked from the issue's "fields" mapping, e.g.::

    {
        "simple_fields": [["Epic", ["customfield_10008"]]],
        "sections": [["Acceptance criteria", ["customfield_10200", "value"]]]
    }
"""

import json
import logging
from functools import reduce
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger: logging.Logger = logging.getLogger(__name__)

# (label, path of keys below "fields")
FieldPath = tuple[str, list[str]]


class CustomDataConfig(BaseModel):
    """Extra fields and sections to render for every issue."""

    simple_fields: list[FieldPath] = Field(
        default_factory=list, description="Values rendered as metadata."
    )
    sections: list[FieldPath] = Field(
        default_factory=list, description="Values rendered as sections."
    )


def load_custom_data(path: Path | None) -> CustomDataConfig:
    """Load the custom data configuration file.

    Args:
        path: Path to the JSON configuration, or None for no custom data.

    Returns:
        Parsed configuration. Empty if no path is given or the file does
        not exist.

    Raises:
        OSError: If an existing file cannot be read.
        ValueError: If the file is not valid JSON or has the wrong shape.
    """
    if path is None:
        return CustomDataConfig()
    if not path.exists():
        logger.warning("Custom data file %s not found, using no custom data", path)
        return CustomDataConfig()

    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse custom data file {path}: {e}") from e

    # pydantic.ValidationError is a ValueError.
    config = CustomDataConfig.model_validate(raw)
    logger.debug(
        "Loaded %d simple fields and %d sections from %s",
        len(config.simple_fields),
        len(config.sections),
        path,
    )
    return config


def _step(current: Any, key: str) -> Any:
    if isinstance(current, dict):
        return current.get(key)
    return None


def resolve_field_path(fields: dict[str, Any], path: list[str]) -> Any:
    """Walk a path of keys through nested mappings.

    Args:
        fields: The issue's "fields" mapping.
        path: Keys to follow, outermost first.

    Returns:
        The value at the end of the path, or None if any key is absent.
    """
    return reduce(_step, path, fields)

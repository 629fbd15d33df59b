"""Batch conversion of an exported issue directory."""

import json
import logging
import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from jira2md.models.jira_issues import IssueRecord
from jira2md.tools.issue_renderer import IssueRenderer

logger: logging.Logger = logging.getLogger(__name__)

# Exporter bookkeeping file, not an issue record.
SYNC_STATE_NAME: str = "sync_state"

ATTACHMENTS_DIR_NAME: str = "attachments"


class ConversionFailure(BaseModel):
    """A source file that produced no output."""

    path: Path = Field(description="Source JSON file.")
    error: str = Field(description="Error message.")


class ConversionResult(BaseModel):
    """Outcome of converting a source directory."""

    rendered: list[Path] = Field(
        default_factory=list, description="Markdown files written."
    )
    failures: list[ConversionFailure] = Field(
        default_factory=list, description="Files skipped because of errors."
    )
    copied_attachments: list[str] = Field(
        default_factory=list, description="Attachment files copied."
    )


def list_issue_files(source: Path) -> list[Path]:
    """List the issue JSON files in a source directory.

    Args:
        source: Directory holding one JSON file per issue.

    Returns:
        Sorted JSON file paths, without the sync state file. Empty if the
        directory does not exist.
    """
    if not source.is_dir():
        logger.warning("Source directory %s not found, nothing to convert", source)
        return []
    return sorted(
        path for path in source.glob("*.json") if path.stem != SYNC_STATE_NAME
    )


def load_issue(path: Path) -> IssueRecord:
    """Read and decode one issue JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or not a JSON object.
    """
    raw: Any = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a JSON object, got {type(raw).__name__}")
    return raw


def copy_attachments(
    names: Iterable[str], source_dir: Path, target_dir: Path
) -> list[str]:
    """Copy attachment files between directories.

    Args:
        names: File names to copy.
        source_dir: Directory holding the exported attachments.
        target_dir: Directory to copy into. Created if anything is copied.

    Returns:
        Sorted names of the copied files.
    """
    copied: list[str] = sorted(names)
    if not copied:
        return copied

    target_dir.mkdir(parents=True, exist_ok=True)
    for name in copied:
        shutil.copyfile(source_dir / name, target_dir / name)
        logger.debug("Copied attachment %s", name)
    return copied


def convert_directory(
    source: Path, target: Path, renderer: IssueRenderer
) -> ConversionResult:
    """Render every issue in a source directory into a target directory.

    A file that fails to load or render is logged and skipped. Attachments
    the renderer found locally are copied once all files are processed.

    Args:
        source: Directory with the exported issue JSON files.
        target: Directory for the Markdown files. Created if absent.
        renderer: Renderer used for every issue.

    Returns:
        ConversionResult listing written files, failures and copied
        attachments.
    """
    target.mkdir(parents=True, exist_ok=True)
    result = ConversionResult()

    for path in list_issue_files(source):
        try:
            document, found = renderer.render_with_attachments(load_issue(path))
            output = target / f"{path.stem}.md"
            output.write_text(document, encoding="utf-8")
        except Exception as e:
            logger.error("Failed to convert %s: %s", path, e)
            result.failures.append(ConversionFailure(path=path, error=str(e)))
            continue

        renderer.record_attachments(found)
        logger.debug("Rendered %s to %s", path, output)
        result.rendered.append(output)

    result.copied_attachments = copy_attachments(
        renderer.found_attachments,
        source / ATTACHMENTS_DIR_NAME,
        target / ATTACHMENTS_DIR_NAME,
    )
    return result

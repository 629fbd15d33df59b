"""Markdown rendering of exported Jira issues."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from jira2md.models.custom_data import (
    CustomDataConfig,
    FieldPath,
    resolve_field_path,
)
from jira2md.models.jira_issues import (
    IssueRecord,
    JiraAttachment,
    JiraComment,
    JiraIssueLink,
    browse_url,
)

logger: logging.Logger = logging.getLogger(__name__)

# Jira timestamps, e.g. 2024-01-15T10:30:00.000+0000.
TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
)

# Fixed so output does not depend on the process locale.
MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

COMMENT_SEPARATOR: str = "\n\n" + "-" * 20 + "\n\n"

MISSING_VALUE: str = "-"

# Takes the issue's "fields" mapping.
FieldAccessor = Callable[[dict[str, Any]], Any]


def format_timestamp(value: str) -> str:
    """Format a Jira timestamp as "DD. Mon YYYY HH:MM (UTC)".

    The clock value is kept as exported. The offset is not applied.

    Args:
        value: ISO-8601 timestamp.

    Returns:
        Formatted date string.

    Raises:
        ValueError: If the timestamp matches none of the known formats.
    """
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        month = MONTH_ABBREVIATIONS[parsed.month - 1]
        return f"{parsed.day:02d}. {month} {parsed.year} {parsed:%H:%M} (UTC)"
    raise ValueError(f"Unrecognized timestamp: {value!r}")


def h1(text: str) -> str:
    """Level 1 heading, underlined with '='."""
    return f"{text}\n{'=' * len(text)}"


def h2(text: str) -> str:
    """Level 2 heading, underlined with '-'."""
    return f"{text}\n{'-' * len(text)}"


def capitalize_first(text: str) -> str:
    """Uppercase the first character and leave the rest unchanged."""
    return text[:1].upper() + text[1:]


def _path_accessor(path: list[str]) -> FieldAccessor:
    return lambda fields: resolve_field_path(fields, path)


# Built-in metadata. Direct indexing so that missing fields fail the render.
BUILTIN_FIELDS: tuple[tuple[str, FieldAccessor], ...] = (
    ("Type", lambda fields: fields["issuetype"]["name"]),
    ("Status", lambda fields: fields["status"]["name"]),
    ("Reporter", lambda fields: fields["reporter"]["name"]),
    ("Labels", lambda fields: ", ".join(fields["labels"])),
    ("Updated", lambda fields: format_timestamp(fields["updated"])),
    ("Created", lambda fields: format_timestamp(fields["created"])),
)

BUILTIN_SECTIONS: tuple[tuple[str, FieldAccessor], ...] = (
    ("Description", lambda fields: fields.get("description")),
)


class IssueRenderer:
    """Renders exported Jira issues as Markdown documents.

    Attachments whose exported payload exists in ``attachments_dir`` are
    linked locally and remembered in ``found_attachments`` so the caller can
    copy them next to the rendered documents.
    """

    def __init__(
        self,
        custom_data: CustomDataConfig | None = None,
        attachments_dir: Path | None = None,
    ) -> None:
        custom_data = custom_data or CustomDataConfig()
        self.attachments_dir = attachments_dir
        self.fields: list[tuple[str, FieldAccessor]] = [
            *BUILTIN_FIELDS,
            *self._descriptors(custom_data.simple_fields),
        ]
        self.sections: list[tuple[str, FieldAccessor]] = [
            *BUILTIN_SECTIONS,
            *self._descriptors(custom_data.sections),
        ]
        self._found_attachments: set[str] = set()

    @staticmethod
    def _descriptors(entries: Iterable[FieldPath]) -> list[tuple[str, FieldAccessor]]:
        return [(label, _path_accessor(path)) for label, path in entries]

    @property
    def found_attachments(self) -> frozenset[str]:
        """Local attachment file names referenced so far."""
        return frozenset(self._found_attachments)

    def record_attachments(self, names: Iterable[str]) -> None:
        """Add local attachment file names to found_attachments."""
        self._found_attachments.update(names)

    def render(self, issue: IssueRecord) -> str:
        """Render one issue record as a Markdown document.

        Attachments found on disk are added to found_attachments.

        Args:
            issue: Decoded issue JSON. Not modified.

        Returns:
            The Markdown document.

        Raises:
            KeyError, TypeError, ValueError: If a required field is missing
                or malformed.
        """
        document, found = self.render_with_attachments(issue)
        self.record_attachments(found)
        return document

    def render_with_attachments(self, issue: IssueRecord) -> tuple[str, list[str]]:
        """Render one issue without recording its attachments.

        Returns:
            The Markdown document and the local attachment file names it
            links to.
        """
        key: str = issue["key"]
        fields: dict[str, Any] = issue["fields"]
        project_key: str = fields["project"]["key"]

        blocks: list[str] = [
            h1(f"[{key}]({browse_url(issue['self'], key)}): {fields['summary']}"),
            self._render_metadata(fields),
        ]
        blocks.extend(self._render_sections(fields))

        links = [
            JiraIssueLink.model_validate(link)
            for link in fields.get("issuelinks") or []
        ]
        if links:
            blocks.append(self._render_links(links, project_key))

        comments = [
            JiraComment.model_validate(comment)
            for comment in (fields.get("comment") or {}).get("comments") or []
        ]
        if comments:
            blocks.append(self._render_comments(comments))

        attachments = [
            JiraAttachment.model_validate(attachment)
            for attachment in fields.get("attachment") or []
        ]
        found: list[str] = []
        if attachments:
            blocks.append(self._render_attachments(attachments, key, found))
        return "\n\n".join(blocks) + "\n", found

    def _render_metadata(self, fields: dict[str, Any]) -> str:
        pairs = [(label, accessor(fields)) for label, accessor in self.fields]
        return "\n".join(
            f"{label}\n:   {value if value else MISSING_VALUE}"
            for label, value in pairs
        )

    def _render_sections(self, fields: dict[str, Any]) -> list[str]:
        rendered: list[str] = []
        for label, accessor in self.sections:
            value = accessor(fields)
            if value:
                rendered.append(f"{h2(label)}\n\n{value}")
        return rendered

    def _render_links(self, links: list[JiraIssueLink], project_key: str) -> str:
        lines: list[str] = [h2("Links"), ""]
        for link in links:
            linked = link.resolve()
            target_key = linked.issue.key
            if target_key.startswith(f"{project_key}-"):
                target = f"{target_key}.md"
            else:
                target = linked.issue.browse_url()
            lines.append(
                f"* {capitalize_first(linked.relation)} [{target_key}]({target})"
            )
        return "\n".join(lines)

    def _render_comments(self, comments: list[JiraComment]) -> str:
        rendered = [
            f"### {c.author.name} - {format_timestamp(c.updated)}:\n\n{c.body or ''}"
            for c in comments
        ]
        return f"{h2('Comments')}\n\n{COMMENT_SEPARATOR.join(rendered)}"

    def _render_attachments(
        self, attachments: list[JiraAttachment], issue_key: str, found: list[str]
    ) -> str:
        lines: list[str] = [h2("Attachments"), ""]
        for attachment in attachments:
            local_name = attachment.local_filename(issue_key)
            if self._attachment_exists(local_name):
                url = f"attachments/{local_name}"
                found.append(local_name)
            else:
                logger.debug("Attachment %s not exported, linking remote", local_name)
                url = attachment.content
            marker = "!" if attachment.is_image() else ""
            lines.append(f"* {marker}[{attachment.filename}]({url})")
        return "\n".join(lines)

    def _attachment_exists(self, local_name: str) -> bool:
        if self.attachments_dir is None:
            return False
        return (self.attachments_dir / local_name).is_file()

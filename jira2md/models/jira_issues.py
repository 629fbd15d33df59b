"""Jira issue export models.

Only the nested parts of an exported issue that are rendered as units
(comments, links, attachments) are modelled here. The issue record itself
stays a plain dictionary so that arbitrary custom fields can be looked up.
"""

import enum
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field

# Raw issue record as decoded from one exported JSON document.
IssueRecord = dict[str, Any]

# Attachments rendered as inline images. Matched case-sensitively.
IMAGE_SUFFIXES: tuple[str, ...] = (".png", ".jpg")


def browse_url(self_url: str, key: str) -> str:
    """Derive the web URL of an issue from its REST self URL.

    Args:
        self_url: REST URL of the issue, e.g.
            https://host/rest/api/2/issue/10001.
        key: Jira issue key (e.g., PROJ-123).

    Returns:
        The self URL with its path replaced by /browse/{key}.
    """
    parts = urlsplit(self_url)
    return urlunsplit(parts._replace(path=f"/browse/{key}"))


class JiraUser(BaseModel):
    """Jira user reference."""

    name: str = Field(description="Jira user name.")


class JiraComment(BaseModel):
    """Jira comment."""

    author: JiraUser = Field(description="Author of the comment.")
    updated: str = Field(description="ISO timestamp of the last edit.")
    body: str | None = Field(
        default=None, description="Comment body, already formatted text."
    )


class JiraIssueRef(BaseModel):
    """Reference to another issue, as embedded in an issue link."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(description="Jira issue key (e.g., PROJ-123).")
    self_url: str = Field(alias="self", description="REST URL of the issue.")

    def browse_url(self) -> str:
        """Web URL of the referenced issue."""
        return browse_url(self.self_url, self.key)


class JiraLinkType(BaseModel):
    """Relationship names of an issue link, one per direction."""

    name: str
    inward: str
    outward: str


class LinkDirection(enum.Enum):
    """Side of the link the other issue sits on."""

    OUTWARD = "outward"
    INWARD = "inward"


class LinkedIssue(BaseModel):
    """An issue link resolved to a single direction."""

    direction: LinkDirection
    relation: str = Field(description="Relationship name for the direction.")
    issue: JiraIssueRef


class JiraIssueLink(BaseModel):
    """Jira issue link.

    Exactly one of outward_issue and inward_issue is expected to be set.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: JiraLinkType
    outward_issue: JiraIssueRef | None = Field(default=None, alias="outwardIssue")
    inward_issue: JiraIssueRef | None = Field(default=None, alias="inwardIssue")

    def resolve(self) -> LinkedIssue:
        """Pick the populated side of the link.

        Returns:
            LinkedIssue for the outward issue if present, otherwise for the
            inward issue.

        Raises:
            ValueError: If neither side is populated.
        """
        if self.outward_issue is not None:
            return LinkedIssue(
                direction=LinkDirection.OUTWARD,
                relation=self.type.outward,
                issue=self.outward_issue,
            )
        if self.inward_issue is not None:
            return LinkedIssue(
                direction=LinkDirection.INWARD,
                relation=self.type.inward,
                issue=self.inward_issue,
            )
        raise ValueError(f"Issue link '{self.type.name}' has no linked issue")


class JiraAttachment(BaseModel):
    """Jira attachment metadata."""

    id: int | str = Field(description="Attachment id.")
    filename: str = Field(description="Original file name, may contain spaces.")
    content: str = Field(description="Remote download URL.")

    def local_filename(self, issue_key: str) -> str:
        """Name of the exported attachment payload on disk."""
        return f"{issue_key}-{self.id}-{self.filename.replace(' ', '_')}"

    def is_image(self) -> bool:
        """Whether the attachment is rendered inline as an image."""
        return PurePosixPath(self.filename).suffix in IMAGE_SUFFIXES

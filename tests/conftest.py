"""Shared pytest fixtures for jira2md tests."""

import json
from pathlib import Path
from typing import Any

import pytest

from jira2md.models.custom_data import CustomDataConfig


def _make_issue(key: str = "ABC-1", **fields: Any) -> dict[str, Any]:
    """Build a minimal exported issue record, overriding fields as given."""
    base_fields: dict[str, Any] = {
        "issuetype": {"name": "Bug"},
        "summary": "Login fails",
        "status": {"name": "Open"},
        "reporter": {"name": "jdoe"},
        "description": None,
        "labels": [],
        "created": "2024-01-10T09:00:00.000+0000",
        "updated": "2024-01-15T10:30:00.000+0000",
        "project": {"key": key.split("-")[0]},
        "comment": {"comments": []},
        "issuelinks": [],
        "attachment": [],
    }
    base_fields.update(fields)
    return {
        "key": key,
        "self": "https://jira.example.com/rest/api/2/issue/10001",
        "fields": base_fields,
    }


@pytest.fixture
def sample_issue() -> dict[str, Any]:
    """Create a fully populated issue record."""
    return _make_issue(
        description="Steps to reproduce:\n\n1. Open the login page",
        labels=["backend", "auth"],
        customfield_10008="ABC-100",
        customfield_10200={"value": "Users can log in"},
        comment={
            "comments": [
                {
                    "author": {"name": "asmith"},
                    "updated": "2024-01-12T14:05:00.000+0200",
                    "body": "Cannot reproduce.",
                },
                {
                    "author": {"name": "jdoe"},
                    "updated": "2024-01-13T08:00:00.000+0000",
                    "body": "Happens on *Firefox* only.",
                },
            ]
        },
        issuelinks=[
            {
                "type": {
                    "name": "Blocks",
                    "inward": "is blocked by",
                    "outward": "blocks",
                },
                "outwardIssue": {
                    "key": "ABC-2",
                    "self": "https://jira.example.com/rest/api/2/issue/10002",
                },
            },
            {
                "type": {
                    "name": "Relates",
                    "inward": "relates to",
                    "outward": "relates to",
                },
                "inwardIssue": {
                    "key": "XYZ-9",
                    "self": "https://jira.example.com/rest/api/2/issue/20009",
                },
            },
        ],
        attachment=[
            {
                "id": 42,
                "filename": "photo.png",
                "content": "https://jira.example.com/secure/attachment/42/photo.png",
            },
            {
                "id": "43",
                "filename": "error log.txt",
                "content": "https://jira.example.com/secure/attachment/43/error%20log.txt",
            },
        ],
    )


@pytest.fixture
def sample_custom_data() -> CustomDataConfig:
    """Create a custom data configuration with present and absent paths."""
    return CustomDataConfig(
        simple_fields=[
            ("Epic", ["customfield_10008"]),
            ("Sprint", ["customfield_10010", "name"]),
        ],
        sections=[
            ("Acceptance criteria", ["customfield_10200", "value"]),
            ("Notes", ["customfield_10300", "value"]),
        ],
    )


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Create an empty export directory with an attachments folder."""
    source = tmp_path / "export"
    (source / "attachments").mkdir(parents=True)
    return source


@pytest.fixture
def issue_factory():
    """Factory for minimal issue records with overridable fields."""
    return _make_issue


def _write_issue(source: Path, issue: dict[str, Any]) -> Path:
    path = source / f"{issue['key']}.json"
    path.write_text(json.dumps(issue), encoding="utf-8")
    return path


@pytest.fixture
def write_issue():
    """Write an issue record to {source}/{key}.json."""
    return _write_issue

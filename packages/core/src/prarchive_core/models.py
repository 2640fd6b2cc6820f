"""Pull request archive data models.

Plain dataclasses decoupled from PyGithub so the rendering and localization
code can be exercised without a network or a GitHub client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


def format_timestamp(value) -> str:
    """Render a timestamp the way the GitHub REST API does (``2024-01-31T12:00:00Z``)."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.utcoffset() is not None:
            value = value.replace(tzinfo=None) - value.utcoffset()
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return str(value)


@dataclass
class Discussion:
    """The pull request itself: header fields plus the free-form description."""

    title: str
    author: str
    created_at: str
    url: str
    body: str = ""


@dataclass
class Comment:
    """A general (issue-style) comment on the pull request."""

    author: str
    created_at: str
    body: str = ""


@dataclass
class ReviewComment(Comment):
    """A review comment anchored to a file and line of the diff.

    ``line`` is the current line, or the original line when the code the
    comment was made on no longer exists.
    """

    path: str = ""
    line: int | None = None


@dataclass
class ChangedFile:
    filename: str
    patch: str | None = None  # None for binary or oversized diffs


@dataclass
class ArchiveSummary:
    """Result returned by run_archive: what the CLI reports back to the user."""

    owner: str
    repo: str
    number: int
    document_path: str
    assets: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

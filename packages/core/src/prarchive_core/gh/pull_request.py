from __future__ import annotations

import re
from dataclasses import dataclass

from github import Github

from prarchive_core.models import ChangedFile, Comment, Discussion, ReviewComment, format_timestamp

_PULL_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")


@dataclass(frozen=True)
class PullRef:
    owner: str
    repo: str
    number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def output_dirname(self) -> str:
        return f"{self.owner}-{self.repo}-pr-{self.number}"


def parse_pull_url(url: str | None) -> PullRef:
    """Split ``https://github.com/<owner>/<repo>/pull/<number>`` into its parts."""
    match = _PULL_URL_RE.search(url or "")
    if not match:
        raise ValueError(f"Not a valid GitHub pull-request URL: {url!r}")
    owner, repo, number = match.groups()
    return PullRef(owner=owner, repo=repo, number=int(number))


def get_repo(repo_name: str, token: str | None = None, per_page: int = 100):
    # Without a token PyGithub falls back to anonymous access (public repos, lower rate limit).
    gh = Github(token, per_page=per_page) if token else Github(per_page=per_page)
    return gh.get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def _login(user) -> str:
    return user.login if user is not None else "ghost"


def to_discussion(pr) -> Discussion:
    return Discussion(
        title=pr.title or "",
        author=_login(pr.user),
        created_at=format_timestamp(pr.created_at),
        url=pr.html_url,
        body=pr.body or "",
    )


def get_issue_comments(pr) -> list[Comment]:
    """All general comments on the pull request, oldest first."""
    return [
        Comment(author=_login(c.user), created_at=format_timestamp(c.created_at), body=c.body or "")
        for c in pr.get_issue_comments()
    ]


def get_review_comments(pr) -> list[ReviewComment]:
    """All review comments anchored to the diff, in API order."""
    comments = []
    for c in pr.get_review_comments():
        # c.line is None when the commented code no longer exists in the
        # current diff (e.g. after a force-push). Fall back to original_line.
        line = c.line if c.line is not None else getattr(c, "original_line", None)
        comments.append(
            ReviewComment(
                author=_login(c.user),
                created_at=format_timestamp(c.created_at),
                body=c.body or "",
                path=c.path,
                line=line,
            )
        )
    return comments


def get_files(pr) -> list[ChangedFile]:
    return [ChangedFile(filename=f.filename, patch=f.patch) for f in pr.get_files()]

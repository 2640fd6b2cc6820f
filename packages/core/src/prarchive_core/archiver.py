"""Core pull request archiving orchestration."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from github import GithubException
from rich.console import Console

from prarchive_core.assets import AssetStore
from prarchive_core.gh.pull_request import (
    PullRef,
    get_files,
    get_issue_comments,
    get_pull,
    get_repo,
    get_review_comments,
    parse_pull_url,
    to_discussion,
)
from prarchive_core.localizer import localize
from prarchive_core.models import ArchiveSummary, ChangedFile, Comment, Discussion, ReviewComment

if TYPE_CHECKING:
    from prarchive_store.base import BaseStore

console = Console(stderr=True)  # stdout carries only the "Saved" line
logger = logging.getLogger(__name__)


def render_document(
    discussion: Discussion,
    comments: list[Comment],
    review_comments: list[ReviewComment],
    files: list[ChangedFile],
) -> str:
    """Lay out the archived pull request as one Markdown document.

    Bodies are expected to be localized already; this only arranges sections:
    header, description, general comments, review comments, code changes.
    """
    out = [
        f"# {discussion.title}\n",
        f"- **URL:** {discussion.url}",
        f"- **Author:** @{discussion.author}",
        f"- **Created:** {discussion.created_at}\n",
        "---\n## Description\n",
        discussion.body,
        "\n---\n## Comments\n",
    ]

    for c in comments:
        out.append(f"### {c.author} — {c.created_at}")
        out.append(c.body)
        out.append("")

    for c in review_comments:
        out.append(f"### Review by {c.author} — {c.created_at}")
        # File-level review comments carry no line at all.
        if c.line is not None:
            out.append(f"File: `{c.path}`  (line {c.line})")
        else:
            out.append(f"File: `{c.path}`")
        out.append(c.body)
        out.append("")

    out.append("\n---\n## Code changes\n")
    for f in files:
        out.append(f"### {f.filename}")
        out.append("```diff")
        out.append(f.patch or "")
        out.append("```")
        out.append("")

    return "\n".join(out)


async def archive_pull(
    discussion: Discussion,
    comments: list[Comment],
    review_comments: list[ReviewComment],
    files: list[ChangedFile],
    sink: BaseStore,
    assets: AssetStore,
) -> str:
    """Localize every free-form text field, render the document and write it.

    Fields are localized one after another; only the asset downloads within a
    single field overlap. Returns the path of the written document.
    """
    sink.prepare()

    description = await localize(discussion.body, assets)
    discussion = Discussion(
        title=discussion.title,
        author=discussion.author,
        created_at=discussion.created_at,
        url=discussion.url,
        body=description,
    )

    local_comments = []
    for c in comments:
        local_comments.append(Comment(author=c.author, created_at=c.created_at, body=await localize(c.body, assets)))

    local_reviews = []
    for c in review_comments:
        local_reviews.append(
            ReviewComment(
                author=c.author,
                created_at=c.created_at,
                body=await localize(c.body, assets),
                path=c.path,
                line=c.line,
            )
        )

    document = render_document(discussion, local_comments, local_reviews, files)
    return sink.save_document(document)


def _asset_store(sink: BaseStore, config: dict) -> AssetStore:
    return AssetStore(
        sink,
        retry_failures=config.get("retry_failed_assets", True),
        headers={"User-Agent": config.get("user_agent") or "prarchive"},
        timeout=config.get("asset_timeout"),
    )


async def _archive_with_assets(pull: PullRef, discussion, comments, review_comments, files, sink, config: dict):
    async with _asset_store(sink, config) as assets:
        document_path = await archive_pull(discussion, comments, review_comments, files, sink, assets)
        for asset in assets.assets:
            logger.debug("%s <- %s (%d bytes)", asset.relative_path, asset.url, asset.size)
        return ArchiveSummary(
            owner=pull.owner,
            repo=pull.repo,
            number=pull.number,
            document_path=document_path,
            assets=[a.relative_path for a in assets.assets],
            unresolved=sorted(assets.failures),
        )


def run_archive(
    pull_url: str,
    config: dict,
    sink_factory: Callable[[PullRef], BaseStore],
    repo_obj=None,
) -> ArchiveSummary:
    """Fetch a pull request with all its comments and diffs and archive it.

    The URL is validated before any network access. Everything is fetched
    from GitHub before the output folder is created, so a failing API call
    leaves nothing behind. Asset download failures are tolerated; any other
    failure propagates.
    """
    pull = parse_pull_url(pull_url)

    this_repo = repo_obj
    if this_repo is None:
        this_repo = get_repo(pull.full_name, token=config.get("github_token"), per_page=config.get("per_page", 100))

    try:
        this_pr = get_pull(this_repo, pull.number)
    except GithubException as e:
        if e.status == 404:
            raise ValueError(f"PR #{pull.number} not found in {pull.full_name}.")
        raise

    console.print(f"[cyan]Archiving {pull.full_name}#{pull.number}: {this_pr.title}[/cyan]")

    discussion = to_discussion(this_pr)
    comments = get_issue_comments(this_pr)
    review_comments = get_review_comments(this_pr)
    files = get_files(this_pr)
    console.print(
        f"[dim]Fetched {len(comments)} comment(s), {len(review_comments)} review comment(s), "
        f"{len(files)} changed file(s).[/dim]"
    )

    sink = sink_factory(pull)
    try:
        summary = asyncio.run(_archive_with_assets(pull, discussion, comments, review_comments, files, sink, config))
    finally:
        sink.close()

    if summary.unresolved:
        logger.debug("%d asset(s) left as remote links: %s", len(summary.unresolved), summary.unresolved)
    return summary


async def _localize_text(text: str, sink: BaseStore, config: dict) -> tuple[str, list[str], list[str]]:
    async with _asset_store(sink, config) as assets:
        localized = await localize(text, assets)
        return localized, [a.relative_path for a in assets.assets], sorted(assets.failures)


def run_localize(text: str, sink: BaseStore, config: dict) -> tuple[str, list[str], list[str]]:
    """Localize a standalone Markdown text through ``sink`` and write it back.

    Returns the document path, the stored asset paths and the URLs that could
    not be downloaded.
    """
    sink.prepare()
    try:
        localized, stored, unresolved = asyncio.run(_localize_text(text, sink, config))
        document_path = sink.save_document(localized)
    finally:
        sink.close()
    return document_path, stored, unresolved

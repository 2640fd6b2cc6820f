"""archive command — save a pull request as offline Markdown."""

from __future__ import annotations

import click
from rich.console import Console

from prarchive_core.archiver import run_archive
from prarchive_core.gh.pull_request import parse_pull_url

console = Console(stderr=True)  # stdout carries only the "Saved" line


@click.command("archive")
@click.argument("pull_url", required=False)
@click.option(
    "--output-dir",
    "output_dir",
    default=None,
    help="Directory the archive is created in. Overrides config file.",
)
@click.option(
    "--store",
    type=click.Choice(["directory", "zip"]),
    default=None,
    help="Write a plain folder or a single .zip file. Overrides config file.",
)
@click.pass_context
def archive_cmd(ctx, pull_url: str | None, output_dir: str | None, store: str | None):
    """Archive a pull request into <owner>-<repo>-pr-<number>/pull-request.md.

    Downloads the description, all comments (general and review) and the
    per-file diffs, then fetches every image or file linked from the text
    into an assets/ folder and rewrites the links to point at the copies.

    \b
    Example:
      prarchive archive https://github.com/acme/widgets/pull/42

    \b
    Optional environment variables:
      GITHUB_TOKEN   GitHub personal access token (or use gh CLI)
    """
    from prarchive_cli.auth import resolve_github_token
    from prarchive_cli.cli import _build_store
    from prarchive_core.config import load_config

    if not pull_url:
        raise click.UsageError("Missing pull-request URL, e.g. https://github.com/<owner>/<repo>/pull/<number>.")
    try:
        parse_pull_url(pull_url)
    except ValueError as e:
        raise click.UsageError(str(e))

    config_path = ctx.obj.get("config_path", ".prarchive.yml") if ctx.obj else ".prarchive.yml"
    config = load_config(config_path, cli_overrides={"output_dir": output_dir, "store": store})

    token = resolve_github_token()
    if token:
        config["github_token"] = token

    try:
        summary = run_archive(pull_url, config, sink_factory=lambda pull: _build_store(config, pull.output_dirname))
    except ValueError as e:
        raise click.ClickException(str(e))

    if summary.assets:
        console.print(f"[dim]{len(summary.assets)} asset(s) stored locally.[/dim]")
    click.echo(f"✔  Saved →  {summary.document_path}")

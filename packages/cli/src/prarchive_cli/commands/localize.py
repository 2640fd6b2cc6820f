"""localize command — make a local Markdown file self-contained."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from prarchive_core.archiver import run_localize

console = Console(stderr=True)  # stdout carries only the "Saved" line


@click.command("localize")
@click.argument("markdown_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--assets-dir",
    "assets_dirname",
    default=None,
    help="Folder (next to the file) the downloads go into. Defaults to the configured assets_dirname.",
)
@click.pass_context
def localize_cmd(ctx, markdown_file: Path, assets_dirname: str | None):
    """Download every remote image/link in MARKDOWN_FILE and rewrite it in place.

    Uses the same pipeline as `prarchive archive`, minus GitHub: links that
    cannot be downloaded are left untouched.
    """
    from prarchive_core.config import load_config
    from prarchive_store.directory import DirectoryStore

    config_path = ctx.obj.get("config_path", ".prarchive.yml") if ctx.obj else ".prarchive.yml"
    config = load_config(config_path, cli_overrides={"assets_dirname": assets_dirname})

    sink = DirectoryStore(
        root=str(markdown_file.parent),
        dirname="",
        assets_dirname=config["assets_dirname"],
        document_name=markdown_file.name,
    )
    text = markdown_file.read_text(encoding="utf-8")
    document_path, stored, unresolved = run_localize(text, sink, config)

    console.print(f"[dim]{len(stored)} asset(s) stored, {len(unresolved)} link(s) left remote.[/dim]")
    click.echo(f"✔  Saved →  {document_path}")

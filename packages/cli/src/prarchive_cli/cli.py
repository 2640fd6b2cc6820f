"""CLI entry point for prarchive.

Commands:
  archive   — save a pull request, its comments and diffs as offline Markdown
  localize  — download the remote images/files of a local Markdown file
"""

from __future__ import annotations

import importlib.metadata
import logging
import os

import click

from prarchive_cli.commands.archive import archive_cmd
from prarchive_cli.commands.localize import localize_cmd


def _build_store(config: dict, dirname: str, root: str | None = None):
    """Instantiate the configured output store from .prarchive.yml settings.

    Store selection:
      store: zip       → ZipStore       ({output_dir}/{dirname}.zip)
      (default)        → DirectoryStore ({output_dir}/{dirname}/)

    This factory lives in cli.py so neither prarchive_core nor prarchive_store
    know about the CLI config format.
    """
    from prarchive_store.directory import DirectoryStore

    kwargs = {
        "root": root if root is not None else config.get("output_dir", "."),
        "dirname": dirname,
        "assets_dirname": config.get("assets_dirname", "assets"),
        "document_name": config.get("document_name", "pull-request.md"),
    }

    store_type = config.get("store", "directory")
    if store_type == "zip":
        from prarchive_store.zipped import ZipStore

        return ZipStore(**kwargs)
    if store_type != "directory":
        raise click.UsageError(f"Unknown store {store_type!r}. Choose 'directory' or 'zip'.")

    return DirectoryStore(**kwargs)


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@click.group()
@click.version_option(
    version=importlib.metadata.version("prarchive"),
    prog_name="prarchive",
)
@click.option(
    "--config",
    "config_path",
    default=".prarchive.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRARCHIVE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output, including failed asset downloads.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Archive GitHub pull requests as self-contained Markdown."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(archive_cmd)
main.add_command(localize_cmd)

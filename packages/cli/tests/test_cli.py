"""Tests for the CLI entry point."""

import subprocess
import types
from datetime import datetime, timezone
from unittest.mock import MagicMock

import click
import httpx
import pytest
from click.testing import CliRunner
from github import GithubException

from prarchive_cli.auth import resolve_github_token
from prarchive_cli.cli import _build_store, main
from prarchive_core.assets import AssetStore
from prarchive_core.models import ArchiveSummary
from prarchive_store.directory import DirectoryStore
from prarchive_store.zipped import ZipStore

PR_URL = "https://github.com/acme/widgets/pull/42"


def _make_config(**overrides):
    config = {
        "github_token": None,
        "output_dir": ".",
        "store": "directory",
        "assets_dirname": "assets",
        "document_name": "pull-request.md",
        "per_page": 100,
        "retry_failed_assets": True,
        "asset_timeout": None,
        "user_agent": "prarchive",
    }
    config.update(overrides)
    return config


def _summary(path="acme-widgets-pr-42/pull-request.md", assets=()):
    return ArchiveSummary(owner="acme", repo="widgets", number=42, document_path=path, assets=list(assets))


def _patch_common(mocker, config=None, token="tok"):
    """Patch load_config and resolve_github_token for most tests."""
    cfg = config or _make_config()
    mocker.patch("prarchive_core.config.load_config", return_value=cfg)
    mocker.patch("prarchive_cli.auth.resolve_github_token", return_value=token)
    return cfg


class TestArchiveValidation:
    def test_missing_url(self, mocker, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        mock_run = mocker.patch("prarchive_cli.commands.archive.run_archive")

        result = CliRunner().invoke(main, ["archive"])

        assert result.exit_code != 0
        assert "Usage" in result.output
        assert "pull-request URL" in result.output
        mock_run.assert_not_called()

    def test_malformed_url_creates_nothing(self, mocker, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        mock_get_repo = mocker.patch("prarchive_core.archiver.get_repo")

        result = CliRunner().invoke(main, ["archive", "https://example.com/not-a-pr"])

        assert result.exit_code != 0
        assert "Not a valid GitHub pull-request URL" in result.output
        mock_get_repo.assert_not_called()
        assert list(tmp_path.iterdir()) == []


class TestArchiveRun:
    def test_success_prints_saved_path(self, mocker):
        _patch_common(mocker)
        mock_run = mocker.patch("prarchive_cli.commands.archive.run_archive", return_value=_summary())

        result = CliRunner().invoke(main, ["archive", PR_URL])

        assert result.exit_code == 0
        assert "✔  Saved →  acme-widgets-pr-42/pull-request.md" in result.output
        assert mock_run.call_args.args[0] == PR_URL

    def test_token_resolved_into_config(self, mocker):
        _patch_common(mocker, token="gh-cli-token")
        mock_run = mocker.patch("prarchive_cli.commands.archive.run_archive", return_value=_summary())

        CliRunner().invoke(main, ["archive", PR_URL])

        assert mock_run.call_args.args[1]["github_token"] == "gh-cli-token"

    def test_runs_without_token(self, mocker):
        _patch_common(mocker, token=None)
        mock_run = mocker.patch("prarchive_cli.commands.archive.run_archive", return_value=_summary())

        result = CliRunner().invoke(main, ["archive", PR_URL])

        assert result.exit_code == 0
        assert mock_run.call_args.args[1]["github_token"] is None

    def test_cli_options_passed_as_overrides(self, mocker):
        mock_load = mocker.patch("prarchive_core.config.load_config", return_value=_make_config())
        mocker.patch("prarchive_cli.auth.resolve_github_token", return_value="tok")
        mocker.patch("prarchive_cli.commands.archive.run_archive", return_value=_summary())

        CliRunner().invoke(main, ["--config", "custom.yml", "archive", PR_URL, "--output-dir", "out", "--store", "zip"])

        assert mock_load.call_args.args[0] == "custom.yml"
        assert mock_load.call_args.kwargs["cli_overrides"] == {"output_dir": "out", "store": "zip"}

    def test_sink_factory_uses_pull_dirname(self, mocker):
        _patch_common(mocker, config=_make_config(output_dir="archives"))
        mock_run = mocker.patch("prarchive_cli.commands.archive.run_archive", return_value=_summary())

        CliRunner().invoke(main, ["archive", PR_URL])

        factory = mock_run.call_args.kwargs["sink_factory"]
        pull = MagicMock(output_dirname="acme-widgets-pr-42")
        sink = factory(pull)
        assert isinstance(sink, DirectoryStore)
        assert sink.root == "archives"
        assert sink.dirname == "acme-widgets-pr-42"

    def test_not_found_reported_as_error(self, mocker):
        _patch_common(mocker)
        mocker.patch(
            "prarchive_cli.commands.archive.run_archive",
            side_effect=ValueError("PR #42 not found in acme/widgets."),
        )

        result = CliRunner().invoke(main, ["archive", PR_URL])

        assert result.exit_code == 1
        assert "PR #42 not found in acme/widgets." in result.output

    def test_platform_errors_abort(self, mocker):
        _patch_common(mocker)
        mocker.patch(
            "prarchive_cli.commands.archive.run_archive",
            side_effect=GithubException(403, {"message": "API rate limit exceeded"}, None),
        )

        result = CliRunner().invoke(main, ["archive", PR_URL])

        assert result.exit_code != 0
        assert isinstance(result.exception, GithubException)
        assert "Saved" not in result.output

    def test_stdout_is_single_confirmation_line(self, mocker, tmp_path):
        _patch_common(mocker, _make_config(output_dir=str(tmp_path)))
        pr = MagicMock()
        pr.title = "T"
        pr.user = types.SimpleNamespace(login="octocat")
        pr.created_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        pr.html_url = PR_URL
        pr.body = "![x](https://img.example/a.png)"
        pr.get_issue_comments.return_value = []
        pr.get_review_comments.return_value = []
        pr.get_files.return_value = []
        mocker.patch("prarchive_core.archiver.get_repo").return_value.get_pull.return_value = pr
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"png")))
        mocker.patch("prarchive_core.archiver._asset_store", side_effect=lambda sink, config: AssetStore(sink, client))

        result = CliRunner().invoke(main, ["archive", PR_URL])

        assert result.exit_code == 0
        document = tmp_path / "acme-widgets-pr-42" / "pull-request.md"
        assert [line for line in result.stdout.splitlines() if line.strip()] == [f"✔  Saved →  {document}"]
        assert "Archiving acme/widgets#42" in result.stderr
        assert "1 asset(s) stored locally." in result.stderr


class TestLocalizeCommand:
    def test_rewrites_file(self, mocker, tmp_path):
        _patch_common(mocker)
        doc = tmp_path / "notes.md"
        doc.write_text("![x](https://img.example/a.png)", encoding="utf-8")
        mock_run = mocker.patch(
            "prarchive_cli.commands.localize.run_localize",
            return_value=(str(doc), ["assets/0.png"], []),
        )

        result = CliRunner().invoke(main, ["localize", str(doc)])

        assert result.exit_code == 0
        assert f"Saved →  {doc}" in result.output
        text, sink, _ = mock_run.call_args.args
        assert text == "![x](https://img.example/a.png)"
        assert isinstance(sink, DirectoryStore)
        assert sink.root == str(tmp_path)
        assert sink.document_name == "notes.md"
        assert sink.assets_dirname == "assets"

    def test_missing_file_rejected(self, tmp_path):
        result = CliRunner().invoke(main, ["localize", str(tmp_path / "nope.md")])
        assert result.exit_code != 0


class TestBuildStore:
    def test_default_is_directory(self):
        store = _build_store(_make_config(), "acme-widgets-pr-42")
        assert isinstance(store, DirectoryStore)
        assert store.root == "."

    def test_zip(self):
        store = _build_store(_make_config(store="zip", output_dir="out"), "acme-widgets-pr-42")
        assert isinstance(store, ZipStore)
        assert store.root == "out"

    def test_root_override(self):
        store = _build_store(_make_config(), "x", root="/tmp/elsewhere")
        assert store.root == "/tmp/elsewhere"

    def test_unknown_store_rejected(self):
        with pytest.raises(click.UsageError):
            _build_store(_make_config(store="s3"), "x")


class TestResolveGithubToken:
    def test_env_var_wins(self, monkeypatch, mocker):
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        mock_sub = mocker.patch("prarchive_cli.auth.subprocess.run")
        assert resolve_github_token() == "env-token"
        mock_sub.assert_not_called()

    def test_falls_back_to_gh_cli(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch(
            "prarchive_cli.auth.subprocess.run",
            return_value=MagicMock(returncode=0, stdout="gh-token\n"),
        )
        assert resolve_github_token() == "gh-token"

    def test_none_when_gh_missing(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch("prarchive_cli.auth.subprocess.run", side_effect=FileNotFoundError)
        assert resolve_github_token() is None

    def test_none_when_gh_times_out(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch("prarchive_cli.auth.subprocess.run", side_effect=subprocess.TimeoutExpired("gh", 5))
        assert resolve_github_token() is None

    def test_none_when_gh_not_logged_in(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch("prarchive_cli.auth.subprocess.run", return_value=MagicMock(returncode=1, stdout=""))
        assert resolve_github_token() is None

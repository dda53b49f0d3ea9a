"""Tests for CLI exit codes."""

from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from typer.testing import CliRunner

from git_smart_clone.cli import app
from git_smart_clone.config import Settings
from git_smart_clone.exceptions import MissingToolError, NoRemoteConfiguredError
from git_smart_clone.models import RunCounters


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.settings = Settings(
            repo_path=Path("/work/project"),
            repo_list=Path("/work/project/repos.list"),
            clone_root=Path("/work"),
            timeout=60.0,
        )

    @mock.patch("git_smart_clone.cli.require_binary", side_effect=MissingToolError("Required binary not found in PATH: git"))
    def test_missing_git_exits_non_zero(self, _require: mock.Mock) -> None:
        result = self.runner.invoke(app, [])

        self.assertEqual(result.exit_code, 1)

    @mock.patch("git_smart_clone.cli.run_repo_list", side_effect=NoRemoteConfiguredError("no remote"))
    @mock.patch("git_smart_clone.cli.load_settings")
    @mock.patch("git_smart_clone.cli.require_binary")
    def test_setup_error_exits_non_zero(self, _require, load_settings, _run) -> None:
        load_settings.return_value = self.settings

        result = self.runner.invoke(app, [])

        self.assertEqual(result.exit_code, 1)

    @mock.patch("git_smart_clone.cli.run_repo_list")
    @mock.patch("git_smart_clone.cli.load_settings")
    @mock.patch("git_smart_clone.cli.require_binary")
    def test_completed_run_exits_zero_even_with_line_errors(self, _require, load_settings, run) -> None:
        load_settings.return_value = self.settings
        run.return_value = RunCounters(processed=2, errors=1)

        result = self.runner.invoke(app, ["--file", "team.list", "--timeout", "5"])

        self.assertEqual(result.exit_code, 0)
        kwargs = load_settings.call_args.kwargs
        self.assertEqual(kwargs["list_override"], Path("team.list"))
        self.assertEqual(kwargs["timeout_override"], 5.0)
        git = run.call_args.args[1]
        self.assertEqual(git.timeout, 60.0)


if __name__ == "__main__":
    unittest.main()

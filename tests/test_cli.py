import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

import vc_changelog.cli as cli
from vc_changelog import __version__
from vc_changelog.config.loader import CONFIG_FILE_NAME
from vc_changelog.errors import ConfigError, PipelineError, RangeError, TemplateError
from vc_changelog.parsing.models import RawCommit
from vc_changelog.vcs.git_client import GitError


class DummyRepository:
    def __init__(self, messages, tags=None):
        self.commits = [
            RawCommit(
                hash=str(index) * 40,
                author="Dev",
                date=datetime(2024, 5, 10 - index, tzinfo=timezone.utc),
                parent_count=1,
                message=message,
            )
            for index, message in enumerate(messages, start=1)
        ]
        self.tags = tags or {}

    def resolve_ref(self, name):
        if name != "HEAD":
            raise GitError(f"Unknown revision '{name}'")
        return self.commits[0].hash

    def list_commits(self, to, exclude=None):
        return list(self.commits)

    def list_tags(self):
        return self.tags


class CLITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def invoke(self, repository, args):
        with patch.object(cli, "detect_repo", return_value=(self.root, repository)):
            return self.runner.invoke(cli.main, args)


class TestGenerateCommand(CLITestCase):
    def test_markdown_to_stdout(self) -> None:
        repository = DummyRepository(["feat: add export", "fix(io): close files"])
        result = self.invoke(repository, ["generate"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("# Changelog", result.output)
        self.assertIn("### Features", result.output)
        self.assertIn("- **io:** close files (2222222)", result.output)

    def test_detailed_flag_shows_bodies(self) -> None:
        repository = DummyRepository(["feat: add export\n\nWrites CSV files."])
        result = self.invoke(repository, ["generate", "--detailed"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("  Writes CSV files.", result.output)

        result = self.invoke(repository, ["generate"])
        self.assertNotIn("Writes CSV files.", result.output)

    def test_missing_config_reports_defaults(self) -> None:
        result = self.invoke(DummyRepository(["feat: a"]), ["generate"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("using default settings", result.output)

        (self.root / CONFIG_FILE_NAME).write_text("{}", encoding="utf-8")
        result = self.invoke(DummyRepository(["feat: a"]), ["generate"])
        self.assertNotIn("using default settings", result.output)

    def test_json_to_file(self) -> None:
        repository = DummyRepository(["feat: add export"], tags={"1" * 40: ["v0.1.0"]})
        output = self.root / "CHANGELOG.json"
        result = self.invoke(repository, ["generate", "--format", "json", "-o", str(output)])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        data = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual(data["releases"][0]["release_label"], "v0.1.0")

    def test_unknown_reference(self) -> None:
        result = self.invoke(DummyRepository(["feat: a"]), ["generate", "--from", "v9"])
        self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)
        self.assertIn("v9", result.output)

    def test_invalid_configuration(self) -> None:
        (self.root / CONFIG_FILE_NAME).write_text('{"sort_key": "random"}', encoding="utf-8")
        result = self.invoke(DummyRepository(["feat: a"]), ["generate"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_missing_template(self) -> None:
        (self.root / CONFIG_FILE_NAME).write_text('{"template": "missing.json"}', encoding="utf-8")
        result = self.invoke(DummyRepository(["feat: a"]), ["generate"])
        self.assertEqual(result.exit_code, cli.EXIT_TEMPLATE_ERROR)

    def test_no_repository(self) -> None:
        with patch.object(cli.GitClient, "find_repo_root", return_value=None):
            result = self.runner.invoke(cli.main, ["generate", "--path", str(self.root)])
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)

    def test_invalid_format_is_usage_error(self) -> None:
        result = self.invoke(DummyRepository(["feat: a"]), ["generate", "--format", "html"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)


class TestLintCommand(CLITestCase):
    def test_all_conforming(self) -> None:
        result = self.invoke(DummyRepository(["feat: a", "fix: b"]), ["lint"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("All 2 commit(s) conform", result.output)

    def test_failures(self) -> None:
        result = self.invoke(DummyRepository(["feat: a", "updated stuff", "wip: b"]), ["lint"])
        self.assertEqual(result.exit_code, cli.EXIT_LINT_FAILURE)
        self.assertIn("2 of 3 commit(s) do not conform", result.output)
        self.assertIn("unknown category 'wip'", result.output)


class TestVerifyCommand(CLITestCase):
    def run_verify(self, message: str):
        message_file = self.root / "COMMIT_EDITMSG"
        message_file.write_text(message, encoding="utf-8")
        with patch.object(cli.GitClient, "find_repo_root", return_value=None):
            return self.runner.invoke(cli.main, ["verify", str(message_file), "--path", str(self.root)])

    def test_conforming_message(self) -> None:
        result = self.run_verify("feat(cli): add verify\n# Please enter the commit message\n")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)

    def test_malformed_message(self) -> None:
        result = self.run_verify("added verify\n")
        self.assertEqual(result.exit_code, cli.EXIT_LINT_FAILURE)

    def test_comment_only_message(self) -> None:
        result = self.run_verify("# nothing here\n")
        self.assertEqual(result.exit_code, cli.EXIT_LINT_FAILURE)


class TestSetupCommand(CLITestCase):
    def test_writes_default_config(self) -> None:
        result = self.invoke(None, ["setup"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        data = json.loads((self.root / CONFIG_FILE_NAME).read_text(encoding="utf-8"))
        self.assertEqual(data["sort_key"], "scope_then_summary")


class TestHelpers(unittest.TestCase):
    def test_version_option(self) -> None:
        result = CliRunner().invoke(cli.main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_exit_code_mapping(self) -> None:
        self.assertEqual(cli.exit_code_for(ConfigError("x")), cli.EXIT_CONFIG_ERROR)
        self.assertEqual(cli.exit_code_for(RangeError("v1", "unknown")), cli.EXIT_VCS_FAILURE)
        self.assertEqual(cli.exit_code_for(GitError("x")), cli.EXIT_VCS_FAILURE)
        self.assertEqual(cli.exit_code_for(TemplateError("x")), cli.EXIT_TEMPLATE_ERROR)
        self.assertEqual(cli.exit_code_for(PipelineError("x")), cli.EXIT_PIPELINE_ERROR)
        self.assertEqual(cli.exit_code_for(ValueError("x")), cli.EXIT_GENERIC_ERROR)


if __name__ == "__main__":
    unittest.main()

import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from vc_changelog.parsing.grammar import MessageParser
from vc_changelog.parsing.lint import lint_commits, lint_message, verify_file
from vc_changelog.parsing.models import ParseOutcome, RawCommit


def make_commit(hash_char: str, message: str) -> RawCommit:
    return RawCommit(
        hash=hash_char * 40,
        author="Dev",
        date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        parent_count=1,
        message=message,
    )


class TestLintMessage(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = MessageParser(["feat", "fix"])

    def test_conforming_message_passes(self) -> None:
        result = lint_message(self.parser, "feat(cli): add flag\n\nbody")
        self.assertTrue(result.passed)
        self.assertEqual(result.outcome, ParseOutcome.CONFORMING)
        self.assertEqual(result.header, "feat(cli): add flag")
        self.assertEqual(result.problems, ())

    def test_malformed_header_fails(self) -> None:
        result = lint_message(self.parser, "added a flag")
        self.assertFalse(result.passed)
        self.assertEqual(result.outcome, ParseOutcome.MALFORMED_HEADER)
        self.assertEqual(result.header, "added a flag")
        self.assertEqual(len(result.problems), 1)

    def test_unknown_category_names_the_token(self) -> None:
        result = lint_message(self.parser, "chore: bump deps")
        self.assertFalse(result.passed)
        self.assertEqual(result.outcome, ParseOutcome.UNKNOWN_CATEGORY)
        self.assertIn("'chore'", result.problems[0])
        self.assertIn("feat", result.problems[0])

    def test_empty_message_fails(self) -> None:
        result = lint_message(self.parser, "\n\n")
        self.assertFalse(result.passed)
        self.assertEqual(result.outcome, ParseOutcome.EMPTY)


class TestLintCommits(unittest.TestCase):
    def test_report_counts_failures_in_order(self) -> None:
        parser = MessageParser(["feat", "fix"])
        commits = [
            make_commit("a", "feat: one"),
            make_commit("b", "WIP"),
            make_commit("c", "fix: two"),
            make_commit("d", "docs: three"),
        ]
        report = lint_commits(parser, commits)
        self.assertEqual(len(report.results), 4)
        self.assertFalse(report.passed)
        self.assertEqual(report.warning_count, 2)
        self.assertEqual([r.commit.hash[0] for r in report.failures], ["b", "d"])
        self.assertTrue(all(r.outcome.is_fallback for r in report.failures))
        self.assertFalse(any(r.outcome.is_fallback for r in report.results if r.passed))

    def test_empty_report_passes(self) -> None:
        report = lint_commits(MessageParser(["feat"]), [])
        self.assertTrue(report.passed)
        self.assertEqual(report.warning_count, 0)


class TestVerifyFile(unittest.TestCase):
    def test_comment_lines_are_ignored(self) -> None:
        parser = MessageParser(["feat"])
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "COMMIT_EDITMSG"
            path.write_text("# Please enter the commit message\nfeat: add thing\n\n# On branch main\n", encoding="utf-8")
            result = verify_file(parser, path)
        self.assertTrue(result.passed)

    def test_non_conforming_file_fails(self) -> None:
        parser = MessageParser(["feat"])
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "msg"
            path.write_text("did some work\n", encoding="utf-8")
            result = verify_file(parser, path)
        self.assertFalse(result.passed)
        self.assertEqual(result.header, "did some work")


if __name__ == "__main__":
    unittest.main()

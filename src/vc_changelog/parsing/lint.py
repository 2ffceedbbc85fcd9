"""
Commit message linting.

Linting reuses the grammar parser and turns its outcome into a pass/fail
verdict. It is meant for gating commits (for example from a
``commit-msg`` hook) and is not part of changelog generation itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from vc_changelog.parsing.grammar import MessageParser
from vc_changelog.parsing.models import ParseOutcome, RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


_PROBLEMS = {
    ParseOutcome.EMPTY: "commit message is empty",
    ParseOutcome.MALFORMED_HEADER: "header does not match 'category(scope): summary'",
    ParseOutcome.UNKNOWN_CATEGORY: "header uses a category that is not configured",
}


@dataclass(frozen=True)
class LintResult:
    """Verdict for a single message."""

    passed: bool
    outcome: ParseOutcome
    header: str
    problems: Tuple[str, ...] = ()
    commit: Optional[RawCommit] = None


@dataclass(frozen=True)
class LintReport:
    """Verdicts for a batch of commits."""

    results: Tuple[LintResult, ...]

    @property
    def failures(self) -> Tuple[LintResult, ...]:
        return tuple(result for result in self.results if not result.passed)

    @property
    def warning_count(self) -> int:
        return len(self.failures)

    @property
    def passed(self) -> bool:
        return not self.failures


def lint_message(parser: MessageParser, message: str, commit: Optional[RawCommit] = None) -> LintResult:
    """Check ``message`` against the commit message grammar."""
    parsed = parser.parse(message, source=commit)
    if not parsed.outcome.is_fallback:
        header = _header_line(message)
        return LintResult(passed=True, outcome=parsed.outcome, header=header, commit=commit)

    problem = _PROBLEMS[parsed.outcome]
    if parsed.outcome is ParseOutcome.UNKNOWN_CATEGORY:
        token = parser.patterns.header.match(parsed.summary.strip()).group("category")
        known = ", ".join(parser.patterns.categories.values())
        problem = f"unknown category '{token}' (expected one of: {known})"
    return LintResult(
        passed=False,
        outcome=parsed.outcome,
        header=parsed.summary,
        problems=(problem,),
        commit=commit,
    )


def lint_commits(parser: MessageParser, commits: Iterable[RawCommit]) -> LintReport:
    """Lint every commit and collect the verdicts in input order."""
    results: List[LintResult] = []
    for commit in commits:
        result = lint_message(parser, commit.message, commit=commit)
        if not result.passed:
            logger.warning("Commit %s does not conform: %s", commit.short_hash, "; ".join(result.problems))
        results.append(result)
    return LintReport(results=tuple(results))


def verify_file(parser: MessageParser, path: Path) -> LintResult:
    """Lint a commit message file such as ``.git/COMMIT_EDITMSG``.

    Lines starting with ``#`` are dropped first, the way ``git commit``
    strips them before recording the message.
    """
    text = path.read_text(encoding="utf-8")
    message = "\n".join(line for line in text.splitlines() if not line.startswith("#"))
    return lint_message(parser, message)


def _header_line(message: str) -> str:
    for line in message.splitlines():
        if line.strip():
            return line.strip()
    return ""

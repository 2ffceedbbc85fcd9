"""
Commit message grammar.

See :mod:`vc_changelog.parsing.grammar` for the parser and
:mod:`vc_changelog.parsing.lint` for the pass/fail linting built on it.
"""

from .models import UNCATEGORIZED, Footer, ParseOutcome, ParsedCommit, RawCommit  # noqa: F401
from .grammar import GrammarPatterns, MessageParser  # noqa: F401
from .lint import LintReport, LintResult, lint_commits, lint_message, verify_file  # noqa: F401

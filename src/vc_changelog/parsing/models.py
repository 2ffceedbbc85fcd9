"""
Data models for parsed commit messages.

:class:`RawCommit` is the record handed over by the repository
collaborator; :class:`ParsedCommit` is what the grammar parser makes of
its message. Both are frozen so that they can be shared between parse
workers and aggregation without copying.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


UNCATEGORIZED = "uncategorized"


@dataclass(frozen=True)
class RawCommit:
    """A commit as read from the repository.

    Attributes
    ----------
    hash : str
        Full object name of the commit.
    author : str
        Author name.
    date : datetime
        Commit timestamp (timezone aware when read from git).
    parent_count : int
        Number of parents; greater than one for merge commits.
    message : str
        The raw, unparsed commit message.
    """

    hash: str
    author: str
    date: datetime
    parent_count: int
    message: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1


@dataclass(frozen=True)
class Footer:
    """A ``Key: value`` trailer of a commit message."""

    key: str
    value: str

    @property
    def is_breaking(self) -> bool:
        return self.key.upper().replace("-", " ") == "BREAKING CHANGE"


class ParseOutcome(enum.Enum):
    """How a message was understood by the parser."""

    CONFORMING = "conforming"
    UNKNOWN_CATEGORY = "unknown_category"
    MALFORMED_HEADER = "malformed_header"
    EMPTY = "empty"

    @property
    def is_fallback(self) -> bool:
        return self is not ParseOutcome.CONFORMING


@dataclass(frozen=True)
class ParsedCommit:
    """Structured view of a single commit message.

    Fallback records (anything whose ``outcome`` is not
    :attr:`ParseOutcome.CONFORMING`) always carry the
    :data:`UNCATEGORIZED` category, the header line as summary, no body,
    no footers and ``breaking=False``.
    """

    category: str
    summary: str
    scope: Optional[str] = None
    body: Tuple[str, ...] = ()
    footers: Tuple[Footer, ...] = ()
    breaking: bool = False
    outcome: ParseOutcome = ParseOutcome.CONFORMING
    source: Optional[RawCommit] = None

    @property
    def conforming(self) -> bool:
        return self.outcome is ParseOutcome.CONFORMING

    @property
    def breaking_notes(self) -> Tuple[str, ...]:
        """Values of all breaking-change footers, in message order."""
        return tuple(footer.value for footer in self.footers if footer.is_breaking)

    def footer_values(self, key: str) -> Tuple[str, ...]:
        """Return the values of every footer named ``key`` (case-insensitive)."""
        wanted = key.lower()
        return tuple(footer.value for footer in self.footers if footer.key.lower() == wanted)

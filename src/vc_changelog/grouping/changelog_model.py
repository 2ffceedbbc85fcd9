"""
Data models for an aggregated changelog.

A :class:`Changelog` describes one release (or the unreleased work) and
holds one :class:`ChangelogSection` per category that has entries. Both
are created per generation run and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from vc_changelog.parsing.models import ParsedCommit


@dataclass(frozen=True)
class ChangelogSection:
    """Commits of one category, in their final order.

    Attributes
    ----------
    tag : str
        The category tag (``feat``, ``fix``, ...).
    label : str
        Display name of the category.
    commits : Tuple[ParsedCommit, ...]
        Sorted commits of this category.
    """

    tag: str
    label: str
    commits: Tuple[ParsedCommit, ...]


@dataclass(frozen=True)
class Changelog:
    """Sections of one release in configured category order."""

    release_label: Optional[str] = None
    sections: Tuple[ChangelogSection, ...] = ()
    release_date: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return not self.sections

    @property
    def commit_count(self) -> int:
        return sum(len(section.commits) for section in self.sections)

    @property
    def breaking_changes(self) -> Tuple[ParsedCommit, ...]:
        return tuple(commit for section in self.sections for commit in section.commits if commit.breaking)

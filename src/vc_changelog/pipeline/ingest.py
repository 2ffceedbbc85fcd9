"""
Commit record ingestion.

The ingestor resolves the boundaries of a commit range through the
repository collaborator, fetches the commits in between and applies the
merge filter. The collaborator only has to provide ``resolve_ref`` and
``list_commits``; :class:`vc_changelog.vcs.GitClient` is the production
implementation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from vc_changelog.errors import RangeError
from vc_changelog.parsing.models import RawCommit
from vc_changelog.vcs.git_client import GitError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


@dataclass(frozen=True)
class CommitRange:
    """Commits reachable from ``to`` but not from ``from_``.

    Without ``from_`` the range covers the whole history of ``to``.
    """

    to: str = "HEAD"
    from_: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.from_}..{self.to}" if self.from_ else self.to


def filter_commits(commits: Iterable[RawCommit], include_merges: bool = False) -> List[RawCommit]:
    """Drop merge commits unless requested and order newest first.

    Ordering is by commit date, descending; commits with the same date
    are ordered by hash so that the result does not depend on how the
    collaborator listed them.
    """
    selected = [commit for commit in commits if include_merges or not commit.is_merge]
    selected.sort(key=lambda commit: commit.hash)
    selected.sort(key=lambda commit: commit.date, reverse=True)
    return selected


class CommitIngestor:
    """Select the raw commits of a range from a repository."""

    def __init__(self, repository) -> None:
        self.repository = repository

    def resolve(self, reference: str) -> str:
        """Resolve ``reference`` to a commit hash.

        Raises
        ------
        RangeError
            If the repository does not know ``reference``.
        """
        try:
            return self.repository.resolve_ref(reference)
        except GitError as exc:
            raise RangeError(reference, str(exc)) from exc

    def select(self, commit_range: CommitRange, include_merges: bool = False) -> List[RawCommit]:
        """Return the commits of ``commit_range``, newest first.

        Raises
        ------
        RangeError
            If ``to`` or ``from_`` does not resolve.
        """
        to_hash = self.resolve(commit_range.to)
        from_hash = self.resolve(commit_range.from_) if commit_range.from_ else None
        commits = self.repository.list_commits(to_hash, from_hash)
        selected = filter_commits(commits, include_merges=include_merges)
        logger.debug(
            "Selected %d of %d commits in range %s (include_merges=%s)",
            len(selected),
            len(commits),
            commit_range,
            include_merges,
        )
        return selected

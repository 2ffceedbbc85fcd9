"""
Splitting a commit list into releases.

Walking the selected commits newest first, every commit that carries a
tag opens a new release; the commits seen before the first tag belong to
the unreleased work on top of the latest release.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from vc_changelog.parsing.models import RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


@dataclass(frozen=True)
class Release:
    """Commits belonging to one tag, or to no tag yet (``label is None``)."""

    label: Optional[str]
    date: Optional[date]
    commits: Tuple[RawCommit, ...]

    @property
    def unreleased(self) -> bool:
        return self.label is None


def _release_tag(names: Iterable[str], skip_pattern: str) -> Optional[str]:
    candidates = sorted(name for name in names if not (skip_pattern and skip_pattern in name))
    return candidates[-1] if candidates else None


def split_releases(
    commits: Sequence[RawCommit],
    tags: Mapping[str, Sequence[str]],
    tag_skip_pattern: str = "rc",
    max_tags: int = 1,
    all_tags: bool = False,
    skip_unreleased: bool = False,
) -> List[Release]:
    """Group ``commits`` (newest first) into releases.

    Parameters
    ----------
    commits : Sequence[RawCommit]
        Commits as selected by the ingestor, newest first.
    tags : Mapping[str, Sequence[str]]
        Tag names by commit hash, as returned by ``list_tags``.
    tag_skip_pattern : str
        Tags whose name contains this text are ignored (e.g. ``rc``).
        An empty pattern keeps every tag.
    max_tags : int
        Number of tagged releases to include unless ``all_tags`` is set.
    all_tags : bool
        Walk the whole list regardless of ``max_tags``.
    skip_unreleased : bool
        Drop commits that are newer than the first tag.

    Returns
    -------
    List[Release]
        Non-empty releases, newest first.
    """
    releases: List[Release] = []
    label: Optional[str] = None
    release_date: Optional[date] = None
    current: List[RawCommit] = []
    opened = 0

    for index, commit in enumerate(commits):
        tag = _release_tag(tags.get(commit.hash, ()), tag_skip_pattern)
        if tag is not None:
            if current:
                releases.append(Release(label=label, date=release_date, commits=tuple(current)))
                current = []
            if not all_tags and index > 0 and opened >= max_tags:
                logger.debug("Stopping at tag '%s' after %d release(s)", tag, opened)
                return releases
            opened += 1
            label = tag
            release_date = commit.date.date()

        if skip_unreleased and label is None:
            continue
        current.append(commit)

    if current:
        releases.append(Release(label=label, date=release_date, commits=tuple(current)))
    return releases

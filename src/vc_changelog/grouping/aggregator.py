"""
Aggregation of parsed commits into changelog sections.

The aggregator is deterministic: given the same parsed sequence and the
same configuration it always builds an equal :class:`Changelog`. Every
sort is stable and falls back to the input position, which the parse
pipeline guarantees to be the commit order.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from vc_changelog.config.settings import ChangelogConfig, SortKey
from vc_changelog.grouping.changelog_model import Changelog, ChangelogSection
from vc_changelog.parsing.models import ParsedCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


Indexed = Tuple[int, ParsedCommit]


def scope_then_summary(commit: ParsedCommit) -> tuple:
    """Sort key: scope ascending with missing scopes last, then summary."""
    return (commit.scope is None, (commit.scope or "").casefold(), commit.summary.casefold())


def date_desc(commit: ParsedCommit) -> tuple:
    """Sort key: newest first; records without a source commit go last."""
    if commit.source is None:
        return (True, 0.0)
    return (False, -commit.source.date.timestamp())


_SORT_KEYS = {
    SortKey.SCOPE_THEN_SUMMARY: scope_then_summary,
    SortKey.DATE_DESC: date_desc,
}


def dedupe_key(commit: ParsedCommit) -> Tuple[str, str, str]:
    return (commit.category, (commit.scope or "").strip(), commit.summary.strip())


def _is_newer(candidate: ParsedCommit, kept: ParsedCommit) -> bool:
    if candidate.source is None or kept.source is None:
        return False
    return candidate.source.date > kept.source.date


def dedupe(entries: Iterable[Indexed]) -> List[Indexed]:
    """Collapse entries with the same trimmed category, scope and summary.

    The most recent commit of each group is kept, together with its input
    position; on equal dates the earlier input position wins.
    """
    chosen: Dict[Tuple[str, str, str], Indexed] = {}
    for index, commit in entries:
        key = dedupe_key(commit)
        kept = chosen.get(key)
        if kept is None or _is_newer(commit, kept[1]):
            chosen[key] = (index, commit)
    return sorted(chosen.values(), key=lambda entry: entry[0])


def sort_commits(entries: Sequence[Indexed], sort_key: SortKey) -> List[ParsedCommit]:
    key = _SORT_KEYS[sort_key]
    ordered = sorted(entries, key=lambda entry: (key(entry[1]), entry[0]))
    return [commit for _, commit in ordered]


def aggregate(
    parsed: Sequence[ParsedCommit],
    config: ChangelogConfig,
    release_label: Optional[str] = None,
    release_date: Optional[date] = None,
) -> Changelog:
    """Group ``parsed`` into a :class:`Changelog`.

    1. Commits of an excluded category are dropped.
    2. With ``config.dedupe`` duplicate entries are collapsed.
    3. The rest is bucketed by category and emitted in the configured
       category order; empty buckets and categories that are not
       configured (including ``uncategorized``) produce no section.
    4. Each bucket is sorted by ``config.sort_key``, ties keeping the
       input order.
    """
    entries: List[Indexed] = [
        (index, commit)
        for index, commit in enumerate(parsed)
        if commit.category not in config.excluded_categories
    ]
    if config.dedupe:
        before = len(entries)
        entries = dedupe(entries)
        logger.debug("De-duplication removed %d commit(s)", before - len(entries))

    buckets: Dict[str, List[Indexed]] = {}
    for entry in entries:
        buckets.setdefault(entry[1].category, []).append(entry)

    sections = []
    for spec in config.categories:
        bucket = buckets.get(spec.tag)
        if not bucket:
            continue
        sections.append(
            ChangelogSection(tag=spec.tag, label=spec.label, commits=tuple(sort_commits(bucket, config.sort_key)))
        )

    changelog = Changelog(release_label=release_label, sections=tuple(sections), release_date=release_date)
    logger.debug(
        "Aggregated %d of %d commits into %d section(s) for %s",
        changelog.commit_count,
        len(parsed),
        len(sections),
        release_label or "unreleased changes",
    )
    return changelog

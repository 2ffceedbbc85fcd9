"""
Structural (de)serialisation of changelogs.

:func:`changelog_to_dict` produces the plain data written by the JSON and
TOML renderers; :func:`changelog_from_dict` turns such data back into an
equal :class:`Changelog`. Dates are written as ISO 8601 strings in both
formats. ``None`` values are omitted for TOML, which has no null, and
read back as ``None``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Mapping

from vc_changelog.grouping.changelog_model import Changelog, ChangelogSection
from vc_changelog.parsing.models import Footer, ParseOutcome, ParsedCommit, RawCommit


def commit_to_dict(commit: ParsedCommit) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "category": commit.category,
        "scope": commit.scope,
        "summary": commit.summary,
        "body": list(commit.body),
        "footers": [{"key": footer.key, "value": footer.value} for footer in commit.footers],
        "breaking": commit.breaking,
        "outcome": commit.outcome.value,
    }
    if commit.source is not None:
        data["commit"] = {
            "hash": commit.source.hash,
            "author": commit.source.author,
            "date": commit.source.date.isoformat(),
            "parent_count": commit.source.parent_count,
            "message": commit.source.message,
        }
    return data


def changelog_to_dict(changelog: Changelog) -> Dict[str, Any]:
    return {
        "release_label": changelog.release_label,
        "release_date": changelog.release_date.isoformat() if changelog.release_date else None,
        "sections": [
            {
                "tag": section.tag,
                "label": section.label,
                "commits": [commit_to_dict(commit) for commit in section.commits],
            }
            for section in changelog.sections
        ],
    }


def strip_none(value: Any) -> Any:
    """Recursively drop ``None`` entries from dictionaries."""
    if isinstance(value, dict):
        return {key: strip_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [strip_none(item) for item in value]
    return value


def commit_from_dict(data: Mapping[str, Any]) -> ParsedCommit:
    source = None
    raw = data.get("commit")
    if raw is not None:
        source = RawCommit(
            hash=raw["hash"],
            author=raw["author"],
            date=datetime.fromisoformat(raw["date"]),
            parent_count=raw["parent_count"],
            message=raw["message"],
        )
    return ParsedCommit(
        category=data["category"],
        scope=data.get("scope"),
        summary=data["summary"],
        body=tuple(data.get("body", ())),
        footers=tuple(Footer(key=item["key"], value=item["value"]) for item in data.get("footers", ())),
        breaking=data.get("breaking", False),
        outcome=ParseOutcome(data.get("outcome", ParseOutcome.CONFORMING.value)),
        source=source,
    )


def changelog_from_dict(data: Mapping[str, Any]) -> Changelog:
    release_date = data.get("release_date")
    sections: List[ChangelogSection] = [
        ChangelogSection(
            tag=section["tag"],
            label=section["label"],
            commits=tuple(commit_from_dict(commit) for commit in section.get("commits", ())),
        )
        for section in data.get("sections", ())
    ]
    return Changelog(
        release_label=data.get("release_label"),
        sections=tuple(sections),
        release_date=date.fromisoformat(release_date) if release_date else None,
    )

"""
Grammar based parser for commit messages.

The recognised message layout is::

    category(scope)!: summary

    Body paragraph, possibly
    spanning several lines.

    Another paragraph.

    Refs #123
    BREAKING CHANGE: what callers have to change

The header is mandatory for a message to *conform*; the scope, the
breaking marker, the body and the footers are optional. Messages that do
not follow the layout are never rejected: they degrade to an
uncategorized record whose summary is the header line as written.

All regular expressions live in an immutable :class:`GrammarPatterns`
instance which is compiled once per run and shared read-only between
parse workers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from vc_changelog.parsing.models import (
    UNCATEGORIZED,
    Footer,
    ParseOutcome,
    ParsedCommit,
    RawCommit,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


TAG_PATTERN = r"[A-Za-z][A-Za-z0-9_-]*"

_HEADER = (
    r"^(?P<category>" + TAG_PATTERN + r")"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<breaking>!)?"
    r":[ \t]+(?P<summary>\S.*)$"
)
_FOOTER = (
    r"^(?P<key>(?i:BREAKING[ -]CHANGE)|[A-Za-z][A-Za-z-]*)"
    r"(?::[ \t]+|[ \t]#)"
    r"(?P<value>\S.*)$"
)


@dataclass(frozen=True)
class GrammarPatterns:
    """Compiled grammar shared by every parse worker.

    Attributes
    ----------
    header : re.Pattern
        Matches ``category(scope)!: summary`` header lines.
    footer : re.Pattern
        Matches ``Key: value`` and ``Key #value`` footer lines.
    categories : Mapping[str, str]
        Lower-cased category token mapped to the configured tag.
    """

    header: re.Pattern
    footer: re.Pattern
    categories: Mapping[str, str]

    @classmethod
    def compile(cls, tags: Iterable[str]) -> "GrammarPatterns":
        known = {}
        for tag in tags:
            if tag == UNCATEGORIZED:
                continue
            known.setdefault(tag.lower(), tag)
        return cls(
            header=re.compile(_HEADER),
            footer=re.compile(_FOOTER),
            categories=MappingProxyType(known),
        )

    def lookup(self, token: str) -> Optional[str]:
        """Return the configured tag for ``token`` or ``None`` if unknown."""
        return self.categories.get(token.lower())


class MessageParser:
    """Turn raw commit messages into :class:`ParsedCommit` records.

    ``parse`` is total: any string, including the empty string, yields a
    valid record.
    """

    def __init__(self, categories: Iterable[str]) -> None:
        self.patterns = GrammarPatterns.compile(categories)

    @classmethod
    def from_config(cls, config) -> "MessageParser":
        """Build a parser for the categories of a :class:`ChangelogConfig`."""
        return cls(spec.tag for spec in config.categories)

    def parse(self, raw_message: str, source: Optional[RawCommit] = None) -> ParsedCommit:
        lines = raw_message.splitlines()
        header_index = next((i for i, line in enumerate(lines) if line.strip()), None)
        if header_index is None:
            return _fallback("", ParseOutcome.EMPTY, source)

        header = lines[header_index].rstrip()
        match = self.patterns.header.match(header.strip())
        if match is None:
            return _fallback(header, ParseOutcome.MALFORMED_HEADER, source)

        category = self.patterns.lookup(match.group("category"))
        if category is None:
            logger.debug("Unknown category '%s' in header: %s", match.group("category"), header)
            return _fallback(header, ParseOutcome.UNKNOWN_CATEGORY, source)

        body, footers = self._split_body(lines[header_index + 1:])
        breaking = match.group("breaking") is not None or any(f.is_breaking for f in footers)
        return ParsedCommit(
            category=category,
            scope=(match.group("scope") or "").strip() or None,
            summary=match.group("summary").strip(),
            body=body,
            footers=footers,
            breaking=breaking,
            outcome=ParseOutcome.CONFORMING,
            source=source,
        )

    def parse_commit(self, commit: RawCommit) -> ParsedCommit:
        return self.parse(commit.message, source=commit)

    def _split_body(self, lines: List[str]) -> Tuple[Tuple[str, ...], Tuple[Footer, ...]]:
        """Split the lines after the header into body paragraphs and footers.

        The footer block is the trailing run of paragraphs whose first line
        is a footer line, plus any run of footer lines that closes the last
        body paragraph. Inside that block, lines that are not footer lines
        continue the value of the preceding footer.
        """
        paragraphs = _paragraphs(lines)
        footer_start = len(paragraphs)
        while footer_start > 0 and self.patterns.footer.match(paragraphs[footer_start - 1][0]):
            footer_start -= 1

        body_paragraphs = paragraphs[:footer_start]
        footer_lines = [line for paragraph in paragraphs[footer_start:] for line in paragraph]
        if body_paragraphs:
            last = body_paragraphs[-1]
            split = len(last)
            while split > 1 and self.patterns.footer.match(last[split - 1]):
                split -= 1
            if split < len(last):
                body_paragraphs[-1] = last[:split]
                footer_lines = last[split:] + footer_lines

        body = tuple("\n".join(paragraph).strip() for paragraph in body_paragraphs)

        entries: List[List[str]] = []
        for line in footer_lines:
            match = self.patterns.footer.match(line)
            if match:
                entries.append([match.group("key"), match.group("value").strip()])
            else:
                entries[-1][1] = f"{entries[-1][1]}\n{line.strip()}"
        return body, tuple(Footer(key=key, value=value) for key, value in entries)


def _paragraphs(lines: List[str]) -> List[List[str]]:
    paragraphs: List[List[str]] = []
    current: List[str] = []
    for line in lines:
        if line.strip():
            current.append(line.rstrip())
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)
    return paragraphs


def _fallback(summary: str, outcome: ParseOutcome, source: Optional[RawCommit]) -> ParsedCommit:
    return ParsedCommit(
        category=UNCATEGORIZED,
        summary=summary,
        outcome=outcome,
        source=source,
    )

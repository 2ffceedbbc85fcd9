"""
Changelog rendering.

Markdown output goes through a :class:`TemplateSpec`; JSON and TOML
output is a direct serialisation of the changelog structure meant for
other tools. The whole document is built in memory and returned as one
string, so a template error never leaves partial output behind.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import List, Optional, Sequence

import tomli_w

from vc_changelog.config.settings import OutputFormat
from vc_changelog.grouping.changelog_model import Changelog
from vc_changelog.parsing.models import ParsedCommit
from vc_changelog.rendering.serialize import changelog_to_dict, strip_none
from vc_changelog.rendering.template import DEFAULT_TEMPLATE, CompiledTemplate, TemplateSpec, compile_template


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


BREAKING_MARKER = " **BREAKING**"


def _commit_values(commit: ParsedCommit) -> dict:
    source = commit.source
    return {
        "scope": commit.scope,
        "summary": commit.summary,
        "hash": source.hash if source else "",
        "short_hash": source.short_hash if source else "",
        "author": source.author if source else "",
        "date": source.date.date().isoformat() if source else "",
        "category": commit.category,
        "breaking": commit.breaking,
        "breaking_marker": BREAKING_MARKER if commit.breaking else "",
    }


def _markdown_release(template: CompiledTemplate, changelog: Changelog, today: date) -> List[str]:
    lines: List[str] = []
    heading = template.render(
        "release_heading",
        release_label=changelog.release_label,
        date=(changelog.release_date or today).isoformat(),
        today=today.isoformat(),
    )
    if heading:
        lines.extend([heading, ""])
    for section in changelog.sections:
        section_heading = template.render("section_heading", label=section.label, tag=section.tag)
        if section_heading:
            lines.extend([section_heading, ""])
        for commit in section.commits:
            lines.append(template.render("commit_line", **_commit_values(commit)))
            if template.has("body_line"):
                lines.extend(template.render("body_line", paragraph=paragraph) for paragraph in commit.body)
            if template.has("footer_line"):
                lines.extend(
                    template.render("footer_line", key=footer.key, value=footer.value) for footer in commit.footers
                )
        lines.append("")
    return lines


def _render_markdown(changelogs: Sequence[Changelog], template: CompiledTemplate, today: date) -> str:
    lines: List[str] = []
    title = template.render("title", today=today.isoformat())
    if title:
        lines.extend([title, ""])
    for changelog in changelogs:
        lines.extend(_markdown_release(template, changelog, today))
    return "\n".join(lines).rstrip("\n") + "\n"


def _render_structure(data: dict, output_format: OutputFormat) -> str:
    if output_format is OutputFormat.JSON:
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return tomli_w.dumps(strip_none(data))


def render(
    changelog: Changelog,
    template: Optional[TemplateSpec] = None,
    output_format: OutputFormat = OutputFormat.MARKDOWN,
    today: Optional[date] = None,
) -> str:
    """Render a single changelog.

    JSON and TOML output is the object produced by
    :func:`~vc_changelog.rendering.serialize.changelog_to_dict`.

    Raises
    ------
    TemplateError
        If the Markdown template is malformed or uses unknown placeholders.
    """
    if output_format is OutputFormat.MARKDOWN:
        compiled = compile_template(template or DEFAULT_TEMPLATE)
        return _render_markdown([changelog], compiled, today or date.today())
    return _render_structure(changelog_to_dict(changelog), output_format)


def render_many(
    changelogs: Sequence[Changelog],
    template: Optional[TemplateSpec] = None,
    output_format: OutputFormat = OutputFormat.MARKDOWN,
    today: Optional[date] = None,
) -> str:
    """Render several releases, newest first, into one document.

    JSON and TOML output is an object with a ``releases`` list.
    """
    logger.debug("Rendering %d release(s) as %s", len(changelogs), output_format.value)
    if output_format is OutputFormat.MARKDOWN:
        compiled = compile_template(template or DEFAULT_TEMPLATE)
        return _render_markdown(changelogs, compiled, today or date.today())
    data = {"releases": [changelog_to_dict(changelog) for changelog in changelogs]}
    return _render_structure(data, output_format)

"""
Markdown templates.

A :class:`TemplateSpec` holds one Jinja2 template per element of the
Markdown document: the document title, the release heading, the section
heading, the line of a commit, its body paragraphs and the line of a
footer. Each element may only use its own placeholders; anything else is
a configuration error reported before a single line is rendered.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping

import jinja2
from jinja2 import meta

from vc_changelog.errors import TemplateError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PLACEHOLDERS: Mapping[str, frozenset] = {
    "title": frozenset({"today"}),
    "release_heading": frozenset({"release_label", "date", "today"}),
    "section_heading": frozenset({"label", "tag"}),
    "commit_line": frozenset(
        {
            "scope",
            "summary",
            "hash",
            "short_hash",
            "author",
            "date",
            "category",
            "breaking",
            "breaking_marker",
        }
    ),
    "body_line": frozenset({"paragraph"}),
    "footer_line": frozenset({"key", "value"}),
}


@dataclass(frozen=True)
class TemplateSpec:
    """Jinja2 sources for each element of a Markdown changelog.

    An empty string disables the element (for instance ``footer_line=""``
    renders no footers). ``body_line`` is rendered once per body paragraph
    of a commit.
    """

    title: str = "# Changelog"
    release_heading: str = "## {{ release_label or 'Unreleased' }} ({{ date }})"
    section_heading: str = "### {{ label }}"
    commit_line: str = (
        "- {% if scope %}**{{ scope }}:** {% endif %}{{ summary }}"
        "{% if short_hash %} ({{ short_hash }}){% endif %}{{ breaking_marker }}"
    )
    body_line: str = "  {{ paragraph | indent(2) }}"
    footer_line: str = "  - {{ key }}: {{ value }}"


DEFAULT_TEMPLATE = TemplateSpec()

_ENVIRONMENT = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    autoescape=False,
    keep_trailing_newline=False,
)


class CompiledTemplate:
    """A validated :class:`TemplateSpec`, ready to render."""

    def __init__(self, spec: TemplateSpec) -> None:
        self.spec = spec
        self._templates: Dict[str, jinja2.Template] = {}
        for part in PLACEHOLDERS:
            source = getattr(spec, part)
            if source:
                self._templates[part] = _compile_part(part, source)

    def has(self, part: str) -> bool:
        return part in self._templates

    def render(self, part: str, **values: Any) -> str:
        """Render one element; disabled elements render as ``""``."""
        template = self._templates.get(part)
        if template is None:
            return ""
        try:
            return template.render(**values)
        except jinja2.UndefinedError as exc:
            raise TemplateError(f"Template '{part}' failed: {exc.message}") from exc
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Template '{part}' failed: {exc}") from exc


def _compile_part(part: str, source: str) -> jinja2.Template:
    try:
        parsed = _ENVIRONMENT.parse(source)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(f"Malformed template '{part}': {exc.message} (line {exc.lineno})") from exc

    unknown = sorted(meta.find_undeclared_variables(parsed) - PLACEHOLDERS[part])
    if unknown:
        allowed = ", ".join(sorted(PLACEHOLDERS[part]))
        raise TemplateError(
            f"Unknown placeholder '{unknown[0]}' in template '{part}' (allowed: {allowed})",
            placeholder=unknown[0],
        )
    return _ENVIRONMENT.from_string(source)


def compile_template(spec: TemplateSpec = DEFAULT_TEMPLATE) -> CompiledTemplate:
    """Validate ``spec`` and compile all of its elements.

    Raises
    ------
    TemplateError
        On a syntax error or a placeholder the element does not provide.
    """
    return CompiledTemplate(spec)


def template_from_dict(data: Mapping[str, Any]) -> TemplateSpec:
    """Build a :class:`TemplateSpec` from a mapping of element sources."""
    known = {f.name for f in fields(TemplateSpec)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise TemplateError(f"Unknown template elements: {', '.join(unknown)}")
    for key, value in data.items():
        if not isinstance(value, str):
            raise TemplateError(f"Template element '{key}' must be a string")
    return TemplateSpec(**data)


def load_template(path: Path) -> TemplateSpec:
    """Load a JSON template file.

    The file holds an object whose keys are template elements (``title``,
    ``release_heading``, ``section_heading``, ``commit_line``,
    ``body_line``, ``footer_line``); missing elements keep their default.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise TemplateError(f"Could not load template {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TemplateError(f"Template {path} must contain a JSON object")
    spec = template_from_dict(data)
    logger.debug("Loaded template from: %s", path)
    return spec

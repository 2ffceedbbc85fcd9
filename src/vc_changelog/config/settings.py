"""
Validated changelog configuration.

The raw configuration is a plain dictionary (as read from JSON by
:mod:`vc_changelog.config.loader`). :func:`validate_config` checks every
recognised option and turns the whole thing into a frozen
:class:`ChangelogConfig`, so configuration problems surface before any
commit is read.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from vc_changelog.errors import ConfigError
from vc_changelog.parsing.grammar import TAG_PATTERN
from vc_changelog.parsing.models import UNCATEGORIZED


class SortKey(enum.Enum):
    """Ordering of commits inside a changelog section."""

    SCOPE_THEN_SUMMARY = "scope_then_summary"
    DATE_DESC = "date_desc"


class OutputFormat(enum.Enum):
    """Encodings supported by the renderer."""

    MARKDOWN = "markdown"
    JSON = "json"
    TOML = "toml"


@dataclass(frozen=True)
class CategorySpec:
    """A configured category tag and its display label."""

    tag: str
    label: str


DEFAULT_CATEGORIES: Tuple[CategorySpec, ...] = (
    CategorySpec("feat", "Features"),
    CategorySpec("fix", "Bug Fixes"),
    CategorySpec("perf", "Performance Improvements"),
    CategorySpec("refactor", "Code Refactoring"),
    CategorySpec("docs", "Documentation"),
    CategorySpec("style", "Styles"),
    CategorySpec("test", "Tests"),
    CategorySpec("build", "Build System"),
    CategorySpec("ci", "Continuous Integration"),
    CategorySpec("chore", "Chores"),
    CategorySpec("revert", "Reverts"),
)


@dataclass(frozen=True)
class ChangelogConfig:
    """Options recognised by the changelog generator."""

    categories: Tuple[CategorySpec, ...] = DEFAULT_CATEGORIES
    excluded_categories: FrozenSet[str] = field(default_factory=frozenset)
    sort_key: SortKey = SortKey.SCOPE_THEN_SUMMARY
    include_merges: bool = False
    template: str = ""
    output_format: OutputFormat = OutputFormat.MARKDOWN
    dedupe: bool = False
    detailed_output: bool = False
    enable_footers: bool = False
    colored_output: bool = True
    tag_skip_pattern: str = "rc"
    workers: Optional[int] = None

    def category_index(self, tag: str) -> int:
        """Priority of ``tag`` in the configured order, ``-1`` if absent."""
        for index, spec in enumerate(self.categories):
            if spec.tag == tag:
                return index
        return -1

    def label_for(self, tag: str) -> str:
        for spec in self.categories:
            if spec.tag == tag:
                return spec.label
        return tag

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation understood by :func:`validate_config`."""
        return {
            "categories": [{"tag": spec.tag, "label": spec.label} for spec in self.categories],
            "excluded_categories": sorted(self.excluded_categories),
            "sort_key": self.sort_key.value,
            "include_merges": self.include_merges,
            "template": self.template,
            "output_format": self.output_format.value,
            "dedupe": self.dedupe,
            "detailed_output": self.detailed_output,
            "enable_footers": self.enable_footers,
            "colored_output": self.colored_output,
            "tag_skip_pattern": self.tag_skip_pattern,
            "workers": self.workers,
        }


_BOOL_KEYS = ("include_merges", "dedupe", "detailed_output", "enable_footers", "colored_output")
_STR_KEYS = ("template", "tag_skip_pattern")
_KNOWN_KEYS = frozenset(ChangelogConfig().to_dict())
_TAG_RE = re.compile(r"^" + TAG_PATTERN + r"$")


def parse_sort_key(value: Any) -> SortKey:
    try:
        return SortKey(value)
    except ValueError:
        choices = ", ".join(key.value for key in SortKey)
        raise ConfigError(f"Unknown sort_key '{value}' (expected one of: {choices})") from None


def parse_output_format(value: Any) -> OutputFormat:
    try:
        return OutputFormat(str(value).lower())
    except ValueError:
        choices = ", ".join(fmt.value for fmt in OutputFormat)
        raise ConfigError(f"Unknown output_format '{value}' (expected one of: {choices})") from None


def _validate_categories(raw: Any) -> Tuple[CategorySpec, ...]:
    if not isinstance(raw, list):
        raise ConfigError("'categories' must be a list of {\"tag\", \"label\"} objects")
    if not raw:
        raise ConfigError("'categories' must contain at least one category")

    specs = []
    seen = set()
    for entry in raw:
        if not isinstance(entry, Mapping) or not isinstance(entry.get("tag"), str):
            raise ConfigError(f"Invalid category entry: {entry!r}")
        tag = entry["tag"]
        label = entry.get("label", tag)
        if not _TAG_RE.match(tag):
            raise ConfigError(f"Invalid category tag '{tag}'")
        if not isinstance(label, str) or not label.strip():
            raise ConfigError(f"Category '{tag}' needs a non-empty label")
        if tag.lower() in seen:
            raise ConfigError(f"Duplicate category '{tag}'")
        seen.add(tag.lower())
        specs.append(CategorySpec(tag=tag, label=label))
    return tuple(specs)


def validate_config(data: Mapping[str, Any]) -> ChangelogConfig:
    """Validate a raw configuration mapping.

    Keys that are absent take their default value.

    Raises
    ------
    ConfigError
        On unknown keys, wrong types, an empty category list, duplicate
        tags, excluded tags outside the configured set, or an unknown
        ``sort_key`` / ``output_format``.
    """
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    defaults = ChangelogConfig()
    categories = defaults.categories
    if "categories" in data:
        categories = _validate_categories(data["categories"])

    for key in _BOOL_KEYS:
        if key in data and not isinstance(data[key], bool):
            raise ConfigError(f"'{key}' must be a boolean")
    for key in _STR_KEYS:
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")

    excluded = data.get("excluded_categories", [])
    if not isinstance(excluded, list) or not all(isinstance(tag, str) for tag in excluded):
        raise ConfigError("'excluded_categories' must be a list of strings")
    known_tags = {spec.tag for spec in categories} | {UNCATEGORIZED}
    for tag in excluded:
        if tag not in known_tags:
            raise ConfigError(f"Excluded category '{tag}' is not a configured category")

    workers = data.get("workers")
    if workers is not None and (isinstance(workers, bool) or not isinstance(workers, int) or workers < 1):
        raise ConfigError("'workers' must be a positive integer or null")

    return ChangelogConfig(
        categories=categories,
        excluded_categories=frozenset(excluded),
        sort_key=parse_sort_key(data.get("sort_key", defaults.sort_key.value)),
        include_merges=data.get("include_merges", defaults.include_merges),
        template=data.get("template", defaults.template),
        output_format=parse_output_format(data.get("output_format", defaults.output_format.value)),
        dedupe=data.get("dedupe", defaults.dedupe),
        detailed_output=data.get("detailed_output", defaults.detailed_output),
        enable_footers=data.get("enable_footers", defaults.enable_footers),
        colored_output=data.get("colored_output", defaults.colored_output),
        tag_skip_pattern=data.get("tag_skip_pattern", defaults.tag_skip_pattern),
        workers=workers,
    )

"""
Rendering of aggregated changelogs to Markdown, JSON and TOML.
"""

from .renderer import render, render_many  # noqa: F401
from .serialize import changelog_from_dict, changelog_to_dict  # noqa: F401
from .template import (  # noqa: F401
    DEFAULT_TEMPLATE,
    TemplateSpec,
    compile_template,
    load_template,
)

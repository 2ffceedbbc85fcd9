"""
Grouping of parsed commits into changelog sections.

See :mod:`vc_changelog.grouping.aggregator` for the grouping rules and
:mod:`vc_changelog.grouping.changelog_model` for the resulting models.
"""

from .aggregator import aggregate  # noqa: F401
from .changelog_model import Changelog, ChangelogSection  # noqa: F401

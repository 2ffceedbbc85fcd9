"""
Configuration handling for vc_changelog.

:mod:`vc_changelog.config.settings` defines and validates the options;
:mod:`vc_changelog.config.loader` reads them from the repository.
"""

from vc_changelog.errors import ConfigError  # noqa: F401
from .settings import (  # noqa: F401
    CategorySpec,
    ChangelogConfig,
    OutputFormat,
    SortKey,
    validate_config,
)
from .loader import load_config, save_default_config  # noqa: F401

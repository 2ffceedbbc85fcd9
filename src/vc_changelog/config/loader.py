"""
Configuration loader for vc_changelog.

The tool reads an optional JSON configuration file named
``.vcchangelog.json`` from the repository root. When the file does not
exist the built-in defaults are used; when it exists but cannot be read,
is not valid JSON, or fails validation, a :class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from vc_changelog.config.settings import ChangelogConfig, validate_config
from vc_changelog.errors import ConfigError


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments
# where the root logger is not configured, and keep records away from a
# root stream that may already be closed (e.g. during unit tests).
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = ".vcchangelog.json"


def get_config_path(repo_root: Path) -> Path:
    """Return the location of the configuration file for ``repo_root``."""
    return repo_root / CONFIG_FILE_NAME


def load_config(repo_root: Path) -> ChangelogConfig:
    """Load and validate the configuration of the repository at ``repo_root``.

    Args:
        repo_root: Root directory of the repository.

    Returns:
        The validated configuration; defaults if no file exists.

    Raises:
        ConfigError: If the file is unreadable, malformed, or invalid.
    """
    config_path = get_config_path(repo_root)
    if not config_path.exists():
        logger.info("No configuration file at '%s', using default values", config_path)
        return ChangelogConfig()

    try:
        content = config_path.read_text(encoding="utf-8")
        data: Dict[str, Any] = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    config = validate_config(data)
    logger.debug("Loaded configuration from: %s", config_path)
    logger.debug("Configuration data: %s", data)
    return config


def save_default_config(repo_root: Path) -> Path:
    """Write the default configuration to ``repo_root`` and return its path.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = get_config_path(repo_root)
    content = json.dumps(ChangelogConfig().to_dict(), indent=2) + "\n"
    try:
        config_path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not write {config_path}: {exc}") from exc
    logger.debug("Wrote default configuration to: %s", config_path)
    return config_path

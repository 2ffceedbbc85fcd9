"""
Error types shared across vc_changelog.

Every fatal condition of a changelog run derives from
:class:`ChangelogError` so that the CLI can report it uniformly. A commit
message that does not follow the grammar is *not* an error: the parser
degrades it to an uncategorized record instead.
"""

from __future__ import annotations

from typing import Optional


class ChangelogError(Exception):
    """Base class for all fatal changelog generation errors."""

    pass


class RangeError(ChangelogError):
    """Raised when a boundary reference of a commit range does not resolve."""

    def __init__(self, reference: str, detail: str = "") -> None:
        self.reference = reference
        message = f"Cannot resolve reference '{reference}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class PipelineError(ChangelogError):
    """Raised when the parse worker pool fails as a whole."""

    pass


class TemplateError(ChangelogError):
    """Raised for unknown placeholders or malformed templates."""

    def __init__(self, message: str, placeholder: Optional[str] = None) -> None:
        self.placeholder = placeholder
        super().__init__(message)


class ConfigError(ChangelogError):
    """Raised when the changelog configuration is missing pieces or invalid."""

    pass

"""
Version control system (VCS) integration.

:class:`GitClient` reads commits, references and tags from a Git
repository on behalf of the changelog pipeline.
"""

from .git_client import GitClient, GitError  # noqa: F401

"""
Git client implementation for vc_changelog.

This module is the repository collaborator of the changelog pipeline: it
lists commits of a revision range, resolves references and reports which
commits carry tags. It only reads from the repository. All subprocess
calls go through :meth:`GitClient._run` so that unit tests can mock them
easily.
"""

from __future__ import annotations

import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from vc_changelog.parsing.models import RawCommit


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = "--format=%H%x1f%an%x1f%cI%x1f%P%x1f%B%x1e"
TAG_FORMAT = "--format=%(objectname)%1f%(*objectname)%1f%(refname:short)"


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Read-only client for a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_repo(path: Path) -> bool:
        """Return True if the given path is the root of a Git repository."""
        return (path / ".git").exists()

    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error("Could not execute git: %s", e)
            raise GitError(f"Could not execute git: {e}") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------
    def resolve_ref(self, name: str) -> str:
        """Resolve ``name`` to the full hash of the commit it points to.

        Raises
        ------
        GitError
            If ``name`` does not name a commit.
        """
        if not name or name.startswith("-"):
            raise GitError(f"Invalid revision '{name}'")
        result = self._run(["rev-parse", "--verify", "--quiet", f"{name}^{{commit}}"], check=False)
        if result.returncode != 0 or not result.stdout.strip():
            raise GitError(f"Unknown revision '{name}'")
        return result.stdout.strip()

    def resolve_tag(self, name: str) -> str:
        """Resolve the tag ``name`` to the hash of the tagged commit."""
        return self.resolve_ref(f"refs/tags/{name}")

    def list_tags(self) -> Dict[str, List[str]]:
        """Map commit hashes to the names of the tags pointing at them.

        Annotated tags are peeled to their commit; lightweight tags point
        at the commit directly.
        """
        result = self._run(["for-each-ref", TAG_FORMAT, "refs/tags"], check=True)
        tags: Dict[str, List[str]] = {}
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            object_name, peeled, name = line.split(FIELD_SEP, 2)
            tags.setdefault(peeled or object_name, []).append(name)
        return tags

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def list_commits(self, to: str, exclude: Optional[str] = None) -> List[RawCommit]:
        """List commits reachable from ``to`` but not from ``exclude``.

        Commits are returned newest first (``git log --date-order``).

        Raises
        ------
        GitError
            If the history cannot be read.
        """
        args = ["log", "--date-order", LOG_FORMAT, to]
        if exclude:
            args.append(f"^{exclude}")
        args.append("--")
        result = self._run(args, check=True)
        return [parse_log_record(record) for record in result.stdout.split(RECORD_SEP) if record.strip()]


def parse_log_record(record: str) -> RawCommit:
    """Build a :class:`RawCommit` from one ``LOG_FORMAT`` record."""
    commit_hash, author, date, parents, message = record.lstrip("\n").split(FIELD_SEP, 4)
    return RawCommit(
        hash=commit_hash,
        author=author,
        date=datetime.fromisoformat(date),
        parent_count=len(parents.split()),
        message=message.rstrip("\n"),
    )

"""
Command line interface for the vc_changelog tool.

This module defines the ``main`` command group which is used as the entry
point of the ``vcchangelog`` command:

* ``generate`` renders the changelog of a commit range,
* ``lint`` checks the messages of a commit range against the grammar,
* ``verify`` checks a single commit message file (``commit-msg`` hook),
* ``setup`` writes the default configuration file.

Status messages go to stderr so that a changelog written to stdout can be
redirected as is. Each kind of failure exits with its own code.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from pathlib import Path
from typing import Optional, Tuple

import click

from vc_changelog import __version__
from vc_changelog.config.loader import CONFIG_FILE_NAME, get_config_path, load_config, save_default_config
from vc_changelog.config.settings import ChangelogConfig, OutputFormat
from vc_changelog.errors import ConfigError, PipelineError, RangeError, TemplateError
from vc_changelog.parsing.grammar import MessageParser
from vc_changelog.parsing.lint import LintResult, verify_file
from vc_changelog.pipeline.ingest import CommitRange
from vc_changelog.service import ChangelogGenerator, ReleaseOptions
from vc_changelog.vcs.git_client import GitClient, GitError

# Module-level logger with a null handler; the commands configure the
# root logger through ``logging.basicConfig``.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_TEMPLATE_ERROR = 7
EXIT_PIPELINE_ERROR = 8
EXIT_LINT_FAILURE = 9


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Simple progress indicator for user feedback, written to stderr."""

    def __init__(self, message: str, enabled: bool = True):
        self.message = message
        self.enabled = enabled
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        if self.enabled:
            click.echo(f"→ {self.message}...", err=True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.enabled and exc_type is None:
            elapsed = time.time() - self.start_time
            click.echo(f"  ✓ Done ({elapsed:.1f}s)", err=True)
        return False


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=True)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=True)


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=True)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def print_lint_failure(result: LintResult, color: bool = True):
    """Print one failing lint verdict."""
    commit = result.commit
    label = commit.short_hash if commit else "message"
    click.echo(
        f"✗ {click.style(label, fg='yellow', bold=True)} {result.header}",
        err=True,
        color=color,
    )
    for problem in result.problems:
        click.echo(f"    {problem}", err=True, color=color)


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def configure_logging(verbose: bool) -> None:
    # force=True so repeated invocations (e.g. in tests) reconfigure handlers.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )


def detect_repo(start_dir: Path) -> Tuple[Path, GitClient]:
    """Find the Git repository containing ``start_dir``.

    Raises
    ------
    click.exceptions.Exit
        With code EXIT_NO_REPO if no repository is found.
    """
    repo_root = GitClient.find_repo_root(start_dir)
    if repo_root is None:
        print_error("No Git repository found in the given directory or its parents.")
        raise click.exceptions.Exit(EXIT_NO_REPO)
    logger.debug("Detected repository root: %s", repo_root)
    return repo_root, GitClient(repo_root)


def read_config(repo_root: Path) -> ChangelogConfig:
    if not get_config_path(repo_root).exists():
        print_info(f"No {CONFIG_FILE_NAME} in {repo_root}, using default settings")
    try:
        return load_config(repo_root)
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)


def exit_code_for(exc: Exception) -> int:
    """Map a pipeline exception to the exit code reported for it."""
    if isinstance(exc, ConfigError):
        return EXIT_CONFIG_ERROR
    if isinstance(exc, (RangeError, GitError)):
        return EXIT_VCS_FAILURE
    if isinstance(exc, TemplateError):
        return EXIT_TEMPLATE_ERROR
    if isinstance(exc, PipelineError):
        return EXIT_PIPELINE_ERROR
    return EXIT_GENERIC_ERROR


path_option = click.option(
    "--path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory inside the Git repository.",
)
verbose_option = click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")


@click.group()
@click.version_option(version=__version__, prog_name="vcchangelog")
def main() -> None:
    """Generate changelogs from structured Git commit messages.

    Commit messages are expected to follow the layout
    ``category(scope)!: summary`` with optional body and footers.
    """


@main.command()
@click.option("--from", "from_ref", default=None, help="Exclude commits reachable from this reference.")
@click.option("--to", "to_ref", default="HEAD", show_default=True, help="Include commits reachable from this reference.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice([fmt.value for fmt in OutputFormat], case_sensitive=False),
    default=None,
    help="Output format (default from configuration).",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write to a file instead of stdout.")
@click.option("--all", "all_tags", is_flag=True, help="Include every release instead of stopping after --tags-count.")
@click.option("--tags-count", type=click.IntRange(min=1), default=1, show_default=True, help="Number of tagged releases to include.")
@click.option("--skip-unreleased", is_flag=True, help="Leave out commits newer than the latest tag.")
@click.option("--tag-skip-pattern", default=None, help="Ignore tags containing this text (default from configuration).")
@click.option("--include-merges/--exclude-merges", default=None, help="Include merge commits (default from configuration).")
@click.option("--dedupe/--no-dedupe", default=None, help="Collapse duplicate entries (default from configuration).")
@click.option("--detailed/--short", default=None, help="Include commit bodies in Markdown output (default from configuration).")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Number of parse workers.")
@path_option
@verbose_option
def generate(
    from_ref: Optional[str],
    to_ref: str,
    output_format: Optional[str],
    output: Optional[Path],
    all_tags: bool,
    tags_count: int,
    skip_unreleased: bool,
    tag_skip_pattern: Optional[str],
    include_merges: Optional[bool],
    dedupe: Optional[bool],
    detailed: Optional[bool],
    workers: Optional[int],
    path: Path,
    verbose: bool,
) -> None:
    """Render the changelog of a commit range."""
    configure_logging(verbose)
    repo_root, client = detect_repo(path)
    config = read_config(repo_root)
    if dedupe is not None:
        config = replace(config, dedupe=dedupe)
    if detailed is not None:
        config = replace(config, detailed_output=detailed)
    if workers is not None:
        config = replace(config, workers=workers)

    generator = ChangelogGenerator(client, config, repo_root=repo_root)
    options = ReleaseOptions(
        max_tags=tags_count,
        all_tags=all_tags,
        skip_unreleased=skip_unreleased,
        tag_skip_pattern=tag_skip_pattern,
    )
    fmt = OutputFormat(output_format.lower()) if output_format else None

    try:
        with ProgressIndicator(f"Generating changelog for {CommitRange(to_ref, from_ref)}", enabled=verbose):
            document = generator.generate(
                CommitRange(to=to_ref, from_=from_ref),
                options=options,
                output_format=fmt,
                include_merges=include_merges,
            )
    except (ConfigError, RangeError, GitError, TemplateError, PipelineError) as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(exit_code_for(exc))

    if output is None:
        click.echo(document, nl=False)
        return

    try:
        output.write_text(document, encoding="utf-8")
    except OSError as exc:
        print_error(f"Could not write {output}: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
    print_success(f"Changelog written to {output}")


@main.command()
@click.option("--from", "from_ref", default=None, help="Exclude commits reachable from this reference.")
@click.option("--to", "to_ref", default="HEAD", show_default=True, help="Include commits reachable from this reference.")
@click.option("--include-merges/--exclude-merges", default=None, help="Lint merge commits too.")
@path_option
@verbose_option
def lint(from_ref: Optional[str], to_ref: str, include_merges: Optional[bool], path: Path, verbose: bool) -> None:
    """Check the commit messages of a range against the grammar."""
    configure_logging(verbose)
    repo_root, client = detect_repo(path)
    config = read_config(repo_root)
    generator = ChangelogGenerator(client, config, repo_root=repo_root)

    try:
        report = generator.lint(CommitRange(to=to_ref, from_=from_ref), include_merges=include_merges)
    except (RangeError, GitError) as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)

    for result in report.failures:
        print_lint_failure(result, color=config.colored_output)
    if not report.passed:
        print_warning(f"{report.warning_count} of {len(report.results)} commit(s) do not conform")
        raise click.exceptions.Exit(EXIT_LINT_FAILURE)
    print_success(f"All {len(report.results)} commit(s) conform")


@main.command()
@click.argument("message_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@path_option
def verify(message_file: Path, path: Path) -> None:
    """Check a commit message file, e.g. from a commit-msg hook."""
    repo_root = GitClient.find_repo_root(path)
    config = read_config(repo_root) if repo_root else ChangelogConfig()
    parser = MessageParser.from_config(config)

    try:
        result = verify_file(parser, message_file)
    except (OSError, UnicodeDecodeError) as exc:
        print_error(f"Could not read {message_file}: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)

    if not result.passed:
        print_lint_failure(result, color=config.colored_output)
        raise click.exceptions.Exit(EXIT_LINT_FAILURE)
    print_success("Commit message conforms")


@main.command()
@path_option
def setup(path: Path) -> None:
    """Write the default configuration file to the repository root."""
    repo_root, _ = detect_repo(path)
    try:
        config_path = save_default_config(repo_root)
    except ConfigError as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    print_success(f"Setup complete, defaults written to '{config_path}'")

"""
Changelog generation service.

:class:`ChangelogGenerator` wires the pipeline stages together for one
run: select the commits of a range, cut them into releases, parse each
release on the worker pool, aggregate it and render the document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import List, Optional

from vc_changelog.config.settings import ChangelogConfig, OutputFormat
from vc_changelog.grouping.aggregator import aggregate
from vc_changelog.grouping.changelog_model import Changelog
from vc_changelog.parsing.grammar import MessageParser
from vc_changelog.parsing.lint import LintReport, lint_commits
from vc_changelog.pipeline.ingest import CommitIngestor, CommitRange
from vc_changelog.pipeline.parallel import parse_all
from vc_changelog.pipeline.releases import split_releases
from vc_changelog.rendering.renderer import render_many
from vc_changelog.rendering.template import DEFAULT_TEMPLATE, TemplateSpec, compile_template, load_template


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


@dataclass(frozen=True)
class ReleaseOptions:
    """How the selected commits are cut into releases."""

    max_tags: int = 1
    all_tags: bool = False
    skip_unreleased: bool = False
    tag_skip_pattern: Optional[str] = None


class ChangelogGenerator:
    """Generate changelogs for a repository.

    Parameters
    ----------
    repository
        Repository collaborator providing ``resolve_ref``,
        ``list_commits`` and ``list_tags`` (see :class:`GitClient`).
    config : ChangelogConfig
        Validated configuration.
    repo_root : Optional[Path]
        Base directory for a relative ``config.template`` path.
    """

    def __init__(self, repository, config: ChangelogConfig, repo_root: Optional[Path] = None) -> None:
        self.repository = repository
        self.config = config
        self.repo_root = repo_root or Path.cwd()
        self.parser = MessageParser.from_config(config)
        self.ingestor = CommitIngestor(repository)

    def load_template(self) -> TemplateSpec:
        """Return the configured template.

        Body paragraphs are only rendered with ``detailed_output`` and footers
        only with ``enable_footers``.

        The template is compiled right away so that a broken template fails
        the run before any commit is read.
        """
        spec = DEFAULT_TEMPLATE
        if self.config.template:
            spec = load_template(self.repo_root / self.config.template)
        if not self.config.detailed_output:
            spec = replace(spec, body_line="")
        if not self.config.enable_footers:
            spec = replace(spec, footer_line="")
        compile_template(spec)
        return spec

    def build(
        self,
        commit_range: CommitRange,
        options: Optional[ReleaseOptions] = None,
        include_merges: Optional[bool] = None,
    ) -> List[Changelog]:
        """Select, split, parse and aggregate the commits of ``commit_range``."""
        options = options or ReleaseOptions()
        if include_merges is None:
            include_merges = self.config.include_merges
        commits = self.ingestor.select(commit_range, include_merges=include_merges)

        skip_pattern = options.tag_skip_pattern
        if skip_pattern is None:
            skip_pattern = self.config.tag_skip_pattern
        releases = split_releases(
            commits,
            self.repository.list_tags(),
            tag_skip_pattern=skip_pattern,
            max_tags=options.max_tags,
            all_tags=options.all_tags,
            skip_unreleased=options.skip_unreleased,
        )

        changelogs = []
        for release in releases:
            parsed = parse_all(release.commits, self.parser, max_workers=self.config.workers)
            changelogs.append(aggregate(parsed, self.config, release.label, release.date))
        breaking = sum(len(changelog.breaking_changes) for changelog in changelogs)
        logger.info(
            "Parsed %d commit(s) into %d release(s), %d breaking change(s)",
            len(commits),
            len(changelogs),
            breaking,
        )
        return changelogs

    def generate(
        self,
        commit_range: CommitRange,
        options: Optional[ReleaseOptions] = None,
        output_format: Optional[OutputFormat] = None,
        include_merges: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> str:
        """Run the whole pipeline and return the rendered document."""
        output_format = output_format or self.config.output_format
        template = self.load_template() if output_format is OutputFormat.MARKDOWN else None
        changelogs = self.build(commit_range, options, include_merges=include_merges)
        return render_many(changelogs, template, output_format, today=today)

    def lint(self, commit_range: CommitRange, include_merges: Optional[bool] = None) -> LintReport:
        """Lint every commit of ``commit_range``."""
        if include_merges is None:
            include_merges = self.config.include_merges
        commits = self.ingestor.select(commit_range, include_merges=include_merges)
        return lint_commits(self.parser, commits)

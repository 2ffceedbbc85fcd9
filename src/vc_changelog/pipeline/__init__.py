"""
Commit selection and parallel parsing.

:mod:`vc_changelog.pipeline.ingest` picks the commits of a range,
:mod:`vc_changelog.pipeline.releases` cuts them into releases and
:mod:`vc_changelog.pipeline.parallel` parses them on a worker pool.
"""

from .ingest import CommitIngestor, CommitRange, filter_commits  # noqa: F401
from .parallel import parse_all  # noqa: F401
from .releases import Release, split_releases  # noqa: F401

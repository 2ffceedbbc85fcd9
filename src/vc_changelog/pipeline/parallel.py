"""
Parallel parsing of commit messages.

Commits are cut into index-tagged chunks and mapped over a bounded
:class:`~concurrent.futures.ThreadPoolExecutor`. Workers share nothing
but the read-only parser; once every chunk is done the results are put
back into a pre-sized buffer by index, so the output order never depends
on which worker finished first.
"""

from __future__ import annotations

import logging
import math
import os
from concurrent.futures import Executor, ThreadPoolExecutor, wait
from typing import List, Optional, Sequence, Tuple

from vc_changelog.errors import PipelineError
from vc_changelog.parsing.grammar import MessageParser
from vc_changelog.parsing.models import ParsedCommit, RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


WorkUnit = Tuple[int, RawCommit]

# Chunks per worker; keeps workers busy when some chunks parse faster.
CHUNKS_PER_WORKER = 4


def _parse_chunk(parser: MessageParser, units: Sequence[WorkUnit]) -> List[Tuple[int, ParsedCommit]]:
    return [(index, parser.parse_commit(commit)) for index, commit in units]


def _chunked(units: List[WorkUnit], size: int) -> List[List[WorkUnit]]:
    return [units[start:start + size] for start in range(0, len(units), size)]


def parse_all(
    commits: Sequence[RawCommit],
    parser: MessageParser,
    max_workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
    executor: Optional[Executor] = None,
) -> List[ParsedCommit]:
    """Parse every commit; ``result[i]`` always belongs to ``commits[i]``.

    Parameters
    ----------
    commits : Sequence[RawCommit]
        Commits to parse.
    parser : MessageParser
        Parser shared read-only by all workers.
    max_workers : Optional[int]
        Size of the thread pool; the executor default when ``None``.
    chunk_size : Optional[int]
        Commits per work unit; derived from the pool size when ``None``.
    executor : Optional[Executor]
        Use this executor instead of creating a pool. It is not shut down.

    Raises
    ------
    PipelineError
        If the worker pool fails; a single message never fails the batch.
    """
    if not commits:
        return []
    if max_workers is not None and max_workers < 1:
        raise PipelineError(f"max_workers must be at least 1, got {max_workers}")

    units: List[WorkUnit] = list(enumerate(commits))
    if chunk_size is None:
        workers = max_workers or os.cpu_count() or 1
        chunk_size = max(1, math.ceil(len(units) / (workers * CHUNKS_PER_WORKER)))
    chunks = _chunked(units, chunk_size)
    logger.debug("Parsing %d commits in %d chunks", len(units), len(chunks))

    if executor is not None:
        outputs = _run_chunks(executor, parser, chunks)
    else:
        try:
            pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="parse")
        except (RuntimeError, ValueError) as exc:
            raise PipelineError(f"Could not start parse workers: {exc}") from exc
        with pool:
            outputs = _run_chunks(pool, parser, chunks)

    results: List[Optional[ParsedCommit]] = [None] * len(units)
    for output in outputs:
        for index, parsed in output:
            results[index] = parsed
    missing = [index for index, parsed in enumerate(results) if parsed is None]
    if missing:
        raise PipelineError(f"Parse workers returned no result for {len(missing)} commit(s)")
    return results  # type: ignore[return-value]


def _run_chunks(
    executor: Executor,
    parser: MessageParser,
    chunks: List[List[WorkUnit]],
) -> List[List[Tuple[int, ParsedCommit]]]:
    try:
        futures = [executor.submit(_parse_chunk, parser, chunk) for chunk in chunks]
    except RuntimeError as exc:
        raise PipelineError(f"Could not submit parse work: {exc}") from exc

    wait(futures)
    outputs = []
    for future in futures:
        try:
            outputs.append(future.result())
        except Exception as exc:
            logger.error("Parse worker failed: %s", exc)
            raise PipelineError(f"Parse worker failed: {exc}") from exc
    return outputs

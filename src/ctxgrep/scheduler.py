"""Concurrent fan-out of per-file pipelines

One task per input runs on a thread pool. Inputs that cannot be opened are
reported and never scheduled. Results are handed to callbacks from the worker
thread as soon as each file completes, and collected into a SearchReport in
input order once every task has joined.
"""

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from ctxgrep.errors import InputAccessError
from ctxgrep.matcher import PatternMatcher
from ctxgrep.models import FileResult, SearchConfig, SearchReport
from ctxgrep.pipeline import search_file
from ctxgrep.source import InputSource, validate_source
from ctxgrep.utils import get_max_workers

logger = logging.getLogger(__name__)


@dataclass
class SearchCallbacks:
    """Callbacks for scheduler events.

    `on_file_result` runs in the worker thread that produced the result, so it
    must be thread-safe. `on_file_skipped` runs in the scheduling thread.
    """

    on_file_result: Callable[[FileResult], None] | None = None
    on_file_skipped: Callable[[str, str], None] | None = None


def _search_worker(
    source: InputSource,
    config: SearchConfig,
    matcher: PatternMatcher,
    cancel: threading.Event,
    fail_fast: bool,
    callbacks: SearchCallbacks,
) -> FileResult:
    try:
        result = search_file(source, config, matcher, cancel=cancel)
    except InputAccessError as e:
        # The file disappeared or lost permissions between validation and open
        result = FileResult(source=source.name, display_name=source.display_name, error=str(e))

    if result.error is not None and fail_fast:
        logger.info(f'[SCHEDULER] {source.display_name} failed, cancelling remaining work')
        cancel.set()

    if callbacks.on_file_result:
        callbacks.on_file_result(result)
    return result


def run_search(
    sources: list[InputSource],
    config: SearchConfig,
    matcher: PatternMatcher | None = None,
    callbacks: SearchCallbacks | None = None,
    fail_fast: bool = False,
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
) -> SearchReport:
    """
    Search all sources concurrently and wait for every pipeline to finish.

    Args:
        sources: Inputs in command-line order
        config: Search configuration shared read-only by all workers
        matcher: Pre-compiled matcher; compiled from config when omitted
        callbacks: Optional per-file callbacks
        fail_fast: Cancel the remaining work after the first mid-stream failure
        max_workers: Thread pool size, CTXGREP_MAX_WORKERS when omitted
        cancel: Shared cancellation signal, created when omitted

    Returns:
        SearchReport with one FileResult per scheduled source, in input order

    Raises:
        PatternError: The pattern is invalid; raised before any input is opened
    """
    if matcher is None:
        matcher = PatternMatcher.from_config(config)
    if callbacks is None:
        callbacks = SearchCallbacks()
    if cancel is None:
        cancel = threading.Event()

    start_time = time.time()
    report = SearchReport(pattern=config.pattern)

    scheduled: list[InputSource] = []
    for source in sources:
        try:
            validate_source(source)
        except InputAccessError as e:
            logger.info(f'[SCHEDULER] Skipping {source.name}: {e.reason}')
            report.skipped[source.name] = e.reason
            if callbacks.on_file_skipped:
                callbacks.on_file_skipped(source.name, e.reason)
            continue
        scheduled.append(source)

    logger.info(f'[SCHEDULER] Searching {len(scheduled)} input(s), {len(report.skipped)} skipped')

    results: dict[int, FileResult] = {}
    if scheduled:
        workers = min(max_workers or get_max_workers(), len(scheduled))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='Search') as executor:
            future_to_index = {
                executor.submit(_search_worker, source, config, matcher, cancel, fail_fast, callbacks): index
                for index, source in enumerate(scheduled)
            }

            try:
                for future in as_completed(future_to_index):
                    index = future_to_index[future]
                    source = scheduled[index]
                    try:
                        results[index] = future.result()
                    except Exception as e:
                        logger.error(f'[SCHEDULER] Worker for {source.display_name} failed: {e}')
                        results[index] = FileResult(
                            source=source.name, display_name=source.display_name, error=str(e)
                        )
            except KeyboardInterrupt:
                logger.info('[SCHEDULER] Interrupted, cancelling workers')
                cancel.set()
                for future in future_to_index:
                    future.cancel()
                raise

    # Tasks cancelled before they started have no result
    for index, source in enumerate(scheduled):
        if index not in results:
            results[index] = FileResult(source=source.name, display_name=source.display_name, cancelled=True)

    report.results = [results[index] for index in range(len(scheduled))]
    report.cancelled = cancel.is_set()
    report.elapsed = time.time() - start_time

    logger.info(
        f'[SCHEDULER] Completed: {report.total_matches} matches in '
        f'{len(report.files_with_matches)} file(s) in {report.elapsed:.3f}s'
    )
    return report

"""Per-file search pipeline: line source -> window assembler -> matcher"""

import logging
import threading
import time
from collections.abc import Iterable, Iterator

from ctxgrep.errors import ReadError, SearchCancelled
from ctxgrep.matcher import PatternMatcher
from ctxgrep.models import FileResult, Line, MatchEvent, SearchConfig
from ctxgrep.source import InputSource, open_lines
from ctxgrep.window import assemble_windows

logger = logging.getLogger(__name__)


def iter_match_events(lines: Iterable[Line], config: SearchConfig, matcher: PatternMatcher) -> Iterator[MatchEvent]:
    """
    Yield a MatchEvent for every selected line, in increasing line order.

    Windows are assembled only when context is requested; the matcher sees
    every real line exactly once.
    """
    before_ctx = 0 if config.list_files_only else config.before_context
    after_ctx = 0 if config.list_files_only else config.after_context

    for window in assemble_windows(lines, before_ctx, after_ctx):
        current = window.current
        if current is None:
            continue

        decision = matcher.decide(current.text)
        if not decision.matched:
            continue

        yield MatchEvent(
            line=current,
            matched_text='' if config.list_files_only else decision.matched_text,
            before=window.before,
            after=window.after,
        )


class _CountingLines:
    """Wraps a line iterator to remember how far it got"""

    def __init__(self, lines: Iterator[Line]):
        self._lines = lines
        self.count = 0

    def __iter__(self) -> Iterator[Line]:
        for line in self._lines:
            self.count = line.number
            yield line


def search_file(
    source: InputSource,
    config: SearchConfig,
    matcher: PatternMatcher,
    cancel: threading.Event | None = None,
) -> FileResult:
    """
    Run the whole pipeline over one input.

    In list mode the pipeline stops at the first selected line and releases the
    input without reading further. A mid-stream read failure is recorded on the
    result together with the events collected before it.

    Raises:
        InputAccessError: The input could not be opened
    """
    start_time = time.time()
    thread_id = threading.current_thread().name

    lines = open_lines(source, cancel=cancel)
    counted = _CountingLines(lines)
    events: list[MatchEvent] = []
    error = None
    cancelled = False

    try:
        for event in iter_match_events(counted, config, matcher):
            events.append(event)
            if config.list_files_only:
                logger.debug(f'[WORKER {thread_id}] {source.display_name}: first match at line {event.line.number}')
                break
    except ReadError as e:
        logger.info(f'[WORKER {thread_id}] {e}')
        error = str(e)
    except SearchCancelled:
        logger.debug(f'[WORKER {thread_id}] {source.display_name}: cancelled')
        cancelled = True
    finally:
        lines.close()

    elapsed = time.time() - start_time
    logger.debug(
        f'[WORKER {thread_id}] {source.display_name}: {len(events)} events, '
        f'{counted.count} lines in {elapsed:.3f}s'
    )

    return FileResult(
        source=source.name,
        display_name=source.display_name,
        events=events,
        matched=bool(events),
        lines_read=counted.count,
        error=error,
        cancelled=cancelled,
    )

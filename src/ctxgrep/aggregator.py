"""Result aggregation: one rendered block per file, written atomically

Each worker renders its whole block in memory and holds the sink lock only for
the single write, so blocks from different files never interleave.
"""

import sys
import threading
from typing import TextIO

import click

from ctxgrep.matcher import PatternMatcher
from ctxgrep.models import FileResult, Line, SearchConfig

MATCH_SEPARATOR = ':'
CONTEXT_SEPARATOR = '-'
GROUP_SEPARATOR = '--'
INDENT = '  '


def highlight_occurrences(text: str, matcher: PatternMatcher, colorize: bool) -> str:
    """
    Highlight every occurrence of the pattern in a line.

    Spans come from the original text, so case-insensitive literal searches
    highlight the text as it appears in the input.
    """
    if not colorize:
        return text

    parts = []
    last = 0
    for start, end in matcher.occurrences(text):
        parts.append(text[last:start])
        parts.append(click.style(text[start:end], fg='black', bg='yellow'))
        last = end
    parts.append(text[last:])
    return ''.join(parts)


def format_file_name(name: str, colorize: bool) -> str:
    if colorize:
        return click.style(name, fg='green')
    return name


def format_line_label(number: int, separator: str, config: SearchConfig, colorize: bool) -> str:
    """Prefix for one output line: number and separator, or the separator alone when context is shown."""
    if config.show_line_numbers:
        num = click.style(str(number), fg='yellow') if colorize else str(number)
        return f'{num}{separator} '
    if config.has_context:
        return f'{separator} '
    return ''


class _BlockWriter:
    """Accumulates the lines of one file block, printing each input line at most once"""

    def __init__(self, config: SearchConfig, matcher: PatternMatcher, indent: str, colorize: bool):
        self.config = config
        self.matcher = matcher
        self.indent = indent
        self.colorize = colorize
        self.lines: list[str] = []
        self.last_printed = 0

    def _separate_group(self, number: int) -> None:
        if self.config.has_context and self.last_printed and number > self.last_printed + 1:
            self.lines.append(f'{self.indent}{GROUP_SEPARATOR}')

    def context(self, line: Line) -> None:
        if line.number <= self.last_printed:
            return
        self._separate_group(line.number)
        label = format_line_label(line.number, CONTEXT_SEPARATOR, self.config, self.colorize)
        self.lines.append(f'{self.indent}{label}{line.text}')
        self.last_printed = line.number

    def match(self, line: Line) -> None:
        if line.number <= self.last_printed:
            return
        self._separate_group(line.number)
        label = format_line_label(line.number, MATCH_SEPARATOR, self.config, self.colorize)
        text = line.text if self.config.invert else highlight_occurrences(line.text, self.matcher, self.colorize)
        self.lines.append(f'{self.indent}{label}{text}')
        self.last_printed = line.number

    def only_matching(self, line: Line) -> None:
        if self.config.invert:
            return
        label = format_line_label(line.number, MATCH_SEPARATOR, self.config, self.colorize)
        for start, end in self.matcher.occurrences(line.text):
            part = line.text[start:end]
            if self.colorize:
                part = click.style(part, fg='black', bg='yellow')
            self.lines.append(f'{self.indent}{label}{part}')


def render_file_result(
    result: FileResult,
    config: SearchConfig,
    matcher: PatternMatcher,
    show_file_name: bool = False,
    colorize: bool = False,
) -> str:
    """
    Render one file's events as a single block of text.

    Args:
        result: The file's result, events in increasing line order
        config: Search configuration
        matcher: Matcher used for highlighting and --only-matching
        show_file_name: Print a file header and indent the lines under it
        colorize: Apply terminal colors

    Returns:
        The block without a trailing newline, or '' when nothing was selected
    """
    if not result.matched:
        return ''

    if config.list_files_only:
        return format_file_name(result.display_name, colorize)

    indent = INDENT if show_file_name else ''
    writer = _BlockWriter(config, matcher, indent, colorize)
    selected = {event.line.number for event in result.events}

    for event in result.events:
        if config.only_matching:
            writer.only_matching(event.line)
            continue

        for line in event.before:
            if line is not None:
                writer.context(line)
        writer.match(event.line)
        for line in event.after:
            # A selected line is printed by its own event, which also carries
            # the context that follows it
            if line is None or line.number in selected:
                break
            writer.context(line)

    if not writer.lines:
        return ''

    if show_file_name:
        header = format_file_name(result.display_name, colorize) + ':'
        return '\n'.join([header, *writer.lines])
    return '\n'.join(writer.lines)


class OutputSink:
    """The result channel shared by all workers, guarded by one lock"""

    def __init__(self, stream: TextIO | None = None, colorize: bool = False):
        self.stream = stream
        self.colorize = colorize
        self._lock = threading.Lock()
        self.blocks_written = 0

    def write_block(self, block: str, blank_line_after: bool = False) -> None:
        """Write one complete block; the lock is held for exactly this write."""
        if not block:
            return
        text = block + '\n\n' if blank_line_after else block + '\n'
        stream = self.stream if self.stream is not None else sys.stdout
        with self._lock:
            click.echo(text, file=stream, nl=False, color=self.colorize)
            self.blocks_written += 1

"""Line sources: lazy, 1-indexed line sequences over one input stream"""

import logging
import os
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import BinaryIO

import click

from ctxgrep.errors import InputAccessError, ReadError, SearchCancelled
from ctxgrep.models import Line
from ctxgrep.utils import CARRIAGE_RETURN_BYTES, NEWLINE_SYMBOL_BYTES, STDIN_DISPLAY_NAME, STDIN_NAME

logger = logging.getLogger(__name__)


@dataclass
class InputSource:
    """One input to search: a file path or standard input"""

    name: str
    display_name: str
    opener: Callable[[], BinaryIO]
    closes_stream: bool = True

    @classmethod
    def from_path(cls, path: str) -> 'InputSource':
        if path == STDIN_NAME:
            return cls.stdin()
        return cls(name=path, display_name=path, opener=lambda: open(path, 'rb'))

    @classmethod
    def stdin(cls, stream: BinaryIO | None = None) -> 'InputSource':
        """Standard input is read but never closed; `stream` overrides the process stdin for callers and tests."""
        if stream is None:
            return cls(
                name=STDIN_NAME,
                display_name=STDIN_DISPLAY_NAME,
                opener=lambda: click.get_binary_stream('stdin'),
                closes_stream=False,
            )
        return cls(name=STDIN_NAME, display_name=STDIN_DISPLAY_NAME, opener=lambda: stream, closes_stream=False)

    @property
    def is_stdin(self) -> bool:
        return self.name == STDIN_NAME


def validate_source(source: InputSource) -> None:
    """Probe an input before scheduling it.

    Raises:
        InputAccessError: The path is missing, not a regular file, or not readable
    """
    if source.is_stdin:
        return

    path = source.name
    if not os.path.exists(path):
        raise InputAccessError(path, 'no such file or directory')
    if os.path.isdir(path):
        raise InputAccessError(path, 'is a directory')
    if not os.access(path, os.R_OK):
        raise InputAccessError(path, 'permission denied')


def _strip_line_separator(raw: bytes) -> bytes:
    if raw.endswith(NEWLINE_SYMBOL_BYTES):
        raw = raw[:-1]
        if raw.endswith(CARRIAGE_RETURN_BYTES):
            raw = raw[:-1]
    return raw


def read_lines(
    stream: BinaryIO,
    name: str = '',
    cancel: threading.Event | None = None,
    close: bool = True,
) -> Iterator[Line]:
    """
    Yield the lines of a binary stream in order, separators stripped.

    The generator owns the stream: it is closed once the sequence is exhausted,
    when the consumer stops early (generator close), or when reading fails.

    Args:
        stream: Open binary stream positioned at its start
        name: Input name used in error messages
        cancel: Optional event checked before every read
        close: Whether to close the stream when done (False for standard input)

    Yields:
        Line values numbered from 1

    Raises:
        ReadError: An I/O error occurred after `lines_read` lines were produced
        SearchCancelled: `cancel` was set
    """
    number = 0
    try:
        while True:
            if cancel is not None and cancel.is_set():
                logger.debug(f'[SOURCE] {name}: cancelled after {number} lines')
                raise SearchCancelled(name, number)
            try:
                raw = stream.readline()
            except OSError as e:
                raise ReadError(name, number, str(e)) from e
            if not raw:
                return
            number += 1
            text = _strip_line_separator(raw).decode('utf-8', errors='replace')
            yield Line(number=number, text=text)
    finally:
        if close:
            stream.close()


def open_lines(source: InputSource, cancel: threading.Event | None = None) -> Iterator[Line]:
    """Open an input and return its line sequence.

    Raises:
        InputAccessError: The input could not be opened
    """
    try:
        stream = source.opener()
    except OSError as e:
        raise InputAccessError(source.name, e.strerror or str(e)) from e
    return read_lines(stream, name=source.display_name, cancel=cancel, close=source.closes_stream)

"""Shared constants and environment helpers"""

import logging
import os

NEWLINE_SYMBOL_BYTES = b'\n'
CARRIAGE_RETURN_BYTES = b'\r'

STDIN_NAME = '-'
STDIN_DISPLAY_NAME = '(standard input)'

DEFAULT_MAX_WORKERS = 20
DEFAULT_LOG_LEVEL = 'WARNING'


def get_int_env(name: str, default: int = 0) -> int:
    """Read an integer environment variable, falling back to default on absence or garbage."""
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_max_workers() -> int:
    """Upper bound on concurrently searched files.

    Controlled by CTXGREP_MAX_WORKERS environment variable.
    Default: 20
    """
    workers = get_int_env('CTXGREP_MAX_WORKERS', DEFAULT_MAX_WORKERS)
    if workers <= 0:
        workers = DEFAULT_MAX_WORKERS
    return workers


def get_log_level(debug: bool = False) -> int:
    """Resolve the logging level from --debug or CTXGREP_LOG_LEVEL."""
    if debug:
        return logging.DEBUG
    level_name = os.getenv('CTXGREP_LOG_LEVEL', DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.WARNING)


def configure_logging(debug: bool = False) -> None:
    """Log to stderr; level from --debug or CTXGREP_LOG_LEVEL."""
    logging.basicConfig(
        level=get_log_level(debug),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

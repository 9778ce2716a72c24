"""Error taxonomy for searches

Configuration errors abort the whole run before any file is read. Input access
and read errors are local to one file and never reach sibling workers.
"""


class SearchError(Exception):
    """Base class for all ctxgrep errors"""


class PatternError(SearchError, ValueError):
    """Invalid pattern, detected once before any file is processed"""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f'invalid pattern {pattern!r}: {reason}')


class InputAccessError(SearchError):
    """Input is missing or unreadable at open time"""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f'{name}: {reason}')


class ReadError(SearchError):
    """I/O failure after some lines of an input were read"""

    def __init__(self, name: str, lines_read: int, reason: str):
        self.name = name
        self.lines_read = lines_read
        self.reason = reason
        super().__init__(f'{name}: read failed after line {lines_read}: {reason}')


class SearchCancelled(SearchError):
    """The run was cancelled while this input was being read"""

    def __init__(self, name: str, lines_read: int):
        self.name = name
        self.lines_read = lines_read
        super().__init__(f'{name}: cancelled after line {lines_read}')

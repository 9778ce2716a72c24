"""Pattern matching decision logic

The matcher is built once per search from the SearchConfig and shared read-only
by every worker. Compiled regular expressions are safe to use from several
threads at once.
"""

import logging
import re
from dataclasses import dataclass

from ctxgrep.errors import PatternError
from ctxgrep.models import SearchConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """Outcome of testing one line

    Attributes:
        matched: Whether the line is selected (after invert)
        matched_text: First matched text; empty when inverted
    """

    matched: bool
    matched_text: str = ''


NO_MATCH = Decision(matched=False)


class PatternMatcher:
    """Decides whether lines match a pattern in literal or regex mode"""

    def __init__(self, config: SearchConfig):
        self.pattern = config.pattern
        self.use_regex = config.use_regex
        self.ignore_case = config.ignore_case
        self.invert = config.invert

        flags = re.IGNORECASE if self.ignore_case else re.NOFLAG
        if self.use_regex:
            try:
                self._regex = re.compile(self.pattern, flags)
            except re.error as e:
                raise PatternError(self.pattern, str(e)) from e
        else:
            # Case-insensitive literals are decided by this escaped regex too, so
            # every selected line has at least one occurrence to display.
            self._regex = re.compile(re.escape(self.pattern), flags)

        logger.debug(
            f'[MATCHER] Compiled pattern={self.pattern!r} regex={self.use_regex} '
            f'ignore_case={self.ignore_case} invert={self.invert}'
        )

    @classmethod
    def from_config(cls, config: SearchConfig) -> 'PatternMatcher':
        """Compile the matcher for a search.

        Raises:
            PatternError: The pattern is not a valid regular expression
        """
        return cls(config)

    def _base_match(self, text: str) -> str | None:
        if self.use_regex:
            found = self._regex.search(text)
            return found.group() if found is not None else None
        if self.ignore_case:
            return self.pattern if self._regex.search(text) is not None else None
        return self.pattern if self.pattern in text else None

    def decide(self, text: str) -> Decision:
        """
        Test one line.

        In literal mode the matched text is the pattern as given, not its folded
        form. With invert the result flips and a selected line carries no
        matched text.
        """
        found = self._base_match(text)
        if self.invert:
            return Decision(matched=True) if found is None else NO_MATCH
        if found is None:
            return NO_MATCH
        return Decision(matched=True, matched_text=found)

    def occurrences(self, text: str) -> list[tuple[int, int]]:
        """Spans of every non-empty, non-overlapping occurrence in the original text."""
        return [m.span() for m in self._regex.finditer(text) if m.end() > m.start()]

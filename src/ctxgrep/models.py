"""Data model for searches

Line and ContextWindow are created once per input line, so they are plain frozen
dataclasses. Everything that crosses a thread or process boundary (config,
events, results, reports) is a pydantic model.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


@dataclass(frozen=True)
class Line:
    """One line of input

    Attributes:
        number: 1-based line number, strictly increasing within one input
        text: Line content with the line separator stripped
    """

    number: int
    text: str


@dataclass(frozen=True)
class ContextWindow:
    """A candidate line together with its surrounding lines

    `before` is oldest first, `after` is nearest first. Slots are None where the
    window reaches past the start or the end of the input.
    """

    before: tuple[Line | None, ...]
    current: Line | None
    after: tuple[Line | None, ...]


class SearchConfig(BaseModel):
    """Immutable description of one search, shared read-only by all workers"""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(..., description='Literal substring or regular expression')
    use_regex: bool = Field(default=False, description='Treat pattern as a regular expression')
    ignore_case: bool = Field(default=False, description='Fold case while matching (never while displaying)')
    invert: bool = Field(default=False, description='Select lines that do not match')
    before_context: int = Field(default=0, ge=0, description='Lines of leading context per match')
    after_context: int = Field(default=0, ge=0, description='Lines of trailing context per match')
    list_files_only: bool = Field(default=False, description='Only report names of inputs with a match')
    show_line_numbers: bool = Field(default=False, description='Prefix lines with their 1-based number')
    show_file_names: bool | None = Field(
        default=None, description='Force file names on (True) or off (False); None shows them for multiple inputs'
    )
    only_matching: bool = Field(default=False, description='Print only the matched parts of lines')

    @field_validator('pattern')
    @classmethod
    def pattern_has_no_newline(cls, value: str) -> str:
        if '\n' in value:
            raise ValueError('pattern must not contain a newline')
        return value

    @staticmethod
    def resolve_context(context: int | None, before: int | None, after: int | None) -> tuple[int, int]:
        """Resolve -C/-B/-A into (before, after); explicit -B/-A win over -C."""
        before_ctx = before if before is not None else context if context is not None else 0
        after_ctx = after if after is not None else context if context is not None else 0
        return before_ctx, after_ctx

    @property
    def has_context(self) -> bool:
        return self.before_context > 0 or self.after_context > 0

    def file_names_shown(self, source_count: int) -> bool:
        if self.show_file_names is not None:
            return self.show_file_names
        return source_count > 1


class MatchEvent(BaseModel):
    """A selected line and the context that surrounded it

    `before` and `after` always have the configured lengths; None pads the
    slots that fall outside the input.
    """

    model_config = ConfigDict(frozen=True)

    line: Line = Field(..., description='The selected line')
    matched_text: str = Field(default='', description='First matched text, empty for inverted or list-mode events')
    before: tuple[Line | None, ...] = Field(default=(), description='Leading context, oldest first')
    after: tuple[Line | None, ...] = Field(default=(), description='Trailing context, nearest first')


class FileResult(BaseModel):
    """Outcome of searching one input

    Attributes:
        source: Path as given on the command line, or '-' for standard input
        display_name: Name used in output
        events: Match events in increasing line order
        matched: Whether at least one line was selected (the only thing list mode needs)
        lines_read: Number of lines consumed before the pipeline stopped
        error: Mid-stream failure message, None when the input was read cleanly
        cancelled: The pipeline stopped because the run was cancelled
    """

    source: str = Field(..., examples=['/var/log/app.log'])
    display_name: str = Field(..., examples=['/var/log/app.log'])
    events: list[MatchEvent] = Field(default_factory=list)
    matched: bool = Field(default=False)
    lines_read: int = Field(default=0)
    error: str | None = Field(default=None)
    cancelled: bool = Field(default=False)

    @computed_field
    @property
    def complete(self) -> bool:
        """The input was read to its end (or to the first match in list mode)."""
        return self.error is None and not self.cancelled


class SearchReport(BaseModel):
    """Summary of a whole run, in input order"""

    pattern: str = Field(..., examples=['error'])
    results: list[FileResult] = Field(default_factory=list)
    skipped: dict[str, str] = Field(default_factory=dict, description='Inputs excluded at open time -> reason')
    elapsed: float = Field(default=0.0, description='Wall time in seconds')
    cancelled: bool = Field(default=False)

    @computed_field
    @property
    def files_with_matches(self) -> list[str]:
        return [result.display_name for result in self.results if result.matched]

    @computed_field
    @property
    def total_matches(self) -> int:
        return sum(len(result.events) for result in self.results)

    @computed_field
    @property
    def failed(self) -> list[str]:
        return [result.display_name for result in self.results if result.error is not None]

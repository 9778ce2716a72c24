"""Context window assembly over a forward-only line stream

A window centred on line N needs `after_context` lines that come later in the
stream, so output lags input by exactly `after_context` lines. The lag lives in
a fixed-capacity circular buffer of `before_context + after_context + 1` slots:

    write cursor -> the slot holding the oldest entry (overwritten next)
    snapshot     -> slots read from the cursor around the ring, oldest first
    current      -> snapshot[before_context]

Slots start out empty (None), which pads the leading context of the first
lines. When the input ends, `after_context` None markers are pushed to move the
last real lines into the current position, padding their trailing context.
"""

from collections.abc import Iterable, Iterator

from ctxgrep.models import ContextWindow, Line


class ContextRing:
    """Fixed-capacity circular buffer over optional lines"""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f'ring capacity must be positive, got {capacity}')
        self.capacity = capacity
        self._slots: list[Line | None] = [None] * capacity
        self._cursor = 0

    def push(self, line: Line | None) -> None:
        """Overwrite the oldest slot and advance the write cursor."""
        self._slots[self._cursor] = line
        self._cursor = (self._cursor + 1) % self.capacity

    def snapshot(self) -> tuple[Line | None, ...]:
        """All slots in chronological order, oldest first."""
        return tuple(self._slots[self._cursor :] + self._slots[: self._cursor])


def assemble_windows(lines: Iterable[Line], before_context: int = 0, after_context: int = 0) -> Iterator[ContextWindow]:
    """
    Turn a line sequence into one ContextWindow per line.

    Exactly one window is produced for every real line, in input order. Every
    window has `before_context` leading slots and `after_context` trailing
    slots, padded with None at the input boundaries.

    Args:
        lines: Line sequence, consumed lazily
        before_context: Number of leading context slots
        after_context: Number of trailing context slots

    Yields:
        ContextWindow values
    """
    if before_context < 0 or after_context < 0:
        raise ValueError('Context values must be non-negative')

    ring = ContextRing(before_context + after_context + 1)
    written = 0

    def emit() -> ContextWindow:
        slots = ring.snapshot()
        return ContextWindow(
            before=slots[:before_context],
            current=slots[before_context],
            after=slots[before_context + 1 :],
        )

    for line in lines:
        ring.push(line)
        written += 1
        # The first after_context writes only fill the lookahead
        if written > after_context:
            yield emit()

    # Drain: each marker moves one buffered line into the current slot. Inputs
    # shorter than after_context still have leading markers in the lookahead,
    # which the same written > after_context check skips.
    for _ in range(after_context):
        ring.push(None)
        written += 1
        if written > after_context:
            yield emit()

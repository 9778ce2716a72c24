"""Tests for the context ring buffer and window assembly"""

import pytest

from ctxgrep.models import Line
from ctxgrep.window import ContextRing, assemble_windows


def make_lines(*texts: str) -> list[Line]:
    return [Line(number=i, text=text) for i, text in enumerate(texts, start=1)]


def numbers(slots) -> list[int | None]:
    return [line.number if line is not None else None for line in slots]


class TestContextRing:
    """Tests for ContextRing"""

    def test_starts_empty(self):
        ring = ContextRing(3)
        assert ring.snapshot() == (None, None, None)

    def test_snapshot_is_oldest_first(self):
        ring = ContextRing(3)
        lines = make_lines('a', 'b')
        for line in lines:
            ring.push(line)
        assert ring.snapshot() == (None, lines[0], lines[1])

    def test_wraps_and_overwrites_oldest(self):
        ring = ContextRing(3)
        lines = make_lines('a', 'b', 'c', 'd', 'e')
        for line in lines:
            ring.push(line)
        assert numbers(ring.snapshot()) == [3, 4, 5]

    def test_absent_markers_take_slots(self):
        ring = ContextRing(2)
        ring.push(Line(1, 'a'))
        ring.push(None)
        assert numbers(ring.snapshot()) == [1, None]

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            ContextRing(0)


class TestAssembleWindows:
    """Tests for assemble_windows()"""

    def test_no_context_is_one_window_per_line(self):
        lines = make_lines('a', 'b', 'c')
        windows = list(assemble_windows(lines, 0, 0))
        assert [w.current for w in windows] == lines
        assert all(w.before == () and w.after == () for w in windows)

    def test_symmetric_context(self):
        lines = make_lines('apple', 'banana', 'cherry', 'date', 'banana')
        windows = list(assemble_windows(lines, 1, 1))

        assert [w.current.number for w in windows] == [1, 2, 3, 4, 5]
        assert numbers(windows[0].before) == [None]
        assert numbers(windows[0].after) == [2]
        assert numbers(windows[1].before) == [1]
        assert numbers(windows[1].after) == [3]
        assert numbers(windows[4].before) == [4]
        assert numbers(windows[4].after) == [None]

    def test_asymmetric_context(self):
        lines = make_lines(*'abcdef')
        windows = list(assemble_windows(lines, 2, 1))

        assert numbers(windows[0].before) == [None, None]
        assert numbers(windows[1].before) == [None, 1]
        assert numbers(windows[3].before) == [2, 3]
        assert numbers(windows[3].after) == [5]
        assert numbers(windows[5].after) == [None]

    def test_after_context_is_nearest_first(self):
        lines = make_lines(*'abcde')
        windows = list(assemble_windows(lines, 0, 3))
        assert numbers(windows[0].after) == [2, 3, 4]
        assert numbers(windows[3].after) == [5, None, None]

    def test_file_shorter_than_context(self):
        lines = make_lines('only', 'two')
        windows = list(assemble_windows(lines, 3, 4))

        assert [w.current.number for w in windows] == [1, 2]
        assert numbers(windows[0].before) == [None, None, None]
        assert numbers(windows[0].after) == [2, None, None, None]
        assert numbers(windows[1].before) == [None, None, 1]
        assert numbers(windows[1].after) == [None, None, None, None]

    def test_empty_input_produces_nothing(self):
        assert list(assemble_windows([], 2, 2)) == []

    @pytest.mark.parametrize('before,after', [(0, 0), (0, 2), (2, 0), (1, 3), (3, 1), (5, 5)])
    @pytest.mark.parametrize('count', [0, 1, 2, 4, 7])
    def test_window_completeness(self, before, after, count):
        """One window per real line, fixed-length slots, padded at the edges"""
        lines = make_lines(*[f'line {i}' for i in range(count)])
        windows = list(assemble_windows(lines, before, after))

        assert [w.current for w in windows] == lines
        for window in windows:
            assert len(window.before) == before
            assert len(window.after) == after
            n = window.current.number
            assert numbers(window.before) == [i if i >= 1 else None for i in range(n - before, n)]
            assert numbers(window.after) == [i if i <= count else None for i in range(n + 1, n + after + 1)]

    def test_output_lags_input_by_after_context(self):
        """A window is produced only once its trailing context has been read"""
        consumed = []

        def source():
            for line in make_lines(*'abcdef'):
                consumed.append(line.number)
                yield line

        windows = assemble_windows(source(), 1, 2)
        first = next(windows)
        assert first.current.number == 1
        assert consumed == [1, 2, 3]

    def test_rejects_negative_context(self):
        with pytest.raises(ValueError):
            list(assemble_windows(make_lines('a'), -1, 0))

"""Source location tracking for tokens, nodes and diagnostics."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """A range within a source file (1-indexed, inclusive)."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


class LineIndex:
    """Maps character offsets of a source string to line/column pairs."""

    def __init__(self, source: str) -> None:
        self._starts = [0]
        for i, ch in enumerate(source):
            if ch == "\n":
                self._starts.append(i + 1)

    def position(self, offset: int) -> tuple[int, int]:
        """Return the 1-indexed (line, col) of a character offset."""
        line = bisect_right(self._starts, offset)
        return line, offset - self._starts[line - 1] + 1

    def span(self, filename: str, start: int, end: int) -> Span:
        """Build a span covering source[start:end]."""
        start_line, start_col = self.position(start)
        end_line, end_col = self.position(max(start, end - 1))
        return Span(filename, start_line, start_col, end_line, end_col)

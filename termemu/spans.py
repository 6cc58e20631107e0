"""Split a screen row into runs of cells that share the same attributes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from termemu.screen import Cell, CharAttr


@dataclass(frozen=True)
class TextSpan:
    """A run of characters drawn with one set of attributes, starting at ``start_col``."""

    text: str
    attr: CharAttr
    start_col: int

    @property
    def width(self) -> int:
        """Number of columns the span covers."""
        return len(self.text)

    @property
    def end_col(self) -> int:
        """Column just past the last character of the span."""
        return self.start_col + len(self.text)


def build_spans(row: Sequence[Cell]) -> list[TextSpan]:
    """Group a row of cells into spans of equal attributes.

    The last column of the row always forms a span of its own, so that the
    rightmost cell is drawn separately from the run before it.
    """
    if not row:
        return []

    spans: list[TextSpan] = []
    last = len(row) - 1
    text = ""
    attr = row[0].attr
    start = 0

    for col, cell in enumerate(row):
        if cell.attr == attr and col < last:
            text += cell.ch
            continue
        if text:
            spans.append(TextSpan(text, attr, start))
        text = cell.ch
        attr = cell.attr
        start = col

    if text:
        spans.append(TextSpan(text, attr, start))
    return spans
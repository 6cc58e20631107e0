"""Screen model: a character grid driven by a stream of ANSI-encoded bytes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

_INT_MAX = 2**31 - 1


@dataclass(frozen=True)
class RgbColor:
    """A 24-bit colour."""

    r: int = 0
    g: int = 0
    b: int = 0


NORMAL_COLORS = (
    RgbColor(0, 0, 0),
    RgbColor(192, 0, 0),
    RgbColor(0, 192, 0),
    RgbColor(192, 85, 0),
    RgbColor(0, 0, 192),
    RgbColor(192, 0, 192),
    RgbColor(0, 192, 192),
    RgbColor(192, 192, 192),
)

BRIGHT_COLORS = (
    RgbColor(85, 85, 85),
    RgbColor(255, 0, 0),
    RgbColor(0, 255, 0),
    RgbColor(255, 255, 0),
    RgbColor(0, 0, 255),
    RgbColor(255, 0, 255),
    RgbColor(0, 255, 255),
    RgbColor(255, 255, 255),
)


@dataclass(frozen=True)
class CharAttr:
    """Foreground and background colours of a cell; light gray on black by default."""

    fg: RgbColor = RgbColor(192, 192, 192)
    bg: RgbColor = RgbColor(0, 0, 0)


@dataclass(frozen=True)
class Cell:
    """One character on the screen with its attributes."""

    ch: str = " "
    attr: CharAttr = CharAttr()


@dataclass
class Cursor:
    """Cursor position, zero based."""

    row: int = 0
    col: int = 0


class ParserState(enum.Enum):
    NORMAL = enum.auto()
    ESCAPE = enum.auto()
    CSI = enum.auto()


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_alpha(c: str) -> bool:
    return "a" <= c <= "z" or "A" <= c <= "Z"


def _to_int(text: str) -> int:
    value = int(text)
    return value if value <= _INT_MAX else 0


def _param(params: list[int], index: int, default: int) -> int:
    if len(params) > index and params[index] > default:
        return params[index]
    return default


def _char(code_point: int) -> str:
    if code_point > 0x10FFFF:
        return "\ufffd"
    return chr(code_point)


def _decode_utf8(data: bytes, i: int) -> tuple[int, int] | None:
    """Decode one UTF-8 sequence at ``i``; return (code point, length) or None."""
    b = data[i]
    n = len(data)
    if b & 0x80 == 0:
        return b, 1
    if b & 0xE0 == 0xC0 and i + 1 < n:
        return ((b & 0x1F) << 6) | (data[i + 1] & 0x3F), 2
    if b & 0xF0 == 0xE0 and i + 2 < n:
        return ((b & 0x0F) << 12) | ((data[i + 1] & 0x3F) << 6) | (data[i + 2] & 0x3F), 3
    if b & 0xF8 == 0xF0 and i + 3 < n:
        return (
            ((b & 0x07) << 18)
            | ((data[i + 1] & 0x3F) << 12)
            | ((data[i + 2] & 0x3F) << 6)
            | (data[i + 3] & 0x3F)
        ), 4
    return None


class Screen:
    """A grid of cells updated by feeding it terminal output."""

    def __init__(self, cols, rows):
        self.cols = cols
        self.rows = rows
        self.attr = CharAttr()
        self.cursor = Cursor()
        self.state = ParserState.NORMAL
        self._seq = ""
        self.buffer: list[list[Cell]] = [self._blank_row() for _ in range(rows)]

    def _blank_row(self) -> list[Cell]:
        return [Cell(" ", self.attr) for _ in range(self.cols)]

    def _blank(self) -> Cell:
        return Cell(" ", self.attr)

    def resize(self, cols, rows):
        """Change the grid size, keeping existing content where it fits."""
        self.cols = cols
        self.rows = rows
        del self.buffer[rows:]
        while len(self.buffer) < rows:
            self.buffer.append(self._blank_row())
        for line in self.buffer:
            del line[cols:]
            line.extend(self._blank() for _ in range(cols - len(line)))
        self.cursor.row = min(self.cursor.row, rows - 1)
        self.cursor.col = min(self.cursor.col, cols - 1)

    def _line_feed(self, dirty: set[int]) -> None:
        self.cursor.row += 1
        if self.cursor.row >= self.rows:
            self.scroll_up()
            dirty.update(range(self.rows))
        else:
            dirty.add(self.cursor.row)

    def feed(self, data):
        """Process a chunk of output bytes; return the sorted rows that changed."""
        data = bytes(data)
        dirty: set[int] = set()
        i = 0
        n = len(data)
        while i < n:
            b = data[i]
            if self.state is ParserState.NORMAL:
                if b == 0x1B:
                    self.state = ParserState.ESCAPE
                    self._seq = ""
                elif b == 0x0A:
                    self.cursor.col = 0
                    self._line_feed(dirty)
                elif b == 0x0D:
                    self.cursor.col = 0
                    if i + 1 < n and data[i + 1] == 0x0A:
                        i += 1
                        self._line_feed(dirty)
                    else:
                        dirty.add(self.cursor.row)
                elif b == 0x08:
                    if self.cursor.col > 0:
                        self.cursor.col -= 1
                        self.buffer[self.cursor.row][self.cursor.col] = self._blank()
                        dirty.add(self.cursor.row)
                elif b == 0x09:
                    self.cursor.col = min((self.cursor.col + 8) // 8 * 8, self.cols - 1)
                elif b == 0x07:
                    pass
                else:
                    decoded = _decode_utf8(data, i)
                    if decoded is None:
                        i += 1
                        continue
                    code_point, length = decoded
                    self._put(code_point, dirty)
                    i += length
                    continue
                i += 1
            elif self.state is ParserState.ESCAPE:
                c = chr(b)
                if c == "[":
                    self.state = ParserState.CSI
                    self._seq = "["
                elif c == "c":
                    self.reset()
                    dirty.update(range(self.rows))
                    self.state = ParserState.NORMAL
                    self._seq = ""
                else:
                    self.state = ParserState.NORMAL
                    self._seq = ""
                i += 1
            else:
                c = chr(b)
                self._seq += c
                if _is_alpha(c):
                    self._apply(self._seq, dirty)
                    self.state = ParserState.NORMAL
                    self._seq = ""
                i += 1
        return sorted(dirty)

    def _put(self, code_point: int, dirty: set[int]) -> None:
        cur = self.cursor
        if cur.col < self.cols and cur.row < self.rows:
            self.buffer[cur.row][cur.col] = Cell(_char(code_point), self.attr)
            cur.col += 1
            dirty.add(cur.row)
        if cur.col >= self.cols:
            cur.col = 0
            cur.row += 1
            if cur.row >= self.rows:
                self.scroll_up()
                dirty.update(range(self.rows))

    def apply_sequence(self, seq):
        """Execute a control sequence such as ``"[2J"``; return the sorted rows that changed."""
        dirty: set[int] = set()
        self._apply(seq, dirty)
        return sorted(dirty)

    @staticmethod
    def _parse_params(seq: str) -> list[int]:
        params: list[int] = []
        digits = ""
        for c in seq[1:]:
            if _is_digit(c):
                digits += c
            elif c == ";" or _is_alpha(c):
                params.append(_to_int(digits) if digits else 0)
                digits = ""
                if _is_alpha(c):
                    break
        if digits:
            params.append(_to_int(digits))
        return params

    def _clear_cells(self, row: int, start: int, stop: int) -> None:
        line = self.buffer[row]
        for c in range(start, stop):
            line[c] = self._blank()

    def _apply(self, seq: str, dirty: set[int]) -> None:
        if not seq or seq[0] != "[":
            return
        params = self._parse_params(seq)
        final = seq[-1]
        cur = self.cursor

        if final == "m":
            self._select_graphic_rendition(params)
        elif final == "H":
            cur.row = max(0, min(_param(params, 0, 1) - 1, self.rows - 1))
            cur.col = max(0, min(_param(params, 1, 1) - 1, self.cols - 1))
        elif final == "A":
            cur.row = max(0, cur.row - _param(params, 0, 1))
        elif final == "B":
            cur.row = min(self.rows - 1, cur.row + _param(params, 0, 1))
        elif final == "C":
            cur.col = min(self.cols - 1, cur.col + _param(params, 0, 1))
        elif final == "D":
            cur.col = max(0, cur.col - _param(params, 0, 1))
        elif final == "J":
            mode = _param(params, 0, 0)
            if mode == 1:
                for r in range(cur.row):
                    self._clear_cells(r, 0, self.cols)
                self._clear_cells(cur.row, 0, cur.col + 1)
                dirty.update(range(cur.row + 1))
            elif mode == 2:
                self.clear_screen()
                dirty.update(range(self.rows))
            else:
                self._clear_cells(cur.row, cur.col, self.cols)
                for r in range(cur.row + 1, self.rows):
                    self._clear_cells(r, 0, self.cols)
                dirty.update(range(cur.row, self.rows))
        elif final == "K":
            mode = _param(params, 0, 0)
            if mode == 1:
                self._clear_cells(cur.row, 0, cur.col + 1)
            elif mode == 2:
                self._clear_cells(cur.row, 0, self.cols)
            else:
                self._clear_cells(cur.row, cur.col, self.cols)
            dirty.add(cur.row)

    def _select_graphic_rendition(self, params: list[int]) -> None:
        colors = NORMAL_COLORS
        attr = self.attr
        for p in params:
            if p == 0:
                colors = NORMAL_COLORS
                attr = CharAttr()
            elif p == 1:
                colors = BRIGHT_COLORS
                attr = CharAttr(BRIGHT_COLORS[7], attr.bg)
            elif 30 <= p <= 37:
                attr = CharAttr(colors[p - 30], attr.bg)
            elif 40 <= p <= 47:
                attr = CharAttr(attr.fg, colors[p - 40])
            elif 90 <= p <= 97:
                attr = CharAttr(BRIGHT_COLORS[p - 90], attr.bg)
            elif 100 <= p <= 107:
                attr = CharAttr(attr.fg, BRIGHT_COLORS[p - 100])
        self.attr = attr

    def clear_screen(self):
        """Blank every cell with the current attributes and home the cursor."""
        self.buffer = [self._blank_row() for _ in range(self.rows)]
        self.cursor.row = 0
        self.cursor.col = 0

    def reset(self):
        """Restore default attributes and clear the screen."""
        self.attr = CharAttr()
        self.clear_screen()

    def scroll_up(self):
        """Drop the top line, add a blank one at the bottom and put the cursor there."""
        self.buffer.pop(0)
        self.buffer.append(self._blank_row())
        self.cursor.row = self.rows - 1
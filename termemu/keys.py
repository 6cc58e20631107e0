"""Keyboard input model and its encoding into terminal byte sequences."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class KeyCode(enum.Enum):
    """Device-independent key codes."""

    UNKNOWN = enum.auto()
    ENTER = enum.auto()
    BACKSPACE = enum.auto()
    TAB = enum.auto()
    ESCAPE = enum.auto()
    UP = enum.auto()
    DOWN = enum.auto()
    RIGHT = enum.auto()
    LEFT = enum.auto()
    HOME = enum.auto()
    END = enum.auto()
    INSERT = enum.auto()
    DELETE = enum.auto()
    PAGEUP = enum.auto()
    PAGEDOWN = enum.auto()
    F1 = enum.auto()
    F2 = enum.auto()
    F3 = enum.auto()
    F4 = enum.auto()
    F5 = enum.auto()
    F6 = enum.auto()
    F7 = enum.auto()
    F8 = enum.auto()
    F9 = enum.auto()
    F10 = enum.auto()
    F11 = enum.auto()
    F12 = enum.auto()
    CAPSLOCK = enum.auto()
    LEFT_SHIFT = enum.auto()
    RIGHT_SHIFT = enum.auto()
    LEFT_CTRL = enum.auto()
    RIGHT_CTRL = enum.auto()
    LEFT_OPTION = enum.auto()
    RIGHT_OPTION = enum.auto()
    LEFT_COMMAND = enum.auto()
    RIGHT_COMMAND = enum.auto()
    CHARACTER = enum.auto()


@dataclass(frozen=True)
class KeyInput:
    """A key press: a key code, a code point for printable keys, and modifiers."""

    code: KeyCode = KeyCode.UNKNOWN
    character: int = 0
    mod_shift: bool = False
    mod_ctrl: bool = False

    @classmethod
    def character_key(cls, character, shift, ctrl):
        """Build a printable-character key press from a code point or a one-character string."""
        if isinstance(character, str):
            if len(character) != 1:
                raise ValueError("character must be a single character")
            character = ord(character)
        return cls(KeyCode.CHARACTER, int(character), bool(shift), bool(ctrl))


_SPECIAL_KEYS: dict[KeyCode, bytes] = {
    KeyCode.ENTER: b"\r",
    KeyCode.BACKSPACE: b"\b",
    KeyCode.TAB: b"\t",
    KeyCode.ESCAPE: b"\x1b",
    KeyCode.UP: b"\x1b[A",
    KeyCode.DOWN: b"\x1b[B",
    KeyCode.RIGHT: b"\x1b[C",
    KeyCode.LEFT: b"\x1b[D",
    KeyCode.HOME: b"\x1b[H",
    KeyCode.END: b"\x1b[F",
    KeyCode.INSERT: b"\x1b[2~",
    KeyCode.DELETE: b"\x1b[3~",
    KeyCode.PAGEUP: b"\x1b[5~",
    KeyCode.PAGEDOWN: b"\x1b[6~",
    KeyCode.F1: b"\x1bOP",
    KeyCode.F2: b"\x1bOQ",
    KeyCode.F3: b"\x1bOR",
    KeyCode.F4: b"\x1bOS",
    KeyCode.F5: b"\x1b[15~",
    KeyCode.F6: b"\x1b[17~",
    KeyCode.F7: b"\x1b[18~",
    KeyCode.F8: b"\x1b[19~",
    KeyCode.F9: b"\x1b[20~",
    KeyCode.F10: b"\x1b[21~",
    KeyCode.F11: b"\x1b[23~",
    KeyCode.F12: b"\x1b[24~",
}

_SHIFT_MAP = {
    "1": "!", "2": "@", "3": "#", "4": "$", "5": "%",
    "6": "^", "7": "&", "8": "*", "9": "(", "0": ")",
    "-": "_", "=": "+", "[": "{", "]": "}", ";": ":",
    "'": '"', ",": "<", ".": ">", "/": "?", "`": "~",
}


def _utf8(code_point: int) -> bytes:
    return chr(code_point).encode("utf-8", "surrogatepass")


def _simple_upper(code_point: int) -> int:
    upper = chr(code_point).upper()
    # Only one-to-one case mappings apply; expansions like "ß" -> "SS" are ignored.
    return ord(upper) if len(upper) == 1 else code_point


def _encode_character(key: KeyInput) -> bytes:
    cp = key.character
    if key.mod_ctrl:
        return bytes([cp & 0x1F])
    if key.mod_shift:
        if cp <= 0x7F:
            ch = chr(cp)
            if "a" <= ch <= "z":
                ch = ch.upper()
            else:
                ch = _SHIFT_MAP.get(ch, ch)
            return bytes([ord(ch)])
        return _utf8(_simple_upper(cp))
    if cp <= 0x7F:
        return bytes([cp])
    return _utf8(cp)


def encode_key(key):
    """Return the bytes a terminal sends for a key press; empty for modifier keys."""
    if key.code is KeyCode.CHARACTER:
        return _encode_character(key)
    return _SPECIAL_KEYS.get(key.code, b"")
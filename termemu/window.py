"""Graphical terminal window: draws a screen model and drives a shell on a pseudo-terminal."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from termemu.keys import KeyCode, KeyInput, encode_key  # noqa: E402
from termemu.pty_session import PtySession  # noqa: E402
from termemu.screen import Screen  # noqa: E402
from termemu.spans import TextSpan, build_spans  # noqa: E402

log = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 16
MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 72
CURSOR_BLINK_MS = 500
WINDOW_TITLE = "Terminal Emulator"

if sys.platform == "darwin":
    DEFAULT_FONT_PATH = "/System/Library/Fonts/Menlo.ttc"
    _FONT_SIZE_MOD = pygame.KMOD_META
else:
    DEFAULT_FONT_PATH = "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf"
    _FONT_SIZE_MOD = pygame.KMOD_CTRL

_KEYSYM_CODES: dict[int, KeyCode] = {
    pygame.K_RETURN: KeyCode.ENTER,
    pygame.K_BACKSPACE: KeyCode.BACKSPACE,
    pygame.K_TAB: KeyCode.TAB,
    pygame.K_ESCAPE: KeyCode.ESCAPE,
    pygame.K_UP: KeyCode.UP,
    pygame.K_DOWN: KeyCode.DOWN,
    pygame.K_RIGHT: KeyCode.RIGHT,
    pygame.K_LEFT: KeyCode.LEFT,
    pygame.K_HOME: KeyCode.HOME,
    pygame.K_END: KeyCode.END,
    pygame.K_INSERT: KeyCode.INSERT,
    pygame.K_DELETE: KeyCode.DELETE,
    pygame.K_PAGEUP: KeyCode.PAGEUP,
    pygame.K_PAGEDOWN: KeyCode.PAGEDOWN,
    pygame.K_F1: KeyCode.F1,
    pygame.K_F2: KeyCode.F2,
    pygame.K_F3: KeyCode.F3,
    pygame.K_F4: KeyCode.F4,
    pygame.K_F5: KeyCode.F5,
    pygame.K_F6: KeyCode.F6,
    pygame.K_F7: KeyCode.F7,
    pygame.K_F8: KeyCode.F8,
    pygame.K_F9: KeyCode.F9,
    pygame.K_F10: KeyCode.F10,
    pygame.K_F11: KeyCode.F11,
    pygame.K_F12: KeyCode.F12,
    pygame.K_CAPSLOCK: KeyCode.CAPSLOCK,
    pygame.K_LSHIFT: KeyCode.LEFT_SHIFT,
    pygame.K_RSHIFT: KeyCode.RIGHT_SHIFT,
    pygame.K_LCTRL: KeyCode.LEFT_CTRL,
    pygame.K_RCTRL: KeyCode.RIGHT_CTRL,
    pygame.K_LALT: KeyCode.LEFT_OPTION,
    pygame.K_RALT: KeyCode.RIGHT_OPTION,
    pygame.K_LSUPER: KeyCode.LEFT_COMMAND,
    pygame.K_RSUPER: KeyCode.RIGHT_COMMAND,
}


def keysym_to_key_input(sym, mod):
    """Translate a key symbol and modifier mask into a device-independent key press."""
    shift = bool(mod & pygame.KMOD_SHIFT)
    ctrl = bool(mod & pygame.KMOD_CTRL)
    code = _KEYSYM_CODES.get(sym)
    if code is None:
        return KeyInput(KeyCode.CHARACTER, int(sym), shift, ctrl)
    return KeyInput(code, 0, shift, ctrl)


def next_font_size(current, delta):
    """Return the font size after a change, or ``current`` if it would leave the allowed range."""
    new_size = current + delta
    if new_size < MIN_FONT_SIZE or new_size > MAX_FONT_SIZE:
        return current
    return new_size


def grid_size(width, height, char_width, char_height):
    """Number of columns and rows of characters that fit a window, at least one of each."""
    return max(width // char_width, 1), max(height // char_height, 1)


class TerminalWindow:
    """A window that shows a terminal screen and runs a shell behind it."""

    def __init__(self, cols, rows):
        self.screen = Screen(cols, rows)
        self.session = PtySession()
        self.font_path = DEFAULT_FONT_PATH
        self.font_size = DEFAULT_FONT_SIZE
        self.font: pygame.font.Font | None = None
        self.char_width = 0
        self.char_height = 0
        self.surface: pygame.Surface | None = None
        self.cursor_visible = True
        self._last_cursor_toggle = 0
        self._cache: list[list[tuple[TextSpan, pygame.Surface | None]]] = []
        self._dirty: list[bool] = []
        self._saved_handlers: dict[int, object] = {}

    @property
    def cols(self) -> int:
        return self.screen.cols

    @property
    def rows(self) -> int:
        return self.screen.rows

    def _open_font(self, size: int) -> pygame.font.Font | None:
        try:
            return pygame.font.Font(self.font_path, size)
        except (OSError, pygame.error) as exc:
            log.error("failed to load font at size %d: %s", size, exc)
            return None

    def _invalidate(self, rows: int) -> None:
        self._cache = [[] for _ in range(rows)]
        self._dirty = [True] * rows

    def initialize(self):
        """Open the window, load the font and start the shell; raise RuntimeError on failure."""
        pygame.display.init()
        pygame.font.init()

        self.font = self._open_font(self.font_size)
        if self.font is None:
            raise RuntimeError(f"failed to load font {self.font_path}")
        self.char_width, self.char_height = self.font.size("M")
        if not self.char_width or not self.char_height:
            raise RuntimeError("failed to get font metrics")

        try:
            self.surface = pygame.display.set_mode(
                (self.cols * self.char_width, self.rows * self.char_height),
                pygame.RESIZABLE,
            )
        except pygame.error as exc:
            raise RuntimeError(
                "cannot access GUI display; "
                "please ensure a graphical environment is available"
            ) from exc
        pygame.display.set_caption(WINDOW_TITLE)

        self.session.start()
        self._install_signal_handlers()
        self._invalidate(self.rows)
        return self

    def _install_signal_handlers(self) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM, signal.SIGQUIT):
            self._saved_handlers[sig] = signal.signal(sig, self._forward_signal)
        self._saved_handlers[signal.SIGWINCH] = signal.signal(
            signal.SIGWINCH, self._handle_sigwinch
        )

    def _restore_signal_handlers(self) -> None:
        for sig, handler in self._saved_handlers.items():
            signal.signal(sig, handler)
        self._saved_handlers.clear()

    def _forward_signal(self, sig, frame) -> None:
        self.session.send_signal(sig)

    def _handle_sigwinch(self, sig, frame) -> None:
        if self.surface is None or not self.char_width:
            return
        width, height = pygame.display.get_surface().get_size()
        cols, rows = grid_size(width, height, self.char_width, self.char_height)
        try:
            self.session.set_size(cols, rows, cols * self.char_width, rows * self.char_height)
        except OSError as exc:
            log.error("error setting terminal window size: %s", exc)
            return
        self.screen.resize(cols, rows)
        self._invalidate(rows)

    def run(self):
        """Process events, shell output and drawing until the shell exits."""
        while True:
            self._handle_events()
            self._process_pty_input()
            self._render()
            if not self.session.is_alive():
                break

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.session.send_signal(signal.SIGTERM)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key, event.mod)
            elif event.type == pygame.VIDEORESIZE:
                self._handle_resize(event.w, event.h)

    def _handle_resize(self, width: int, height: int) -> None:
        cols, rows = grid_size(width, height, self.char_width, self.char_height)
        self.screen.resize(cols, rows)
        self._invalidate(rows)
        try:
            self.session.set_size(
                self.cols, self.rows, self.cols * self.char_width, self.rows * self.char_height
            )
        except OSError as exc:
            log.error("error setting terminal window size: %s", exc)

    def _handle_key(self, sym: int, mod: int) -> None:
        if mod & _FONT_SIZE_MOD:
            if sym == pygame.K_EQUALS:
                self.change_font_size(2)
                return
            if sym == pygame.K_MINUS:
                self.change_font_size(-2)
                return
        try:
            data = encode_key(keysym_to_key_input(sym, mod))
        except ValueError:
            return
        if data:
            try:
                self.session.write(data)
            except OSError as exc:
                log.error("error writing to terminal: %s", exc)

    def change_font_size(self, delta):
        """Grow or shrink the font, keeping the grid size and resizing the window to fit."""
        new_size = next_font_size(self.font_size, delta)
        if new_size == self.font_size:
            return

        self.font = None
        self.font_size = new_size
        self.font = self._open_font(self.font_size)
        if self.font is None:
            self.font_size = DEFAULT_FONT_SIZE
            self.font = self._open_font(self.font_size)
            if self.font is None:
                return

        char_width, char_height = self.font.size("M")
        if not char_width or not char_height:
            log.error("failed to get font metrics for size %d", self.font_size)
            self.font = None
            return
        self.char_width, self.char_height = char_width, char_height

        self.surface = pygame.display.set_mode(
            (self.cols * self.char_width, self.rows * self.char_height), pygame.RESIZABLE
        )
        width, height = self.surface.get_size()
        cols, rows = grid_size(width, height, self.char_width, self.char_height)
        try:
            self.session.set_size(cols, rows, cols * self.char_width, rows * self.char_height)
        except OSError as exc:
            log.error("error setting terminal window size: %s", exc)

        self.screen.resize(cols, rows)
        self._invalidate(rows)

    def _process_pty_input(self) -> None:
        data = self.session.read(0.01)
        if not data:
            return
        for row in self.screen.feed(data):
            if 0 <= row < len(self._dirty):
                self._dirty[row] = True

    def _render_span(self, span: TextSpan) -> pygame.Surface | None:
        if self.font is None:
            return None
        fg = span.attr.fg
        try:
            return self.font.render(span.text, True, (fg.r, fg.g, fg.b))
        except (pygame.error, ValueError):
            return None

    def _update_cache(self) -> None:
        for i, line in enumerate(self.screen.buffer):
            if i >= len(self._dirty) or not self._dirty[i]:
                continue
            self._cache[i] = [(span, self._render_span(span)) for span in build_spans(line)]
            self._dirty[i] = False

    def _render(self) -> None:
        now = pygame.time.get_ticks()
        if now - self._last_cursor_toggle >= CURSOR_BLINK_MS:
            self.cursor_visible = not self.cursor_visible
            self._last_cursor_toggle = now

        self._update_cache()
        surface = pygame.display.get_surface()
        if surface is None:
            return
        surface.fill((0, 0, 0))

        cw, ch = self.char_width, self.char_height
        for i, spans in enumerate(self._cache[: self.rows]):
            for span, text_surface in spans:
                if text_surface is None:
                    continue
                bg = span.attr.bg
                x, y = span.start_col * cw, i * ch
                surface.fill((bg.r, bg.g, bg.b), pygame.Rect(x, y, span.width * cw, ch))
                surface.blit(text_surface, (x, y))

        cursor = self.screen.cursor
        if self.cursor_visible and cursor.row < self.rows and cursor.col < self.cols:
            surface.fill(
                (255, 255, 255), pygame.Rect(cursor.col * cw, cursor.row * ch, cw, ch)
            )
        pygame.display.flip()

    def close(self):
        """Stop the shell, restore signal handlers and shut the window."""
        self.session.close()
        self._restore_signal_handlers()
        self.font = None
        self.surface = None
        pygame.quit()


def main(argv=None):
    """Open an 80x24 terminal window running a shell; return the exit status."""
    parser = argparse.ArgumentParser(prog="termemu", description="A simple terminal emulator.")
    parser.parse_args(argv)

    window = TerminalWindow(80, 24)
    try:
        try:
            window.initialize()
        except (RuntimeError, OSError, pygame.error) as exc:
            print(exc, file=sys.stderr)
            return 1
        window.run()
    finally:
        window.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
# termemu

A small terminal emulator. It opens a window drawn with pygame, starts
`/bin/sh` on a pseudo-terminal and shows the shell's output, interpreting
the common ANSI escape sequences: colours (SGR 0, 1, 30–37, 40–47, 90–97,
100–107), cursor movement and positioning (`A`, `B`, `C`, `D`, `H`),
erasing parts of the screen or line (`J`, `K`) and the full reset `ESC c`.

## Installing

```
pip install .
```

The window needs a graphical display, a POSIX system with pseudo-terminals
and a monospace font (Menlo on macOS, DejaVu Sans Mono elsewhere).

## Running

```
termemu
```

The window starts at 80 columns by 24 rows and can be resized; the shell is
told about the new size. Ctrl+= and Ctrl+- (Cmd on macOS) make the font
larger or smaller by two points, between 8 and 72 points. Closing the
window sends the shell SIGTERM, and the window closes when the shell exits.
If the font cannot be loaded or no display is available, `termemu` prints
the reason and exits with status 1.

## Using the pieces

The escape-sequence logic works without a window:

```python
from termemu.screen import Screen

screen = Screen(80, 24)
dirty = screen.feed(b"\x1b[31mhello\r\n")
print(dirty)                    # sorted rows that changed
print(screen.cursor.row, screen.cursor.col)
print(screen.buffer[0][0].ch)   # "h"
```

`Screen.apply_sequence("[2J")` runs a single control sequence directly, and
`Screen.resize`, `Screen.clear_screen`, `Screen.reset` and
`Screen.scroll_up` change the grid as their names say.

Keys are turned into the bytes a shell expects with `encode_key`:

```python
from termemu.keys import KeyCode, KeyInput, encode_key

encode_key(KeyInput(KeyCode.UP))                      # b"\x1b[A"
encode_key(KeyInput.character_key("a", False, True))  # b"\x01" (Ctrl+A)
```

`termemu.pty_session.PtySession` runs a shell on a pseudo-terminal (it can
be used as a context manager), and `termemu.spans.build_spans` groups a
screen row into `TextSpan` runs of one colour.

## What it does not do

- There is no scrollback: lines scrolled off the top are gone.
- The bell character is accepted and ignored.
- Escape sequences other than those listed above are read and dropped;
  there are no bold, underline or other text styles beyond the colours,
  no alternate screen and no mouse support.

## Tests

```
pip install .[test]
pytest
```
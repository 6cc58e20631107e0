"""A small ANSI terminal emulator: screen model, key encoding, pseudo-terminal shell and pygame window."""

__version__ = "1.0.0"
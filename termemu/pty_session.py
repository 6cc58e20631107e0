"""A shell running on a pseudo-terminal."""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import select
import signal
import struct
import subprocess
import sys
import termios

log = logging.getLogger(__name__)

_READ_SIZE = 1023


def _make_controlling_tty() -> None:
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


def _terminal_attributes(slave_fd: int) -> list:
    try:
        attrs = termios.tcgetattr(sys.stdin.fileno())
    except (termios.error, OSError, ValueError, AttributeError):
        attrs = termios.tcgetattr(slave_fd)
    attrs[0] |= termios.ICRNL
    attrs[1] |= termios.OPOST | termios.ONLCR
    attrs[3] |= termios.ISIG
    return attrs


class PtySession:
    """A child shell attached to the slave side of a pseudo-terminal."""

    def __init__(self, shell="/bin/sh"):
        self.shell = shell
        self.master_fd: int | None = None
        self.process: subprocess.Popen | None = None

    def start(self):
        """Open the pseudo-terminal and start the shell on it."""
        if self.process is not None:
            raise RuntimeError("session already started")
        master_fd, slave_fd = os.openpty()
        try:
            termios.tcsetattr(slave_fd, termios.TCSANOW, _terminal_attributes(slave_fd))
            self.process = subprocess.Popen(
                [os.path.basename(self.shell)],
                executable=self.shell,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                start_new_session=True,
                preexec_fn=_make_controlling_tty,
                close_fds=True,
            )
        except BaseException:
            os.close(master_fd)
            raise
        finally:
            os.close(slave_fd)
        os.set_blocking(master_fd, False)
        self.master_fd = master_fd
        return self

    def _require_started(self) -> int:
        if self.master_fd is None:
            raise RuntimeError("session is not started")
        return self.master_fd

    def read(self, timeout=0.01):
        """Return output available within ``timeout`` seconds, or b"" if there is none."""
        fd = self._require_started()
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return b""
        try:
            return os.read(fd, _READ_SIZE)
        except BlockingIOError:
            return b""
        except OSError as exc:
            if exc.errno not in (errno.EAGAIN, errno.EWOULDBLOCK):
                log.error("error reading from terminal: %s", exc)
                self.send_signal(signal.SIGTERM)
            return b""

    def write(self, data):
        """Send bytes to the shell as keyboard input."""
        fd = self._require_started()
        view = memoryview(bytes(data))
        while view:
            try:
                written = os.write(fd, view)
            except BlockingIOError:
                select.select([], [fd], [], 1.0)
                continue
            view = view[written:]

    def set_size(self, cols, rows, xpixel=0, ypixel=0):
        """Tell the terminal its new size and notify the shell."""
        fd = self._require_started()
        winsize = struct.pack("HHHH", rows, cols, xpixel, ypixel)
        fcntl.ioctl(fd, termios.TIOCSWINSZ, winsize)
        self.send_signal(signal.SIGWINCH)

    def is_alive(self):
        """True while the shell process is running."""
        return self.process is not None and self.process.poll() is None

    def send_signal(self, sig):
        """Deliver a signal to the shell if it is running."""
        if self.is_alive():
            self.process.send_signal(sig)

    def close(self):
        """Terminate the shell, reap it and close the terminal."""
        if self.process is not None:
            if self.process.poll() is None:
                self.process.terminate()
                try:
                    self.process.wait(timeout=2)
                except subprocess.TimeoutExpired:
                    self.process.kill()
                    self.process.wait()
        if self.master_fd is not None:
            os.close(self.master_fd)
            self.master_fd = None

    def __enter__(self):
        if self.process is None:
            self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
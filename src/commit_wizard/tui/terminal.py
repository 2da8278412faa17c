"""Terminal control helpers for the interactive session.

Owns the raw input mode lifecycle. The alternate screen itself is managed
by ``rich.live.Live(screen=True)``; this module only switches the input
side of the tty so that every key press, including Ctrl+S and Ctrl+C,
arrives as bytes instead of being handled by the line discipline.
"""

from __future__ import annotations

import contextlib
import logging
import os
import termios


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# termios.tcgetattr indexes
_IFLAG = 0
_LFLAG = 3
_CC = 6


class TerminalError(Exception):
    """Raised when the terminal cannot be set up, driven, or restored."""

    pass


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        try:
            self._saved_tty_state = termios.tcgetattr(stdin_fd)
        except termios.error as exc:
            raise TerminalError(f"Standard input is not a terminal: {exc}") from exc

    def enable_raw_input(self) -> None:
        attrs = termios.tcgetattr(self.stdin_fd)
        # No echo, no line buffering, and no signal or flow-control keys.
        # Output processing stays on so "\n" still returns the carriage.
        attrs[_IFLAG] &= ~(termios.IXON | termios.ICRNL | termios.BRKINT | termios.INPCK | termios.ISTRIP)
        attrs[_LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.ISIG | termios.IEXTEN)
        attrs[_CC][termios.VMIN] = 1
        attrs[_CC][termios.VTIME] = 0
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, attrs)
        # Hide the cursor while the interface is drawn.
        os.write(self.stdout_fd, b"\x1b[?25l")
        logger.debug("Raw input mode enabled")

    def restore(self) -> None:
        os.write(self.stdout_fd, b"\x1b[?25h")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        logger.debug("Terminal settings restored")

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_raw_input()
        except (termios.error, OSError) as exc:
            with contextlib.suppress(termios.error, OSError):
                self.restore()
            raise TerminalError(f"Failed to enter raw mode: {exc}") from exc
        try:
            yield
        finally:
            self.restore()

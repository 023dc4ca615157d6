"""Terminal control helpers for the viewer session.

Owns the raw-mode lifecycle: captures the tty attributes once, applies the
raw attribute set described by ``RawModeOptions`` and restores the snapshot
exactly once on every exit path. Also owns the single output write used for
frames and control sequences.
"""

from __future__ import annotations

import contextlib
import errno
import logging
import os
import termios
from dataclasses import dataclass

from .errors import TerminalControlError, TerminalIOError

logger = logging.getLogger(__name__)

CLEAR_SCREEN = b"\x1b[2J"
CURSOR_HOME = b"\x1b[H"

# termios attribute list layout: [iflag, oflag, cflag, lflag, ispeed, ospeed, cc]
_IFLAG, _OFLAG, _CFLAG, _LFLAG, _CC = 0, 1, 2, 3, 6


def _as_os_error(exc: termios.error) -> OSError:
    """Turn a ``termios.error`` ``(errno, message)`` pair into an ``OSError``."""
    if len(exc.args) == 2 and isinstance(exc.args[0], int):
        return OSError(exc.args[0], exc.args[1])
    return OSError(errno.EIO, str(exc))


@dataclass(frozen=True)
class RawModeOptions:
    """Terminal behaviors a raw session switches off.

    Every ``True`` flag disables the named behavior. ``read_min_bytes`` and
    ``read_timeout_ds`` become ``VMIN`` and ``VTIME``; the defaults make a
    read return as soon as one byte is available or after 100 ms with none.
    """

    echo: bool = True
    canonical: bool = True
    signals: bool = True
    extended_input: bool = True
    flow_control: bool = True
    crlf_translation: bool = True
    break_interrupt: bool = True
    parity_check: bool = True
    strip_high_bit: bool = True
    output_processing: bool = True
    eight_bit_chars: bool = True
    read_min_bytes: int = 0
    read_timeout_ds: int = 1

    def input_flags(self) -> int:
        flags = 0
        if self.break_interrupt:
            flags |= termios.BRKINT
        if self.parity_check:
            flags |= termios.INPCK
        if self.strip_high_bit:
            flags |= termios.ISTRIP
        if self.crlf_translation:
            flags |= termios.ICRNL
        if self.flow_control:
            flags |= termios.IXON
        return flags

    def local_flags(self) -> int:
        flags = 0
        if self.echo:
            flags |= termios.ECHO
        if self.canonical:
            flags |= termios.ICANON
        if self.signals:
            flags |= termios.ISIG
        if self.extended_input:
            flags |= termios.IEXTEN
        return flags

    def apply_to(self, attrs: list) -> list:
        """Return a raw copy of ``attrs``; the snapshot itself is untouched."""
        raw = list(attrs)
        raw[_IFLAG] &= ~self.input_flags()
        if self.output_processing:
            raw[_OFLAG] &= ~termios.OPOST
        if self.eight_bit_chars:
            raw[_CFLAG] |= termios.CS8
        raw[_LFLAG] &= ~self.local_flags()
        cc = list(raw[_CC])
        cc[termios.VMIN] = self.read_min_bytes
        cc[termios.VTIME] = self.read_timeout_ds
        raw[_CC] = cc
        return raw


class TerminalController:
    """Manage raw-mode transitions and frame output for one terminal."""

    def __init__(self, stdin_fd: int, stdout_fd: int, options: RawModeOptions | None = None) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.options = options if options is not None else RawModeOptions()
        self._saved_tty_state: list | None = None

    @property
    def raw_enabled(self) -> bool:
        return self._saved_tty_state is not None

    def enable_raw_mode(self) -> None:
        """Capture current attributes and switch the terminal to raw mode."""
        if self._saved_tty_state is not None:
            return
        try:
            saved = termios.tcgetattr(self.stdin_fd)
        except termios.error as exc:
            raise TerminalControlError("tcgetattr", _as_os_error(exc)) from exc
        raw = self.options.apply_to(saved)
        try:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, raw)
        except termios.error as exc:
            raise TerminalControlError("tcsetattr", _as_os_error(exc)) from exc
        self._saved_tty_state = saved
        logger.debug("raw mode enabled on fd %d", self.stdin_fd)

    def disable_raw_mode(self) -> None:
        """Restore the captured attributes; a no-op unless raw mode is active."""
        saved = self._saved_tty_state
        if saved is None:
            return
        # Drop the snapshot first so a failed restore is never retried.
        self._saved_tty_state = None
        try:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, saved)
        except termios.error as exc:
            raise TerminalControlError("tcsetattr", _as_os_error(exc)) from exc
        logger.debug("raw mode restored on fd %d", self.stdin_fd)

    def write(self, data: bytes) -> int:
        """Write ``data`` with a single ``os.write`` call."""
        try:
            return os.write(self.stdout_fd, data)
        except OSError as exc:
            raise TerminalIOError("write", exc) from exc

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN + CURSOR_HOME)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with raw enter/exit calls."""
        self.enable_raw_mode()
        try:
            yield self
        except BaseException:
            # Keep the error already in flight; a failed restore is only logged.
            try:
                self.disable_raw_mode()
            except TerminalControlError as restore_exc:
                logger.error("terminal restore failed: %s", restore_exc)
            raise
        self.disable_raw_mode()

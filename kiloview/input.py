"""Low-level terminal input decoding.

Reads raw bytes from the terminal and translates them into ``KeyEvent``
values. Every byte read is a timed poll, so an escape sequence that arrives
too slowly decodes as a bare ``ESCAPE`` instead of blocking.
"""

from __future__ import annotations

import errno
import os
import select
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .errors import TerminalIOError

READ_TIMEOUT_MS = 100
ESC = 0x1B

CHARACTER = "CHARACTER"
ARROW_UP = "ARROW_UP"
ARROW_DOWN = "ARROW_DOWN"
ARROW_LEFT = "ARROW_LEFT"
ARROW_RIGHT = "ARROW_RIGHT"
PAGE_UP = "PAGE_UP"
PAGE_DOWN = "PAGE_DOWN"
HOME = "HOME"
END = "END"
DELETE = "DELETE"
ESCAPE = "ESCAPE"

# ESC [ <digit> ~
_CSI_TILDE_KEYS = {
    ord("1"): HOME,
    ord("3"): DELETE,
    ord("4"): END,
    ord("5"): PAGE_UP,
    ord("6"): PAGE_DOWN,
    ord("7"): HOME,
    ord("8"): END,
}
# ESC [ <letter>
_CSI_LETTER_KEYS = {
    ord("A"): ARROW_UP,
    ord("B"): ARROW_DOWN,
    ord("C"): ARROW_RIGHT,
    ord("D"): ARROW_LEFT,
    ord("H"): HOME,
    ord("F"): END,
}
# ESC O <letter>
_SS3_KEYS = {
    ord("H"): HOME,
    ord("F"): END,
}


def ctrl_key(ch: str) -> int:
    """Byte produced by Ctrl plus ``ch`` (upper three bits cleared)."""
    return ord(ch) & 0x1F


@dataclass(frozen=True)
class KeyEvent:
    """One logical key: a named special key or a raw character byte."""

    name: str
    byte: int | None = None

    @classmethod
    def character(cls, byte: int) -> KeyEvent:
        return cls(CHARACTER, byte)

    @property
    def is_character(self) -> bool:
        return self.name == CHARACTER

    def __str__(self) -> str:
        if self.is_character:
            return f"{CHARACTER}(0x{self.byte:02x})"
        return self.name


_ESCAPE_EVENT = KeyEvent(ESCAPE)


def decode_key(first: int, read_byte: Callable[[], int | None]) -> KeyEvent:
    """Decode one key whose first byte is ``first``.

    ``read_byte`` returns the next byte or ``None`` when nothing arrived in
    time. Only the bytes belonging to this key are consumed.
    """
    if first != ESC:
        return KeyEvent.character(first)

    lead = read_byte()
    if lead is None:
        return _ESCAPE_EVENT
    code = read_byte()
    if code is None:
        return _ESCAPE_EVENT

    if lead == ord("["):
        if ord("0") <= code <= ord("9"):
            tail = read_byte()
            if tail is None or tail != ord("~"):
                return _ESCAPE_EVENT
            name = _CSI_TILDE_KEYS.get(code)
        else:
            name = _CSI_LETTER_KEYS.get(code)
    elif lead == ord("O"):
        name = _SS3_KEYS.get(code)
    else:
        name = None
    return KeyEvent(name) if name is not None else _ESCAPE_EVENT


class KeyDecoder:
    """Poll a terminal fd and produce ``KeyEvent`` values one at a time."""

    def __init__(self, fd: int, timeout_ms: int = READ_TIMEOUT_MS) -> None:
        self.fd = fd
        self.timeout_ms = timeout_ms

    def read_byte(self) -> int | None:
        """Return one byte, or ``None`` when nothing arrives within the timeout."""
        try:
            ready, _, _ = select.select([self.fd], [], [], max(0.0, self.timeout_ms / 1000.0))
            if not ready:
                return None
            ch = os.read(self.fd, 1)
        except InterruptedError:
            return None
        except OSError as exc:
            if exc.errno == errno.EAGAIN:
                return None
            raise TerminalIOError("read", exc) from exc
        if not ch:
            # Readable but empty: the terminal hung up.
            raise TerminalIOError("read", "end of file")
        return ch[0]

    def wait_byte(self) -> int:
        """Retry timed reads until a byte arrives."""
        while True:
            byte = self.read_byte()
            if byte is not None:
                return byte

    def next_key(self) -> KeyEvent:
        return decode_key(self.wait_byte(), self.read_byte)

    def __iter__(self) -> Iterator[KeyEvent]:
        while True:
            yield self.next_key()

"""Viewport rendering.

Composes one full frame (cursor hide, rows, cursor placement, cursor show)
into a single buffer and hands it to the terminal in one write. Every
refresh redraws every row; nothing is kept between frames.
"""

from __future__ import annotations

from . import __version__
from .document import DocumentBuffer
from .state import ViewerState, scroll_into_view
from .terminal import TerminalController

HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"
CURSOR_HOME = b"\x1b[H"
ERASE_LINE = b"\x1b[K"
ROW_SEPARATOR = b"\r\n"
EMPTY_ROW_MARKER = b"~"
BANNER = f"Kilo editor -- Version {__version__}".encode("ascii")


def banner_row(screen_cols: int) -> bytes:
    """Banner centred in ``screen_cols``; the first padding cell stays ``~``."""
    text = BANNER[:screen_cols]
    padding = (screen_cols - len(text)) // 2
    out = bytearray()
    if padding:
        out += EMPTY_ROW_MARKER
        padding -= 1
    out += b" " * padding
    out += text
    return bytes(out)


def draw_rows(out: bytearray, document: DocumentBuffer, state: ViewerState) -> None:
    numrows = document.numrows
    for y in range(state.screen_rows):
        filerow = y + state.rowoff
        if filerow >= numrows:
            if numrows == 0 and y == state.screen_rows // 3:
                out += banner_row(state.screen_cols)
            else:
                out += EMPTY_ROW_MARKER
        else:
            chars = document.line(filerow).chars
            out += chars[state.coloff : state.coloff + state.screen_cols]

        out += ERASE_LINE
        if y < state.screen_rows - 1:
            out += ROW_SEPARATOR


def cursor_position_sequence(row: int, col: int) -> bytes:
    """Absolute cursor move; ``row``/``col`` are 1-indexed."""
    return f"\x1b[{row};{col}H".encode("ascii")


def build_frame(document: DocumentBuffer, state: ViewerState) -> bytes:
    out = bytearray()
    out += HIDE_CURSOR
    out += CURSOR_HOME
    draw_rows(out, document, state)
    out += cursor_position_sequence(state.cy - state.rowoff + 1, state.cx - state.coloff + 1)
    out += SHOW_CURSOR
    return bytes(out)


def render_frame(terminal: TerminalController, document: DocumentBuffer, state: ViewerState) -> int:
    """Scroll the cursor into view and write one frame. Returns bytes written."""
    scroll_into_view(state)
    return terminal.write(build_frame(document, state))

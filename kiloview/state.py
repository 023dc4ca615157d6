"""Cursor and scroll state for the viewer.

``ViewerState`` replaces a process-wide editor struct: it is created once per
session and passed through the render -> decode -> apply cycle.
"""

from __future__ import annotations

from dataclasses import dataclass

from .geometry import WindowGeometry
from .input import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    END,
    HOME,
    PAGE_DOWN,
    PAGE_UP,
    KeyEvent,
    ctrl_key,
)

QUIT_BYTE = ctrl_key("q")


@dataclass
class ViewerState:
    screen_rows: int
    screen_cols: int
    cx: int = 0
    cy: int = 0
    rowoff: int = 0
    coloff: int = 0

    @classmethod
    def for_geometry(cls, geometry: WindowGeometry) -> ViewerState:
        return cls(screen_rows=geometry.rows, screen_cols=geometry.cols)


def move_cursor(state: ViewerState, key: str, numrows: int) -> None:
    """Move one cell; ``cy`` may reach ``numrows`` (one past the last line)."""
    if key == ARROW_LEFT:
        if state.cx != 0:
            state.cx -= 1
    elif key == ARROW_RIGHT:
        # No upper bound: the cursor may run past the end of the line.
        state.cx += 1
    elif key == ARROW_UP:
        if state.cy != 0:
            state.cy -= 1
    elif key == ARROW_DOWN:
        if state.cy < numrows:
            state.cy += 1


def is_quit_key(event: KeyEvent) -> bool:
    return event.is_character and event.byte == QUIT_BYTE


def apply_key(state: ViewerState, event: KeyEvent, numrows: int) -> bool:
    """Apply one key event. Returns ``False`` when the viewer should quit."""
    if is_quit_key(event):
        return False
    key = event.name
    if key == HOME:
        state.cx = 0
    elif key == END:
        state.cx = state.screen_cols - 1
    elif key in (PAGE_UP, PAGE_DOWN):
        step = ARROW_UP if key == PAGE_UP else ARROW_DOWN
        for _ in range(state.screen_rows):
            move_cursor(state, step, numrows)
    elif key in (ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT):
        move_cursor(state, key, numrows)
    return True


def scroll_into_view(state: ViewerState) -> None:
    """Adjust offsets minimally so the cursor cell is on screen (rows, then columns)."""
    if state.cy < state.rowoff:
        state.rowoff = state.cy
    if state.cy >= state.rowoff + state.screen_rows:
        state.rowoff = state.cy - state.screen_rows + 1

    if state.cx < state.coloff:
        state.coloff = state.cx
    if state.cx >= state.coloff + state.screen_cols:
        state.coloff = state.cx - state.screen_cols + 1

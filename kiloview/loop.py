"""Main interactive loop: render, decode one key, apply it, repeat.

The loop is strictly sequential. Raw mode is entered before the geometry
probe (the fallback protocol needs unbuffered input) and is restored by the
terminal context manager on every exit path, including fatal errors which
propagate to the caller untouched.
"""

from __future__ import annotations

import logging

from .document import DocumentBuffer
from .geometry import WindowGeometry, probe_window_geometry
from .input import KeyDecoder
from .render import render_frame
from .state import ViewerState, apply_key
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def run_viewer(
    document: DocumentBuffer,
    terminal: TerminalController,
    decoder: KeyDecoder,
    geometry: WindowGeometry | None = None,
) -> int:
    """Run the viewer until the quit key is pressed; returns the exit status."""
    with terminal.raw_mode():
        if geometry is None:
            geometry = probe_window_geometry(terminal, decoder)
        logger.info("viewer started: %d lines, screen %dx%d", document.numrows, geometry.rows, geometry.cols)
        state = ViewerState.for_geometry(geometry)

        while True:
            render_frame(terminal, document, state)
            event = decoder.next_key()
            logger.debug("key %s", event)
            if not apply_key(state, event, document.numrows):
                break

        terminal.clear_screen()
    logger.info("viewer quit")
    return 0

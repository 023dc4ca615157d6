"""Window-size probing for the viewer.

The kernel is asked first (``TIOCGWINSZ``). When that fails or reports zero
columns, the cursor is pushed to the bottom-right corner and the terminal is
asked to report its position, which then equals the screen size.
"""

from __future__ import annotations

import fcntl
import logging
import re
import struct
import termios
from dataclasses import dataclass

from .errors import GeometryProbeError, TerminalIOError
from .input import KeyDecoder
from .terminal import TerminalController

logger = logging.getLogger(__name__)

CURSOR_TO_BOTTOM_RIGHT = b"\x1b[999C\x1b[999B"
CURSOR_POSITION_REQUEST = b"\x1b[6n"
REPORT_MAX_BYTES = 31

_REPORT_RE = re.compile(rb"\x1b\[(\d+);(\d+)R?")


@dataclass(frozen=True)
class WindowGeometry:
    rows: int
    cols: int


def query_window_size(fd: int) -> WindowGeometry | None:
    """Ask the kernel for the window size; ``None`` when unknown or zero-width."""
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
    except OSError as exc:
        logger.debug("TIOCGWINSZ failed on fd %d: %s", fd, exc)
        return None
    rows, cols, _xpixel, _ypixel = struct.unpack("HHHH", packed)
    if cols == 0 or rows == 0:
        return None
    return WindowGeometry(rows=rows, cols=cols)


def parse_cursor_position_report(report: bytes) -> WindowGeometry:
    """Parse ``ESC [ rows ; cols`` (the trailing ``R`` is optional)."""
    match = _REPORT_RE.fullmatch(report)
    if match is None:
        raise GeometryProbeError("cursor position report", f"malformed reply {report!r}")
    rows, cols = int(match.group(1)), int(match.group(2))
    if rows <= 0 or cols <= 0:
        raise GeometryProbeError("cursor position report", f"invalid size {rows}x{cols}")
    return WindowGeometry(rows=rows, cols=cols)


def _send(terminal: TerminalController, data: bytes, operation: str) -> None:
    try:
        written = terminal.write(data)
    except TerminalIOError as exc:
        raise GeometryProbeError(operation, exc.cause) from exc
    if written != len(data):
        raise GeometryProbeError(operation, f"short write ({written} of {len(data)} bytes)")


def cursor_position(terminal: TerminalController, decoder: KeyDecoder) -> WindowGeometry:
    """Request a cursor position report and parse the terminal's reply."""
    _send(terminal, CURSOR_POSITION_REQUEST, "cursor position request")

    reply = bytearray()
    while len(reply) < REPORT_MAX_BYTES:
        byte = decoder.read_byte()
        if byte is None or byte == ord("R"):
            break
        reply.append(byte)
    geometry = parse_cursor_position_report(bytes(reply))

    # Some terminals queue one more byte after the report.
    decoder.read_byte()
    return geometry


def probe_window_geometry(terminal: TerminalController, decoder: KeyDecoder) -> WindowGeometry:
    """Return the terminal size, falling back to the cursor-report protocol."""
    geometry = query_window_size(terminal.stdin_fd)
    if geometry is not None:
        logger.debug("window size from ioctl: %dx%d", geometry.rows, geometry.cols)
        return geometry

    logger.info("window size unavailable from ioctl, using cursor position report")
    _send(terminal, CURSOR_TO_BOTTOM_RIGHT, "cursor move")
    geometry = cursor_position(terminal, decoder)
    logger.debug("window size from cursor report: %dx%d", geometry.rows, geometry.cols)
    return geometry

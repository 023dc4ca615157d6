"""Fatal error taxonomy for the viewer.

Every error here is unrecoverable at the point it is raised. They propagate
up to the single handler in ``kiloview.cli`` which clears the screen,
restores terminal mode, prints a diagnostic and exits with status 1.
"""

from __future__ import annotations


class ViewerError(Exception):
    """Base class for fatal terminal/viewer failures.

    ``operation`` names the failing call (``tcgetattr``, ``read``...) and
    ``cause`` holds the underlying ``OSError`` when there is one.
    """

    def __init__(self, operation: str, cause: BaseException | str | None = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(operation, cause)

    def __str__(self) -> str:
        if self.cause is None:
            return self.operation
        if isinstance(self.cause, OSError) and self.cause.strerror:
            return f"{self.operation}: {self.cause.strerror}"
        return f"{self.operation}: {self.cause}"


class TerminalControlError(ViewerError):
    """Getting or setting terminal attributes failed."""


class GeometryProbeError(ViewerError):
    """Neither the ioctl query nor the cursor-report fallback gave a size."""


class TerminalIOError(ViewerError):
    """A read or write on the terminal failed for a reason other than no data."""

"""Command-line front door for kiloview.

Parses CLI options, loads the document and runs the interactive viewer.
This is also the one place fatal ``ViewerError`` failures are handled.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import load_config, load_log_file, load_log_level
from .document import DocumentBuffer, load_document
from .errors import ViewerError
from .input import KeyDecoder
from .log import configure_logging
from .loop import run_viewer
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kiloview", description="View a text file in the terminal.")
    parser.add_argument("path", nargs="?", default=None, help="File to view. Omit for an empty buffer.")
    parser.add_argument("--log-file", default=None, help="Write debug logs to this file.")
    parser.add_argument("--log-level", default=None, help="Log level name (default: WARNING).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _fail(terminal: TerminalController, exc: ViewerError) -> int:
    """Clear the screen, restore the terminal and report ``exc``; returns 1."""
    try:
        terminal.clear_screen()
    except ViewerError:
        pass
    try:
        terminal.disable_raw_mode()
    except ViewerError as restore_exc:
        logger.error("terminal restore failed: %s", restore_exc)
    logger.error("fatal: %s", exc)
    print(f"kiloview: {exc}", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load the file and run the viewer; returns the exit status."""
    args = build_parser().parse_args(argv)

    config = load_config()
    log_file = Path(args.log_file).expanduser() if args.log_file else load_log_file(config)
    log_level = args.log_level or load_log_level(config)
    try:
        configure_logging(log_file, log_level)
    except OSError as exc:
        print(f"kiloview: cannot open log file {log_file}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    if args.path is None:
        document = DocumentBuffer()
    else:
        path = Path(args.path)
        try:
            document = load_document(path)
        except OSError as exc:
            print(f"kiloview: cannot open {path}: {exc.strerror or exc}", file=sys.stderr)
            return 1

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    decoder = KeyDecoder(stdin_fd)
    try:
        return run_viewer(document, terminal, decoder)
    except ViewerError as exc:
        return _fail(terminal, exc)

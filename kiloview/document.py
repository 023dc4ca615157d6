"""In-memory line buffer handed to the viewer core.

Lines are kept as raw bytes with their trailing CR/LF removed. The core only
reads ``numrows`` and per-line content; loading is the sole mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentLine:
    chars: bytes

    @property
    def length(self) -> int:
        return len(self.chars)


@dataclass
class DocumentBuffer:
    lines: list[DocumentLine] = field(default_factory=list)

    @classmethod
    def from_lines(cls, lines: Iterable[bytes | str]) -> DocumentBuffer:
        buffer = cls()
        for line in lines:
            buffer.append_line(line)
        return buffer

    @property
    def numrows(self) -> int:
        return len(self.lines)

    def line(self, index: int) -> DocumentLine:
        return self.lines[index]

    def append_line(self, chars: bytes | str) -> None:
        if isinstance(chars, str):
            chars = chars.encode("utf-8")
        self.lines.append(DocumentLine(chars.rstrip(b"\r\n")))


def split_document_lines(data: bytes) -> list[bytes]:
    """Split file contents into lines without a phantom line after the last newline."""
    if not data:
        return []
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return lines


def load_document(path: Path) -> DocumentBuffer:
    """Read ``path`` into a ``DocumentBuffer``; ``OSError`` propagates."""
    data = path.read_bytes()
    document = DocumentBuffer.from_lines(split_document_lines(data))
    logger.info("loaded %s: %d lines", path, document.numrows)
    return document

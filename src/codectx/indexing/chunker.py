"""
Brace-aware line chunking.

Splits source text into overlapping segments that prefer to end at
top-level statement boundaries, and assigns each segment an approximate
line span derived from its position in the sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from codectx.config import Config

logger = structlog.get_logger(__name__)


@dataclass
class Chunk:
    """Represents a code chunk."""

    index: int
    text: str
    start_line: int
    end_line: int

    @property
    def line_span(self) -> tuple[int, int]:
        return self.start_line, self.end_line


class Chunker:
    """
    Line-based code chunker that tracks brace depth.

    A chunk is emitted when the running brace depth is back to zero and
    either the buffer reached the target size or the current line is
    non-blank. Each new buffer starts with the trailing overlap lines of
    the chunk just emitted.

    Line spans are positional: chunk ``i`` covers
    ``[i * chunk_size, (i + 1) * chunk_size - 1]`` clamped to the file's
    line count. They are an approximation of where the text came from,
    not a re-scan of the emitted boundaries.
    """

    def __init__(self, config: "Config") -> None:
        """
        Initialize the chunker.

        Args:
            config: codectx configuration.
        """
        self.config = config
        self.chunk_size = config.chunking.chunk_size
        self.overlap = config.chunking.overlap

    def split(self, content: str) -> list[str]:
        """
        Split content into chunk texts without line spans.

        Args:
            content: File content.

        Returns:
            Ordered chunk texts.
        """
        chunks: list[str] = []
        current: list[str] = []
        depth = 0

        for line in content.split("\n"):
            current.append(line)
            depth += line.count("{") - line.count("}")

            if depth == 0 and (len(current) >= self.chunk_size or line.strip()):
                chunks.append("\n".join(current))
                current = current[-self.overlap :] if self.overlap else []

        if current:
            chunks.append("\n".join(current))

        return chunks

    def line_span(self, index: int, total_lines: int) -> tuple[int, int]:
        """Approximate 1-based inclusive span for the chunk at ``index``."""
        last = total_lines - 1
        start = min(index * self.chunk_size, last) + 1
        end = min((index + 1) * self.chunk_size - 1, last) + 1
        return start, end

    def chunk(self, content: str) -> list[Chunk]:
        """
        Chunk content into ordered segments with line spans.

        Args:
            content: File content.

        Returns:
            List of chunks.
        """
        total_lines = content.count("\n") + 1
        chunks = []

        for i, text in enumerate(self.split(content)):
            start, end = self.line_span(i, total_lines)
            chunks.append(Chunk(index=i, text=text, start_line=start, end_line=end))

        logger.debug(
            "Chunked content",
            lines=total_lines,
            chunks=len(chunks),
        )
        return chunks

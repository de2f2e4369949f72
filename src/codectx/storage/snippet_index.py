"""
In-memory snippet index.

Holds embedded code snippets keyed by ``(file_path, start_line, end_line)``
together with the set of files already processed. The index lives only as
long as the engine that owns it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np
import structlog

logger = structlog.get_logger(__name__)

SnippetKey = tuple[str, int, int]


@dataclass
class CodeSnippet:
    """An embedded chunk with its location."""

    file_path: str
    content: str
    start_line: int
    end_line: int
    embedding: np.ndarray

    @property
    def key(self) -> SnippetKey:
        return self.file_path, self.start_line, self.end_line


class SnippetIndex:
    """
    Snippet store with per-file commit.

    Writers go through ``commit_file`` which inserts a file's snippets and
    marks the file indexed under one lock, so concurrent indexing of
    different files never interleaves half-written state.
    """

    def __init__(self) -> None:
        self._snippets: dict[SnippetKey, CodeSnippet] = {}
        self._indexed_files: set[str] = set()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._snippets)

    def __contains__(self, key: object) -> bool:
        return key in self._snippets

    @property
    def indexed_files(self) -> frozenset[str]:
        return frozenset(self._indexed_files)

    def is_indexed(self, file_path: str) -> bool:
        return file_path in self._indexed_files

    def get(self, key: SnippetKey) -> CodeSnippet | None:
        return self._snippets.get(key)

    def values(self) -> list[CodeSnippet]:
        """Snapshot of all snippets in insertion order."""
        return list(self._snippets.values())

    async def commit_file(self, file_path: str, snippets: Iterable[CodeSnippet]) -> int:
        """
        Insert a file's snippets and mark the file indexed.

        Later snippets with an existing key overwrite the earlier entry in
        place.

        Args:
            file_path: File the snippets came from.
            snippets: Snippets to insert.

        Returns:
            Number of snippets written.
        """
        written = 0
        async with self._lock:
            for snippet in snippets:
                self._snippets[snippet.key] = snippet
                written += 1
            self._indexed_files.add(file_path)
        return written

    async def clear(self) -> None:
        """Drop every snippet and indexed-file marker."""
        async with self._lock:
            self._snippets.clear()
            self._indexed_files.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get index statistics."""
        return {
            "snippet_count": len(self._snippets),
            "indexed_files": len(self._indexed_files),
        }

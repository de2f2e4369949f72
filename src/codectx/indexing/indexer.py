"""
Incremental per-file indexing into the snippet index.

Each file is processed at most once per indexer: files already committed
are skipped, ignored files are skipped, and a file whose read or embedding
fails is abandoned for the lifetime of the indexer.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import structlog

from codectx.errors import OperationCancelledError
from codectx.indexing.chunker import Chunker
from codectx.indexing.relevance import is_meaningful
from codectx.storage.snippet_index import CodeSnippet, SnippetIndex

if TYPE_CHECKING:
    from codectx.config import Config
    from codectx.indexing.embedder import EmbeddingBackend
    from codectx.indexing.ignore_parser import IgnoreFilter

logger = structlog.get_logger(__name__)


@dataclass
class IndexStats:
    """Counters for one ``index_files`` call."""

    files: int = 0
    indexed: int = 0
    already_indexed: int = 0
    ignored: int = 0
    errors: int = 0
    chunks: int = 0
    snippets: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "files": self.files,
            "indexed": self.indexed,
            "already_indexed": self.already_indexed,
            "ignored": self.ignored,
            "errors": self.errors,
            "chunks": self.chunks,
            "snippets": self.snippets,
        }


def read_source(path: Path) -> str:
    """
    Read a source file as text, dropping a UTF-8 byte order mark.

    Bytes that are not valid UTF-8 decode to U+FFFD so legacy-encoded
    files are still indexed.
    """
    return path.read_text(encoding="utf-8-sig", errors="replace")


def check_cancelled(cancel_event: asyncio.Event | None) -> None:
    """Raise ``OperationCancelledError`` if the event is set."""
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError("Operation cancelled by caller")


class SnippetIndexer:
    """Chunks, filters and embeds files into a ``SnippetIndex``."""

    def __init__(
        self,
        config: "Config",
        index: SnippetIndex,
        backend: "EmbeddingBackend",
        ignore_filter: "IgnoreFilter",
    ) -> None:
        """
        Initialize the indexer.

        Args:
            config: codectx configuration.
            index: Index receiving committed snippets.
            backend: Embedding backend for chunk text.
            ignore_filter: Filter deciding which paths are indexable.
        """
        self.config = config
        self.index = index
        self.backend = backend
        self.ignore_filter = ignore_filter
        self.chunker = Chunker(config)
        self._failed_files: set[str] = set()

    @property
    def failed_files(self) -> frozenset[str]:
        return frozenset(self._failed_files)

    async def _index_file(self, file_path: str, stats: IndexStats) -> None:
        path = Path(file_path)
        loop = asyncio.get_running_loop()

        try:
            content = await loop.run_in_executor(None, read_source, path)

            chunks = self.chunker.chunk(content)
            kept = [c for c in chunks if is_meaningful(c.text)]
            embeddings = await self.backend.embed_batch([c.text for c in kept])

            snippets = [
                CodeSnippet(
                    file_path=file_path,
                    content=chunk.text,
                    start_line=chunk.start_line,
                    end_line=chunk.end_line,
                    embedding=embedding,
                )
                for chunk, embedding in zip(kept, embeddings)
            ]

            written = await self.index.commit_file(file_path, snippets)

        except Exception as e:
            self._failed_files.add(file_path)
            stats.errors += 1
            logger.warning("Error indexing file", path=file_path, error=str(e))
            return

        stats.indexed += 1
        stats.chunks += len(chunks)
        stats.snippets += written
        logger.debug(
            "Indexed file",
            path=file_path,
            chunks=len(chunks),
            snippets=written,
        )

    async def index_files(
        self,
        file_paths: Iterable[str | Path],
        cancel_event: asyncio.Event | None = None,
    ) -> IndexStats:
        """
        Index files in order.

        Args:
            file_paths: Files to index.
            cancel_event: Checked before each file.

        Returns:
            Indexing statistics.

        Raises:
            OperationCancelledError: If ``cancel_event`` is set. Files
                committed before the check stay indexed.
        """
        stats = IndexStats()

        for raw_path in file_paths:
            check_cancelled(cancel_event)
            file_path = str(raw_path)
            stats.files += 1

            if self.index.is_indexed(file_path) or file_path in self._failed_files:
                stats.already_indexed += 1
                continue

            if self.ignore_filter.should_ignore_for_index(file_path):
                stats.ignored += 1
                continue

            await self._index_file(file_path, stats)

            if stats.files % 100 == 0:
                logger.info(
                    "Indexing progress",
                    files=stats.files,
                    snippets=stats.snippets,
                )

        logger.info("Indexing complete", **stats.to_dict())
        return stats

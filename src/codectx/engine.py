"""
Semantic search engine.

Owns one snippet index and one embedding provider. When the provider is
disabled the engine runs in degraded mode: indexing is a no-op and every
search returns an empty list.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

import structlog

from codectx.indexing.embedder import (
    CachedEmbeddingBackend,
    EmbeddingDisabled,
    EmbeddingEnabled,
    EmbeddingProvider,
    create_embedding_provider,
)
from codectx.indexing.indexer import IndexStats, SnippetIndexer, check_cancelled
from codectx.retrieval.ranker import RankedSnippet, rank
from codectx.storage.snippet_index import SnippetIndex

if TYPE_CHECKING:
    from codectx.config import Config
    from codectx.indexing.ignore_parser import IgnoreFilter

logger = structlog.get_logger(__name__)


class SemanticSearchEngine:
    """
    Index source files and rank snippets against natural-language queries.
    """

    def __init__(
        self,
        config: "Config",
        ignore_filter: "IgnoreFilter",
        provider: EmbeddingProvider | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: codectx configuration.
            ignore_filter: Filter consulted for every indexed path.
            provider: Embedding provider; built from configuration if omitted.
        """
        self.config = config
        self.ignore_filter = ignore_filter
        self.provider: EmbeddingProvider = (
            provider if provider is not None else create_embedding_provider(config)
        )
        self.snippet_index = SnippetIndex()
        self._indexer: SnippetIndexer | None = None
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def is_available(self) -> bool:
        """True unless the engine is in degraded mode."""
        return isinstance(self.provider, EmbeddingEnabled)

    @property
    def disabled_reason(self) -> str | None:
        if isinstance(self.provider, EmbeddingDisabled):
            return self.provider.reason
        return None

    async def initialize(self) -> None:
        """
        Initialize the embedding backend.

        A backend that fails to initialize switches the engine to degraded
        mode instead of raising.
        """
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            if isinstance(self.provider, EmbeddingEnabled):
                try:
                    await self.provider.backend.initialize()
                except Exception as e:
                    logger.warning(
                        "Embedding backend unavailable, semantic search disabled",
                        error=str(e),
                    )
                    self.provider = EmbeddingDisabled(
                        reason=f"Failed to initialize embedding backend: {e}"
                    )
                else:
                    self._indexer = SnippetIndexer(
                        self.config,
                        self.snippet_index,
                        self.provider.backend,
                        self.ignore_filter,
                    )

            self._initialized = True

    async def close(self) -> None:
        """Close the embedding backend."""
        if isinstance(self.provider, EmbeddingEnabled):
            await self.provider.backend.close()
        self._initialized = False
        self._indexer = None

    async def index(
        self,
        file_paths: Iterable[str | Path],
        cancel_event: asyncio.Event | None = None,
    ) -> IndexStats:
        """
        Index files into the snippet index.

        Args:
            file_paths: Files to index.
            cancel_event: Checked before each file.

        Returns:
            Indexing statistics (all zero in degraded mode).
        """
        await self.initialize()

        if not isinstance(self.provider, EmbeddingEnabled) or self._indexer is None:
            logger.debug("Indexing skipped, embedding provider disabled")
            return IndexStats()

        return await self._indexer.index_files(file_paths, cancel_event=cancel_event)

    async def search(
        self,
        query: str,
        top_k: int = 5,
        cancel_event: asyncio.Event | None = None,
    ) -> list[RankedSnippet]:
        """
        Rank indexed snippets by cosine similarity to the query.

        Args:
            query: Natural-language query.
            top_k: Maximum number of results.
            cancel_event: Checked before embedding the query and before ranking.

        Returns:
            Up to ``top_k`` snippets with raw similarity scores, best first.
            Empty in degraded mode, for ``top_k <= 0`` and when nothing is
            indexed.
        """
        await self.initialize()

        if not isinstance(self.provider, EmbeddingEnabled):
            return []

        if top_k <= 0:
            return []

        if len(self.snippet_index) == 0:
            logger.warning("Cannot search because no files have been indexed")
            return []

        check_cancelled(cancel_event)
        query_vector = await self.provider.backend.embed(query)
        check_cancelled(cancel_event)

        return rank(query_vector, self.snippet_index.values(), top_k)

    async def reset(self) -> None:
        """Drop the index and forget abandoned files."""
        await self.snippet_index.clear()
        if self._indexer is not None:
            self._indexer = SnippetIndexer(
                self.config,
                self.snippet_index,
                self._indexer.backend,
                self.ignore_filter,
            )

    def get_stats(self) -> dict[str, Any]:
        """Get engine statistics."""
        stats: dict[str, Any] = {
            "available": self.is_available,
            "disabled_reason": self.disabled_reason,
            **self.snippet_index.get_stats(),
        }
        if self._indexer is not None:
            stats["failed_files"] = len(self._indexer.failed_files)
        if isinstance(self.provider, EmbeddingEnabled) and isinstance(
            self.provider.backend, CachedEmbeddingBackend
        ):
            stats["embedding_cache"] = self.provider.backend.get_cache_stats()
        return stats

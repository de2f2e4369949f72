"""
Indexing modules for codectx.

Provides:
- Brace-aware line chunking
- Relevance filtering of chunks
- Embedding backends (Azure OpenAI) and the enabled/disabled provider variant
- Ignore patterns for sensitive and generated files
- Incremental per-file indexing
"""

from codectx.indexing.chunker import Chunk, Chunker
from codectx.indexing.embedder import (
    EmbeddingBackend,
    EmbeddingDisabled,
    EmbeddingEnabled,
    create_embedding_provider,
)
from codectx.indexing.ignore_parser import IgnoreFilter, is_valid_glob_pattern
from codectx.indexing.indexer import IndexStats, SnippetIndexer
from codectx.indexing.relevance import is_meaningful

__all__ = [
    "Chunk",
    "Chunker",
    "EmbeddingBackend",
    "EmbeddingDisabled",
    "EmbeddingEnabled",
    "create_embedding_provider",
    "IgnoreFilter",
    "is_valid_glob_pattern",
    "IndexStats",
    "SnippetIndexer",
    "is_meaningful",
]

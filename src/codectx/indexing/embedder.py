"""
Embedding backend abstraction with an Azure OpenAI implementation.

Provides:
- Abstract base class for embedding backends
- Azure OpenAI backend (text-embedding-ada-002 by default)
- Content-hash caching wrapper
- Enabled/Disabled provider variant for degraded mode
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import structlog

from codectx.errors import ConfigurationError, EmbeddingUnavailableError

if TYPE_CHECKING:
    from codectx.config import Config

logger = structlog.get_logger(__name__)


class EmbeddingBackend(ABC):
    """Abstract base class for embedding backends."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the embedding dimension."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the backend (create clients, etc.)."""
        pass

    @abstractmethod
    async def embed(self, text: str) -> np.ndarray:
        """
        Generate embedding for a single text.

        Args:
            text: Input text.

        Returns:
            Embedding vector as numpy array.
        """
        pass

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """
        Generate embeddings for multiple texts.

        Args:
            texts: List of input texts.

        Returns:
            List of embedding vectors.
        """
        pass

    async def close(self) -> None:
        """Cleanup resources."""
        pass


class AzureOpenAIEmbeddingBackend(EmbeddingBackend):
    """
    Azure OpenAI embedding backend.

    The client is created lazily on first use so that constructing the
    backend never touches the network.
    """

    def __init__(self, config: "Config") -> None:
        """
        Initialize the Azure backend.

        Args:
            config: codectx configuration.
        """
        self.config = config
        self.endpoint = config.embedding.endpoint
        self.api_key = config.embedding.api_key
        self.deployment = config.embedding.deployment
        self._dimension = config.embedding.dimension
        self.batch_size = config.embedding.batch_size

        self._client: Any = None
        self._initialized = False

    @property
    def dimension(self) -> int:
        """Return the embedding dimension."""
        return self._dimension

    async def initialize(self) -> None:
        """Initialize the API client."""
        if self._initialized:
            return

        if not self.endpoint or not self.api_key:
            raise EmbeddingUnavailableError("Azure OpenAI endpoint or key not configured")

        from openai import AsyncAzureOpenAI

        self._client = AsyncAzureOpenAI(
            azure_endpoint=self.endpoint,
            api_key=self.api_key,
            api_version=self.config.embedding.api_version,
            timeout=self.config.embedding.timeout_seconds,
            max_retries=self.config.embedding.max_retries,
        )

        self._initialized = True
        logger.info(
            "Azure OpenAI embedding backend initialized",
            deployment=self.deployment,
        )

    async def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        results = await self.embed_batch([text])
        return results[0]

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """
        Generate embeddings for multiple texts.

        Texts are sent in requests of at most ``batch_size`` inputs.

        Raises:
            ConfigurationError: If a returned vector does not have the
                configured dimension.
        """
        if not self._initialized:
            await self.initialize()

        if not texts:
            return []

        all_embeddings: list[np.ndarray] = []

        for i in range(0, len(texts), self.batch_size):
            batch = texts[i : i + self.batch_size]
            response = await self._client.embeddings.create(
                input=batch,
                model=self.deployment,
            )

            for item in response.data:
                if len(item.embedding) != self._dimension:
                    raise ConfigurationError(
                        f"Deployment {self.deployment!r} returned {len(item.embedding)}-d "
                        f"vectors, configured dimension is {self._dimension}"
                    )
                all_embeddings.append(np.array(item.embedding, dtype=np.float32))

        return all_embeddings

    async def close(self) -> None:
        """Cleanup client."""
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._initialized = False


class CachedEmbeddingBackend(EmbeddingBackend):
    """
    Wrapper that adds caching to any embedding backend.

    Uses content-based hashing for cache keys.
    """

    def __init__(
        self,
        backend: EmbeddingBackend,
        cache_size: int = 10000,
    ) -> None:
        """
        Initialize the cached backend.

        Args:
            backend: Underlying embedding backend.
            cache_size: Maximum cache entries.
        """
        self._backend = backend
        self._cache: dict[str, np.ndarray] = {}
        self._cache_size = cache_size
        self._cache_hits = 0
        self._cache_misses = 0

    @property
    def dimension(self) -> int:
        """Return the embedding dimension."""
        return self._backend.dimension

    @property
    def backend(self) -> EmbeddingBackend:
        return self._backend

    async def initialize(self) -> None:
        """Initialize the underlying backend."""
        await self._backend.initialize()

    def _cache_key(self, text: str) -> str:
        return hashlib.sha256(text.encode()).hexdigest()[:16]

    def _store(self, key: str, embedding: np.ndarray) -> None:
        if self._cache_size <= 0:
            return
        if len(self._cache) >= self._cache_size:
            first_key = next(iter(self._cache))
            del self._cache[first_key]
        self._cache[key] = embedding.copy()

    async def embed(self, text: str) -> np.ndarray:
        """Generate embedding with caching."""
        key = self._cache_key(text)

        if key in self._cache:
            self._cache_hits += 1
            return self._cache[key].copy()

        self._cache_misses += 1
        embedding = await self._backend.embed(text)
        self._store(key, embedding)
        return embedding

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings with caching."""
        results: list[np.ndarray | None] = [None] * len(texts)
        uncached: list[tuple[int, str]] = []

        for i, text in enumerate(texts):
            key = self._cache_key(text)
            if key in self._cache:
                self._cache_hits += 1
                results[i] = self._cache[key].copy()
            else:
                self._cache_misses += 1
                uncached.append((i, text))

        if uncached:
            indices, texts_to_embed = zip(*uncached)
            embeddings = await self._backend.embed_batch(list(texts_to_embed))

            for idx, embedding in zip(indices, embeddings):
                results[idx] = embedding
                self._store(self._cache_key(texts[idx]), embedding)

        return [r for r in results if r is not None]

    async def close(self) -> None:
        """Cleanup."""
        await self._backend.close()
        self._cache.clear()

    def get_cache_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total = self._cache_hits + self._cache_misses
        hit_rate = self._cache_hits / total if total > 0 else 0

        return {
            "cache_size": len(self._cache),
            "cache_hits": self._cache_hits,
            "cache_misses": self._cache_misses,
            "hit_rate": hit_rate,
        }


@dataclass(frozen=True)
class EmbeddingEnabled:
    """Provider variant carrying a usable backend."""

    backend: EmbeddingBackend


@dataclass(frozen=True)
class EmbeddingDisabled:
    """Provider variant for degraded mode."""

    reason: str


EmbeddingProvider = EmbeddingEnabled | EmbeddingDisabled


def create_embedding_provider(config: "Config") -> EmbeddingProvider:
    """
    Create the embedding provider based on configuration.

    Missing credentials produce ``EmbeddingDisabled`` rather than an error.

    Args:
        config: codectx configuration.

    Returns:
        ``EmbeddingEnabled`` wrapping a cached Azure backend, or
        ``EmbeddingDisabled`` with the reason.
    """
    if not config.embedding.has_credentials:
        reason = (
            "Azure OpenAI credentials not found (AZURE_OPENAI_ENDPOINT, "
            "AZURE_OPENAI_API_KEY); semantic search is unavailable"
        )
        logger.warning("Embedding provider disabled", reason=reason)
        return EmbeddingDisabled(reason=reason)

    backend: EmbeddingBackend = AzureOpenAIEmbeddingBackend(config)
    if config.embedding.cache_size > 0:
        backend = CachedEmbeddingBackend(backend, cache_size=config.embedding.cache_size)

    return EmbeddingEnabled(backend=backend)

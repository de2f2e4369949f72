"""
Unit tests for embedding backends and the provider factory.
"""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import numpy as np
import pytest

from codectx.config import Config
from codectx.engine import SemanticSearchEngine
from codectx.errors import ConfigurationError, EmbeddingUnavailableError
from codectx.indexing.embedder import (
    AzureOpenAIEmbeddingBackend,
    CachedEmbeddingBackend,
    EmbeddingDisabled,
    EmbeddingEnabled,
    create_embedding_provider,
)
from codectx.indexing.ignore_parser import IgnoreFilter

from tests.conftest import MockEmbeddingBackend

DIMENSION = 8


@pytest.fixture
def azure_config(workspace_dir: Path, state_dir: Path) -> Config:
    return Config(
        base_dir=workspace_dir,
        data_dir=state_dir,
        embedding={
            "endpoint": "https://example.openai.azure.com",
            "api_key": "test-key",
            "dimension": DIMENSION,
        },
    )


def vec(*values: float) -> list[float]:
    """Pad values with zeros to the configured dimension."""
    return list(values) + [0.0] * (DIMENSION - len(values))


def make_client(vectors: list[list[float]]) -> MagicMock:
    client = MagicMock()
    client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(
            data=[SimpleNamespace(embedding=v) for v in vectors]
        )
    )
    client.close = AsyncMock()
    return client


def make_capped_client(cap: int) -> MagicMock:
    """Client that rejects requests with more than ``cap`` inputs."""

    async def create(input: list[str], model: str) -> SimpleNamespace:
        if len(input) > cap:
            raise ValueError(f"Too many inputs: {len(input)} > {cap}")
        return SimpleNamespace(
            data=[SimpleNamespace(embedding=vec(float(len(text)))) for text in input]
        )

    client = MagicMock()
    client.embeddings.create = AsyncMock(side_effect=create)
    client.close = AsyncMock()
    return client


class TestProviderFactory:
    """Tests for create_embedding_provider."""

    def test_disabled_without_credentials(self, config: Config):
        provider = create_embedding_provider(config)

        assert isinstance(provider, EmbeddingDisabled)
        assert "AZURE_OPENAI_ENDPOINT" in provider.reason

    def test_enabled_with_credentials(self, azure_config: Config):
        provider = create_embedding_provider(azure_config)

        assert isinstance(provider, EmbeddingEnabled)
        assert isinstance(provider.backend, CachedEmbeddingBackend)
        assert isinstance(provider.backend.backend, AzureOpenAIEmbeddingBackend)

    def test_cache_disabled(self, workspace_dir: Path):
        config = Config(
            base_dir=workspace_dir,
            embedding={"endpoint": "https://e", "api_key": "k", "cache_size": 0},
        )

        provider = create_embedding_provider(config)

        assert isinstance(provider, EmbeddingEnabled)
        assert isinstance(provider.backend, AzureOpenAIEmbeddingBackend)


class TestAzureBackend:
    """Tests for the Azure OpenAI backend with a mocked client."""

    @pytest.mark.asyncio
    async def test_initialize_requires_credentials(self, config: Config):
        backend = AzureOpenAIEmbeddingBackend(config)

        with pytest.raises(EmbeddingUnavailableError):
            await backend.initialize()

    @pytest.mark.asyncio
    async def test_embed_batch_calls_deployment(self, azure_config: Config):
        client = make_client([vec(1.0), vec(0.0, 1.0)])

        with patch("openai.AsyncAzureOpenAI", return_value=client):
            backend = AzureOpenAIEmbeddingBackend(azure_config)
            vectors = await backend.embed_batch(["a", "b"])

        client.embeddings.create.assert_awaited_once_with(
            input=["a", "b"], model="text-embedding-ada-002"
        )
        assert len(vectors) == 2
        assert vectors[0].dtype == np.float32
        np.testing.assert_array_equal(vectors[1], vec(0.0, 1.0))

    @pytest.mark.asyncio
    async def test_embed_single(self, azure_config: Config):
        client = make_client([vec(0.5, 0.5)])

        with patch("openai.AsyncAzureOpenAI", return_value=client):
            backend = AzureOpenAIEmbeddingBackend(azure_config)
            vector = await backend.embed("query")

        np.testing.assert_allclose(vector, vec(0.5, 0.5))

    @pytest.mark.asyncio
    async def test_empty_batch_skips_request(self, azure_config: Config):
        client = make_client([])

        with patch("openai.AsyncAzureOpenAI", return_value=client):
            backend = AzureOpenAIEmbeddingBackend(azure_config)
            vectors = await backend.embed_batch([])

        assert vectors == []
        client.embeddings.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_releases_client(self, azure_config: Config):
        client = make_client([vec(1.0)])

        with patch("openai.AsyncAzureOpenAI", return_value=client):
            backend = AzureOpenAIEmbeddingBackend(azure_config)
            await backend.initialize()
            await backend.close()

        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_requests_split_by_batch_size(self, workspace_dir: Path):
        config = Config(
            base_dir=workspace_dir,
            embedding={
                "endpoint": "https://e",
                "api_key": "k",
                "dimension": DIMENSION,
                "batch_size": 2,
            },
        )
        client = make_capped_client(cap=2)

        with patch("openai.AsyncAzureOpenAI", return_value=client):
            backend = AzureOpenAIEmbeddingBackend(config)
            vectors = await backend.embed_batch(["a", "bb", "ccc", "dddd", "eeeee"])

        sizes = [len(c.kwargs["input"]) for c in client.embeddings.create.await_args_list]
        assert sizes == [2, 2, 1]
        assert [v[0] for v in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]

    @pytest.mark.asyncio
    async def test_dimension_mismatch_raises(self, azure_config: Config):
        client = make_client([[1.0, 0.0, 0.0]])

        with patch("openai.AsyncAzureOpenAI", return_value=client):
            backend = AzureOpenAIEmbeddingBackend(azure_config)
            with pytest.raises(ConfigurationError) as exc_info:
                await backend.embed("query")

        assert "3-d" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_file_with_more_chunks_than_one_request(
        self, azure_config: Config, workspace_dir: Path
    ):
        path = workspace_dir / "Constants.cs"
        path.write_text("\n".join(f"public const int Value{i} = {i};" for i in range(2100)))
        client = make_capped_client(cap=2048)
        backend = AzureOpenAIEmbeddingBackend(azure_config)
        engine = SemanticSearchEngine(
            azure_config, IgnoreFilter(azure_config), provider=EmbeddingEnabled(backend)
        )

        with patch("openai.AsyncAzureOpenAI", return_value=client):
            stats = await engine.index([path])

        assert stats.errors == 0
        assert stats.indexed == 1
        assert stats.snippets == stats.chunks > 2048
        assert client.embeddings.create.await_count == 2
        assert engine.snippet_index.is_indexed(str(path))


class TestCachedBackend:
    """Tests for the caching wrapper."""

    @pytest.mark.asyncio
    async def test_repeat_text_hits_cache(self):
        inner = MockEmbeddingBackend()
        cached = CachedEmbeddingBackend(inner, cache_size=10)

        first = await cached.embed("same text")
        second = await cached.embed("same text")

        np.testing.assert_array_equal(first, second)
        assert inner.call_count == 1
        stats = cached.get_cache_stats()
        assert stats["cache_hits"] == 1
        assert stats["cache_misses"] == 1

    @pytest.mark.asyncio
    async def test_batch_only_embeds_misses(self):
        inner = MockEmbeddingBackend()
        cached = CachedEmbeddingBackend(inner, cache_size=10)

        await cached.embed("a")
        vectors = await cached.embed_batch(["a", "b", "c"])

        assert len(vectors) == 3
        assert inner.call_count == 3

    @pytest.mark.asyncio
    async def test_eviction_bounded(self):
        inner = MockEmbeddingBackend()
        cached = CachedEmbeddingBackend(inner, cache_size=2)

        await cached.embed_batch(["a", "b", "c"])

        assert cached.get_cache_stats()["cache_size"] == 2

    @pytest.mark.asyncio
    async def test_close_propagates(self):
        inner = MockEmbeddingBackend()
        cached = CachedEmbeddingBackend(inner)

        await cached.close()

        assert inner.closed is True

    def test_dimension_from_inner(self):
        cached = CachedEmbeddingBackend(MockEmbeddingBackend(dimension=32))

        assert cached.dimension == 32

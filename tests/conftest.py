"""
Shared fixtures for the codectx test suite.

Provides common test fixtures including:
- Temporary workspace and state directories
- Configuration with a clean environment
- Mock embedding backends (hash-seeded and keyword-overlap)
- Sample C# sources
"""

from __future__ import annotations

import hashlib
import os
import re
from pathlib import Path
from typing import Callable

import numpy as np
import pytest

from codectx.config import Config
from codectx.engine import SemanticSearchEngine
from codectx.indexing.embedder import EmbeddingBackend, EmbeddingEnabled
from codectx.indexing.ignore_parser import IgnoreFilter


# ==============================================================================
# Sample Sources
# ==============================================================================

DATA_PROCESSOR_CS = """\
public class DataProcessor
{
    private string[] GetData()
    {
        return new[] { "hello", "world" };
    }

    public void ProcessData()
    {
        var data = GetData();
        foreach (var item in data)
        {
            Console.WriteLine(item);
        }
    }
}
"""

AUTHENTICATION_CS = """\
public class Authentication
{
    public bool ValidateUserCredentials(string user, string password)
    {
        return user == "admin" && password == "admin";
    }
}
"""

LOGGING_CS = """\
public class Logging
{
    public void LogError(string message)
    {
        Console.WriteLine(message);
    }
}
"""

COMMENTS_ONLY_CS = """\
// just a comment

// another comment
"""

NESTED_SCOPE_CS = """\
namespace N
{
    class C
    {
        void M()
        {
        }
    }
}"""


# ==============================================================================
# Mock Embedding Backends
# ==============================================================================

class MockEmbeddingBackend(EmbeddingBackend):
    """
    Mock embedding backend for fast tests.

    Generates deterministic embeddings based on content hash. Texts
    containing ``fail_on`` raise ``RuntimeError``.
    """

    def __init__(self, dimension: int = 64, fail_on: str | None = None):
        self._dimension = dimension
        self.fail_on = fail_on
        self._initialized = False
        self._call_count = 0
        self.closed = False

    @property
    def dimension(self) -> int:
        return self._dimension

    async def initialize(self) -> None:
        """Initialize the mock backend."""
        self._initialized = True

    async def embed(self, text: str) -> np.ndarray:
        """Generate a mock embedding for a single text."""
        result = await self.embed_batch([text])
        return result[0]

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate mock embeddings for texts."""
        embeddings = []
        for text in texts:
            if self.fail_on is not None and self.fail_on in text:
                raise RuntimeError("embedding service error")
            self._call_count += 1
            hash_bytes = hashlib.sha256(text.encode()).digest()
            rng = np.random.default_rng(int.from_bytes(hash_bytes[:8], "little"))
            embedding = rng.standard_normal(self._dimension).astype(np.float32)
            embeddings.append(embedding / np.linalg.norm(embedding))
        return embeddings

    async def close(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        """Number of texts embedded."""
        return self._call_count


WORD_PATTERN = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")


class KeywordEmbeddingBackend(EmbeddingBackend):
    """
    Bag-of-words embedding double.

    Identifiers are split on camelCase and each lowercased word adds 1.0 to
    a hashed bucket, so texts sharing words have positive cosine similarity.
    """

    def __init__(self, dimension: int = 4096):
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    async def initialize(self) -> None:
        pass

    def vectorize(self, text: str) -> np.ndarray:
        vector = np.zeros(self._dimension, dtype=np.float32)
        for word in WORD_PATTERN.findall(text):
            digest = hashlib.md5(word.lower().encode()).hexdigest()
            vector[int(digest, 16) % self._dimension] += 1.0
        return vector

    async def embed(self, text: str) -> np.ndarray:
        return self.vectorize(text)

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        return [self.vectorize(text) for text in texts]


# ==============================================================================
# Environment and Path Fixtures
# ==============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove embedding credentials and codectx settings from the environment."""
    monkeypatch.delenv("AZURE_OPENAI_ENDPOINT", raising=False)
    monkeypatch.delenv("AZURE_OPENAI_API_KEY", raising=False)
    for key in list(os.environ):
        if key.upper().startswith("CODECTX_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def workspace_dir(tmp_path: Path) -> Path:
    """Empty workspace directory used as the base directory."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """State directory kept outside the workspace."""
    return tmp_path / "state"


@pytest.fixture
def write_file(workspace_dir: Path) -> Callable[[str, str], Path]:
    """Write a file relative to the workspace and return its absolute path."""

    def _write(relative: str, content: str) -> Path:
        path = workspace_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


# ==============================================================================
# Configuration and Component Fixtures
# ==============================================================================

@pytest.fixture
def config(workspace_dir: Path, state_dir: Path) -> Config:
    """Configuration rooted at the temporary workspace."""
    return Config(base_dir=workspace_dir, data_dir=state_dir)


@pytest.fixture
def ignore_filter(config: Config) -> IgnoreFilter:
    """Ignore filter with an empty user pattern state."""
    return IgnoreFilter(config)


@pytest.fixture
def mock_embedder() -> MockEmbeddingBackend:
    """Get a mock embedding backend."""
    return MockEmbeddingBackend()


@pytest.fixture
def keyword_embedder() -> KeywordEmbeddingBackend:
    """Get a keyword-overlap embedding backend."""
    return KeywordEmbeddingBackend()


@pytest.fixture
def engine(
    config: Config,
    ignore_filter: IgnoreFilter,
    mock_embedder: MockEmbeddingBackend,
) -> SemanticSearchEngine:
    """Engine backed by the hash-seeded mock embedder."""
    return SemanticSearchEngine(
        config,
        ignore_filter,
        provider=EmbeddingEnabled(backend=mock_embedder),
    )


@pytest.fixture
def keyword_engine(
    config: Config,
    ignore_filter: IgnoreFilter,
    keyword_embedder: KeywordEmbeddingBackend,
) -> SemanticSearchEngine:
    """Engine backed by the keyword-overlap embedder."""
    return SemanticSearchEngine(
        config,
        ignore_filter,
        provider=EmbeddingEnabled(backend=keyword_embedder),
    )

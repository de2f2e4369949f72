"""
Exact cosine-similarity ranking over the snippet index.

Provides:
- Cosine similarity with zero-norm guard
- Stable top-k selection (ties keep index insertion order)
- Display score scaling
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from codectx.storage.snippet_index import CodeSnippet


@dataclass
class RankedSnippet:
    """A snippet paired with its raw cosine similarity."""

    snippet: CodeSnippet
    score: float


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity of two vectors, 0.0 when either has zero norm."""
    a = np.asarray(a, dtype=np.float32)
    b = np.asarray(b, dtype=np.float32)
    norm = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    return float(np.dot(a, b) / norm)


def cosine_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of ``query`` against every row of ``matrix``.

    Rows (or a query) with zero norm score 0.0.
    """
    query = np.asarray(query, dtype=np.float32)
    matrix = np.asarray(matrix, dtype=np.float32)

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query

    scores = np.zeros(len(matrix), dtype=np.float64)
    nonzero = norms > 0
    scores[nonzero] = dots[nonzero] / norms[nonzero]
    return scores


def rank(
    query_vector: np.ndarray,
    snippets: Sequence[CodeSnippet],
    k: int,
) -> list[RankedSnippet]:
    """
    Rank snippets by descending cosine similarity.

    Args:
        query_vector: Embedded query.
        snippets: Candidate snippets, in index insertion order.
        k: Maximum number of results.

    Returns:
        At most ``k`` ranked snippets, scores non-increasing.
    """
    if k <= 0 or not snippets:
        return []

    matrix = np.stack([s.embedding for s in snippets])
    scores = cosine_scores(query_vector, matrix)

    order = np.argsort(-scores, kind="stable")[:k]
    return [RankedSnippet(snippet=snippets[i], score=float(scores[i])) for i in order]


def display_score(score: float) -> float:
    """Scale a cosine similarity to a 0-100 percentage with one decimal."""
    return round(score * 100, 1)

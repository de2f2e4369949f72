"""
Retrieval modules for codectx.

Provides:
- Exact cosine ranking
- Scope resolution for result display
- Snippet content formatting
"""

from codectx.retrieval.formatting import format_code_content
from codectx.retrieval.ranker import RankedSnippet, display_score, rank
from codectx.retrieval.scope import resolve_scope

__all__ = [
    "RankedSnippet",
    "display_score",
    "format_code_content",
    "rank",
    "resolve_scope",
]

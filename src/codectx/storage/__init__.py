"""
Storage modules for codectx.

Provides the in-memory snippet index.
"""

from codectx.storage.snippet_index import CodeSnippet, SnippetIndex

__all__ = [
    "CodeSnippet",
    "SnippetIndex",
]

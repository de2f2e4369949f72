"""
codectx - semantic code context for .NET workspaces.

Indexes source files into an in-memory embedding index and answers
natural-language queries by cosine-similarity ranking. Also provides
workspace file access, text search and ignore-pattern management.
"""

__version__ = "0.1.0"
__all__ = [
    "Config",
    "CodeContextService",
    "SemanticSearchEngine",
]

from codectx.config import Config
from codectx.engine import SemanticSearchEngine
from codectx.main import CodeContextService

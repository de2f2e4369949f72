"""Workspace file access and text search."""

from codectx.workspace.files import WorkspaceFiles
from codectx.workspace.text_search import search_code

__all__ = [
    "WorkspaceFiles",
    "search_code",
]

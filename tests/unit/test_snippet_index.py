"""
Unit tests for the in-memory snippet index.
"""

from __future__ import annotations

import asyncio

import numpy as np
import pytest

from codectx.storage.snippet_index import CodeSnippet, SnippetIndex


def make_snippet(path: str, start: int, end: int, content: str = "code") -> CodeSnippet:
    return CodeSnippet(
        file_path=path,
        content=content,
        start_line=start,
        end_line=end,
        embedding=np.ones(4, dtype=np.float32),
    )


class TestCommitFile:
    """Tests for per-file commits."""

    @pytest.mark.asyncio
    async def test_commit_marks_file_indexed(self):
        index = SnippetIndex()

        written = await index.commit_file("/a.cs", [make_snippet("/a.cs", 1, 200)])

        assert written == 1
        assert index.is_indexed("/a.cs")
        assert ("/a.cs", 1, 200) in index
        assert len(index) == 1

    @pytest.mark.asyncio
    async def test_empty_commit_still_marks_file(self):
        index = SnippetIndex()

        await index.commit_file("/empty.cs", [])

        assert index.is_indexed("/empty.cs")
        assert len(index) == 0

    @pytest.mark.asyncio
    async def test_duplicate_key_overwrites(self):
        index = SnippetIndex()

        await index.commit_file(
            "/a.cs",
            [make_snippet("/a.cs", 8, 8, "first"), make_snippet("/a.cs", 8, 8, "second")],
        )

        assert len(index) == 1
        assert index.get(("/a.cs", 8, 8)).content == "second"

    @pytest.mark.asyncio
    async def test_values_keep_insertion_order(self):
        index = SnippetIndex()
        await index.commit_file("/a.cs", [make_snippet("/a.cs", 1, 1, "a")])
        await index.commit_file("/b.cs", [make_snippet("/b.cs", 1, 1, "b")])

        assert [s.content for s in index.values()] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_concurrent_commits(self):
        index = SnippetIndex()

        await asyncio.gather(
            *[
                index.commit_file(f"/f{i}.cs", [make_snippet(f"/f{i}.cs", 1, 1)])
                for i in range(20)
            ]
        )

        assert len(index) == 20
        assert len(index.indexed_files) == 20


class TestClear:
    """Tests for clearing the index."""

    @pytest.mark.asyncio
    async def test_clear_drops_everything(self):
        index = SnippetIndex()
        await index.commit_file("/a.cs", [make_snippet("/a.cs", 1, 1)])

        await index.clear()

        assert len(index) == 0
        assert not index.is_indexed("/a.cs")
        assert index.get_stats() == {"snippet_count": 0, "indexed_files": 0}

"""
Unit tests for the chunker module.

Tests cover:
- Statement-boundary emission at depth zero
- Brace depth keeping blocks together
- Overlap seeding
- Positional line spans and clamping
- Determinism
- Large files
"""

from __future__ import annotations

import pytest

from codectx.config import ChunkingConfig, Config
from codectx.indexing.chunker import Chunk, Chunker

from tests.conftest import DATA_PROCESSOR_CS


def make_chunker(chunk_size: int = 200, overlap: int = 20) -> Chunker:
    config = Config(chunking=ChunkingConfig(chunk_size=chunk_size, overlap=overlap))
    return Chunker(config)


class TestChunkBoundaries:
    """Tests for where chunks are cut."""

    def test_each_top_level_statement_emits(self):
        """Non-blank lines at depth zero close a chunk."""
        chunker = make_chunker(chunk_size=3, overlap=1)

        texts = chunker.split("x\ny\nz")

        assert texts == ["x", "x\ny", "y\nz", "z"]

    def test_block_stays_together(self):
        """Lines inside braces are not emitted until depth returns to zero."""
        chunker = make_chunker(overlap=0)

        texts = chunker.split("class A\n{\n  int x;\n}\n")

        assert texts == ["class A", "{\n  int x;\n}", ""]

    def test_overlap_seeds_next_chunk(self):
        """The next chunk starts with the tail of the previous one."""
        chunker = make_chunker(chunk_size=200, overlap=2)

        texts = chunker.split("a\nb\nc\nd")

        assert texts[0] == "a"
        assert texts[1] == "a\nb"
        assert texts[2] == "a\nb\nc"
        assert texts[3] == "b\nc\nd"

    def test_blank_lines_emit_only_at_size(self):
        """Blank lines at depth zero accumulate until the target size."""
        chunker = make_chunker(chunk_size=4, overlap=0)

        texts = chunker.split("\n\n\n\n\n")

        assert texts == ["\n\n\n", "\n"]

    def test_unbalanced_open_brace_keeps_rest_in_final_chunk(self):
        """A block that never closes ends up in the trailing chunk."""
        chunker = make_chunker(overlap=0)

        texts = chunker.split("void F()\n{\n  call();\n")

        assert texts == ["void F()", "{\n  call();\n"]

    def test_empty_content(self):
        """Empty content yields a single empty chunk."""
        chunker = make_chunker()

        chunks = chunker.chunk("")

        assert len(chunks) == 1
        assert chunks[0].text == ""
        assert chunks[0].line_span == (1, 1)


class TestLineSpans:
    """Tests for positional line spans."""

    def test_spans_follow_chunk_index(self):
        """Chunk i covers [i*size, (i+1)*size - 1], 1-based."""
        chunker = make_chunker(chunk_size=200)

        assert chunker.line_span(0, 1000) == (1, 200)
        assert chunker.line_span(1, 1000) == (201, 400)
        assert chunker.line_span(4, 1000) == (801, 1000)

    def test_spans_clamped_to_line_count(self):
        """Spans past the end collapse onto the last line."""
        chunker = make_chunker(chunk_size=200)

        assert chunker.line_span(0, 8) == (1, 8)
        assert chunker.line_span(1, 8) == (8, 8)
        assert chunker.line_span(7, 8) == (8, 8)

    def test_chunk_spans_valid(self):
        """Every chunk has start <= end <= total lines."""
        chunker = make_chunker()
        total = DATA_PROCESSOR_CS.count("\n") + 1

        for chunk in chunker.chunk(DATA_PROCESSOR_CS):
            assert isinstance(chunk, Chunk)
            assert 1 <= chunk.start_line <= chunk.end_line <= total

    def test_chunk_indices_sequential(self):
        """Chunks carry their position in the sequence."""
        chunker = make_chunker()

        chunks = chunker.chunk(DATA_PROCESSOR_CS)

        assert [c.index for c in chunks] == list(range(len(chunks)))


class TestDeterminism:
    """Tests for deterministic output."""

    def test_same_input_same_output(self):
        """Chunking twice gives identical text and spans."""
        chunker = make_chunker()

        first = [(c.text, c.line_span) for c in chunker.chunk(DATA_PROCESSOR_CS)]
        second = [(c.text, c.line_span) for c in chunker.chunk(DATA_PROCESSOR_CS)]

        assert first == second

    def test_independent_instances_agree(self):
        """Two chunkers with the same sizes agree."""
        a = make_chunker(chunk_size=50, overlap=5)
        b = make_chunker(chunk_size=50, overlap=5)

        assert [c.text for c in a.chunk(DATA_PROCESSOR_CS)] == [
            c.text for c in b.chunk(DATA_PROCESSOR_CS)
        ]


class TestLargeFiles:
    """Tests for files far larger than the target size."""

    @pytest.fixture
    def ten_thousand_lines(self) -> str:
        return "\n".join(f"int value{i} = {i};" for i in range(10000))

    def test_minimum_chunk_count(self, ten_thousand_lines: str):
        """10,000 lines at size 200 produce at least 50 chunks."""
        chunker = make_chunker(chunk_size=200, overlap=20)

        chunks = chunker.chunk(ten_thousand_lines)

        assert len(chunks) >= 50

    def test_end_line_within_file(self, ten_thousand_lines: str):
        """No chunk ends past the last line."""
        chunker = make_chunker(chunk_size=200, overlap=20)

        chunks = chunker.chunk(ten_thousand_lines)

        assert all(c.end_line <= 10000 for c in chunks)
        assert all(c.start_line <= c.end_line for c in chunks)

    def test_blank_heavy_file_splits_by_size(self):
        """A file of blank lines is cut by size with overlap."""
        chunker = make_chunker(chunk_size=200, overlap=20)
        content = "\n" * 9999

        chunks = chunker.chunk(content)

        assert len(chunks) >= 50
        assert all(c.end_line <= 10000 for c in chunks)
        assert all(c.text.count("\n") + 1 <= 200 for c in chunks)

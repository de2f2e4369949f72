"""Heuristic filter that drops chunks with too little code to be worth embedding."""

from __future__ import annotations

MIN_MEANINGFUL_LINES = 3

COMMENT_PREFIXES = ("//", "/*", "*")

STRUCTURE_MARKERS = (
    "class ",
    "interface ",
    "struct ",
    "enum ",
    "void ",
    "async ",
    "return ",
    "public ",
    "private ",
    "protected ",
)


def count_code_lines(text: str) -> int:
    """Count lines that are neither blank nor comment-only."""
    count = 0
    for line in text.split("\n"):
        if not line.strip():
            continue
        if line.lstrip().startswith(COMMENT_PREFIXES):
            continue
        count += 1
    return count


def has_code_structure(text: str) -> bool:
    """True if any line contains a declaration or statement marker."""
    return any(
        marker in line for line in text.split("\n") for marker in STRUCTURE_MARKERS
    )


def is_meaningful(text: str) -> bool:
    """
    Decide whether a chunk carries enough code to index.

    Args:
        text: Chunk text.

    Returns:
        True when the chunk has at least three code lines or contains a
        structural marker such as ``class `` or ``return ``.
    """
    return count_code_lines(text) >= MIN_MEANINGFUL_LINES or has_code_structure(text)

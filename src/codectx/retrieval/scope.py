"""
Dotted scope path for a snippet.

A single forward pass collects every namespace, type and member
declaration in the text and joins their names with ``.``. Nesting is not
tracked: a chunk that leaves one class and enters another yields both
names in order.
"""

from __future__ import annotations

TYPE_KEYWORDS = ("class", "interface", "struct", "enum")

MEMBER_MARKERS = (
    "void ",
    "async ",
    "Task ",
    "public ",
    "private ",
    "protected ",
    "internal ",
)

NAME_TERMINATORS = (" ", "{", ":", "(")


def extract_name(line: str, keyword: str) -> str:
    """
    Name following ``keyword`` on a declaration line.

    Args:
        line: Declaration line.
        keyword: Keyword such as ``class`` or ``namespace``.

    Returns:
        The identifier up to the first space, ``{``, ``:`` or ``(``, or an
        empty string if none.
    """
    pos = line.find(keyword + " ")
    if pos < 0:
        return ""

    after = line[pos + len(keyword) + 1 :].strip()
    end = len(after)
    for terminator in NAME_TERMINATORS:
        idx = after.find(terminator)
        if 0 <= idx < end:
            end = idx

    if end > 0:
        return after[:end].strip()
    return ""


def extract_method_name(line: str) -> str:
    """Token immediately before the first ``(``, or an empty string."""
    paren = line.find("(")
    if paren <= 0:
        return ""

    before = line[:paren].strip()
    last_space = before.rfind(" ")
    if 0 <= last_space < len(before) - 1:
        return before[last_space + 1 :].strip()
    return ""


def _is_member_declaration(trimmed: str) -> bool:
    return (
        any(marker in trimmed for marker in MEMBER_MARKERS)
        and "(" in trimmed
        and not trimmed.startswith(("//", "/*"))
    )


def resolve_scope(text: str) -> str:
    """
    Resolve the dotted scope of a snippet.

    Args:
        text: Snippet text.

    Returns:
        Names of all declarations found, joined with ``.``; empty string
        when none are found.
    """
    parts: list[str] = []

    for line in text.split("\n"):
        trimmed = line.lstrip()
        name = ""

        if trimmed.startswith("namespace "):
            name = extract_name(trimmed, "namespace")
        else:
            keyword = next((kw for kw in TYPE_KEYWORDS if kw + " " in trimmed), None)
            if keyword is not None:
                name = extract_name(trimmed, keyword)
            elif _is_member_declaration(trimmed):
                name = extract_method_name(trimmed)

        if name:
            parts.append(name)

    return ".".join(parts)

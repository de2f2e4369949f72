"""Compact display formatting for snippet content returned to clients."""

from __future__ import annotations

DECLARATION_MARKERS = ("class ", "interface ", "struct ", "enum ")

CALLABLE_MARKERS = ("void ", "public ", "private ", "protected ", "internal ")

TRUNCATED_BODY = ["{", "    // Content truncated", "}"]


def is_declaration(line: str) -> bool:
    """True for type declarations and lines that look like member signatures."""
    if any(marker in line for marker in DECLARATION_MARKERS):
        return True
    return "(" in line and any(marker in line for marker in CALLABLE_MARKERS)


def format_code_content(content: str) -> str:
    """
    Strip blank lines from a snippet and re-space its declarations.

    Blank lines are removed, then a single blank line is placed before each
    declaration (never two in a row, never at the top). A snippet whose
    first line is a declaration but that has no ``{`` gets a placeholder
    body. Blank lines are capped at a quarter of the output.

    Args:
        content: Raw snippet text.

    Returns:
        Formatted text with surrounding whitespace stripped.
    """
    lines = content.split("\n")
    non_blank = [line for line in lines if line.strip()]

    if not non_blank:
        return content.strip()

    if "{" not in content and is_declaration(non_blank[0].strip()):
        non_blank.extend(TRUNCATED_BODY)

    result: list[str] = []
    added_blank = False
    for i, line in enumerate(non_blank):
        if is_declaration(line.lstrip()) and not added_blank and i > 0:
            result.append("")
            added_blank = True
        else:
            added_blank = False
        result.append(line)

    max_blank = len(result) // 4
    blank_count = sum(1 for line in result if not line.strip())

    if blank_count > max_blank:
        trimmed: list[str] = []
        keep = max_blank
        for line in result:
            if line.strip():
                trimmed.append(line)
            elif keep > 0:
                trimmed.append(line)
                keep -= 1
        result = trimmed

    return "\n".join(result).strip()

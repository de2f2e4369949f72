"""Case-insensitive substring search over workspace source files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from codectx.workspace.files import WorkspaceFiles

logger = structlog.get_logger(__name__)


def search_code(workspace: "WorkspaceFiles", text: str) -> list[str]:
    """
    Find lines containing ``text`` in every source file under the base directory.

    Args:
        workspace: Workspace providing the file listing.
        text: Substring to look for, compared case-insensitively.

    Returns:
        Matches formatted as ``<path>:<line>: <stripped line>``.
    """
    if not text:
        return []

    needle = text.casefold()
    results: list[str] = []

    for file_path in workspace.list_source_files():
        try:
            lines = Path(file_path).read_text(encoding="utf-8-sig").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable file", path=file_path, error=str(e))
            continue

        for i, line in enumerate(lines):
            if needle in line.casefold():
                results.append(f"{file_path}:{i + 1}: {line.strip()}")

    logger.debug("Text search complete", text=text, matches=len(results))
    return results

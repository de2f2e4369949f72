"""
Workspace file access restricted to a base directory.

Provides:
- Base directory management and path safety checks
- Project, solution and source file listings (ignored files removed)
- Bounded file reads
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from codectx.errors import PathAccessError

if TYPE_CHECKING:
    from codectx.config import Config
    from codectx.indexing.ignore_parser import IgnoreFilter

logger = structlog.get_logger(__name__)

TRUNCATION_MARKER = "\n... [Truncated]"


class WorkspaceFiles:
    """File listings and reads confined to the configured base directory."""

    def __init__(self, config: "Config", ignore_filter: "IgnoreFilter") -> None:
        self.config = config
        self.ignore_filter = ignore_filter
        self.source_patterns = list(config.files.source_patterns)
        self._base_dir = config.base_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def set_base_directory(self, directory: str | Path) -> Path:
        """
        Change the base directory.

        Args:
            directory: Existing directory.

        Returns:
            The resolved base directory.

        Raises:
            PathAccessError: If the directory does not exist.
        """
        path = Path(directory).expanduser().resolve()
        if not path.is_dir():
            raise PathAccessError(f"Directory not found: {directory}")
        self._base_dir = path
        logger.info("Base directory set", path=str(path))
        return path

    def is_path_safe(self, path: str | Path) -> bool:
        """True if ``path`` resolves to a location inside the base directory."""
        if not str(path):
            return False
        return Path(path).resolve().is_relative_to(self._base_dir)

    def relative_path(self, path: str | Path) -> str:
        """Path relative to the base directory, or unchanged if outside it."""
        resolved = Path(path).resolve()
        if resolved.is_relative_to(self._base_dir):
            return resolved.relative_to(self._base_dir).as_posix()
        return str(path)

    def _require_directory(self, directory: str | Path) -> Path:
        path = Path(directory)
        if not path.is_dir():
            raise PathAccessError(f"Directory not found: {directory}")
        if not self.is_path_safe(path):
            raise PathAccessError(f"Access to this directory is not allowed: {directory}")
        return path.resolve()

    def _collect(self, directory: Path, patterns: list[str], recursive: bool) -> list[str]:
        seen: set[Path] = set()
        for pattern in patterns:
            matches = directory.rglob(pattern) if recursive else directory.glob(pattern)
            for match in matches:
                if match.is_file() and not self.ignore_filter.should_ignore_file(match):
                    seen.add(match)
        return sorted(str(p) for p in seen)

    def list_projects(self) -> list[str]:
        """All project files under the base directory."""
        return self._collect(self._base_dir, [self.config.files.project_pattern], recursive=True)

    def list_projects_in_directory(self, directory: str | Path) -> list[str]:
        """All project files under ``directory``."""
        path = self._require_directory(directory)
        return self._collect(path, [self.config.files.project_pattern], recursive=True)

    def list_solutions(self) -> list[str]:
        """All solution files under the base directory."""
        return self._collect(self._base_dir, [self.config.files.solution_pattern], recursive=True)

    def list_files(self, project_dir: str | Path) -> list[str]:
        """Source files directly inside ``project_dir``."""
        path = self._require_directory(project_dir)
        return self._collect(path, self.source_patterns, recursive=False)

    def list_source_files(self, project_dir: str | Path | None = None) -> list[str]:
        """Source files anywhere under ``project_dir`` (base directory by default)."""
        path = self._require_directory(project_dir) if project_dir else self._base_dir
        return self._collect(path, self.source_patterns, recursive=True)

    def open_file(self, file_path: str | Path) -> str:
        """
        Read a file inside the base directory.

        Content longer than ``files.max_open_chars`` is cut and suffixed
        with a truncation marker.

        Raises:
            PathAccessError: If the file is missing, outside the base
                directory, or matches an ignore pattern.
        """
        path = Path(file_path)
        if not path.is_file():
            raise PathAccessError(f"File not found: {file_path}")
        if not self.is_path_safe(path):
            raise PathAccessError(f"Access to this file is not allowed: {file_path}")
        if self.ignore_filter.should_ignore_file(path):
            raise PathAccessError(f"This file type is restricted: {file_path}")

        content = path.read_text(encoding="utf-8-sig", errors="replace")
        limit = self.config.files.max_open_chars
        if len(content) > limit:
            content = content[:limit] + TRUNCATION_MARKER
        return content

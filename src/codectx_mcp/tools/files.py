"""
File tools for codectx-mcp.

These tools browse the workspace under the base directory:
- list_projects / list_projects_in_dir / list_solutions
- list_files / list_source_files
- open_file
- set_base_directory / get_base_directory
"""

import logging
from uuid import UUID

from codectx.main import CodeContextService
from codectx.workspace.files import TRUNCATION_MARKER

from codectx_mcp.schemas.inputs import (
    DirectoryInput,
    NoArgsInput,
    OpenFileInput,
    ProjectPathInput,
)
from codectx_mcp.schemas.outputs import (
    BaseDirectoryOutput,
    FileContentOutput,
    PathListOutput,
)

logger = logging.getLogger(__name__)


class FileTools:
    """Workspace browsing confined to the base directory."""

    def __init__(self, service: CodeContextService) -> None:
        self.service = service

    @property
    def workspace(self):
        return self.service.workspace

    def _paths(self, request_id: UUID, paths: list[str]) -> PathListOutput:
        return PathListOutput(request_id=request_id, paths=paths, total=len(paths))

    async def list_projects(self, input_data: NoArgsInput, request_id: UUID) -> PathListOutput:
        """List all project files under the base directory."""
        return self._paths(request_id, self.workspace.list_projects())

    async def list_projects_in_dir(
        self, input_data: DirectoryInput, request_id: UUID
    ) -> PathListOutput:
        """List project files under a specific directory."""
        return self._paths(
            request_id, self.workspace.list_projects_in_directory(input_data.directory)
        )

    async def list_solutions(self, input_data: NoArgsInput, request_id: UUID) -> PathListOutput:
        """List all solution files under the base directory."""
        return self._paths(request_id, self.workspace.list_solutions())

    async def list_files(self, input_data: ProjectPathInput, request_id: UUID) -> PathListOutput:
        """List source files directly inside a project directory."""
        return self._paths(request_id, self.workspace.list_files(input_data.project_path))

    async def list_source_files(
        self, input_data: ProjectPathInput, request_id: UUID
    ) -> PathListOutput:
        """List source files anywhere under a project directory."""
        return self._paths(request_id, self.workspace.list_source_files(input_data.project_path))

    async def open_file(self, input_data: OpenFileInput, request_id: UUID) -> FileContentOutput:
        """
        Read a file inside the base directory.

        Args:
            input_data: Validated input parameters
            request_id: Unique request identifier

        Returns:
            FileContentOutput with the (possibly truncated) content
        """
        logger.info(f"open_file: {input_data.file_path}")
        content = self.workspace.open_file(input_data.file_path)
        limit = self.service.config.files.max_open_chars

        return FileContentOutput(
            request_id=request_id,
            file_path=input_data.file_path,
            content=content,
            truncated=len(content) == limit + len(TRUNCATION_MARKER)
            and content.endswith(TRUNCATION_MARKER),
        )

    async def set_base_directory(
        self, input_data: DirectoryInput, request_id: UUID
    ) -> BaseDirectoryOutput:
        """Change the base directory and drop the semantic index."""
        path = await self.service.set_base_directory(input_data.directory)
        logger.info(f"Base directory set to {path}")
        return BaseDirectoryOutput(request_id=request_id, base_directory=str(path), exists=True)

    async def get_base_directory(
        self, input_data: NoArgsInput, request_id: UUID
    ) -> BaseDirectoryOutput:
        """Report the current base directory."""
        base_dir = self.service.base_dir
        return BaseDirectoryOutput(
            request_id=request_id,
            base_directory=str(base_dir),
            exists=base_dir.is_dir(),
        )

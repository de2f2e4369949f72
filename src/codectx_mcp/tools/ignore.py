"""
Ignore pattern tools for codectx-mcp.

User patterns are persisted in the state file and apply to file listings,
text search and semantic indexing.
"""

import logging
from uuid import UUID

from codectx.main import CodeContextService

from codectx_mcp.schemas.inputs import IgnorePatternsInput, NoArgsInput
from codectx_mcp.schemas.outputs import (
    AddIgnorePatternsOutput,
    ClearIgnorePatternsOutput,
    IgnorePatternsOutput,
    RemoveIgnorePatternsOutput,
    StateFileLocationOutput,
)

logger = logging.getLogger(__name__)


class IgnoreTools:
    """Manage default and user ignore patterns."""

    def __init__(self, service: CodeContextService) -> None:
        self.service = service

    @property
    def ignore_filter(self):
        return self.service.ignore_filter

    async def add_ignore_patterns(
        self, input_data: IgnorePatternsInput, request_id: UUID
    ) -> AddIgnorePatternsOutput:
        """Add user patterns; invalid ones are reported, not raised."""
        update = self.ignore_filter.add_patterns(input_data.patterns)
        logger.info(f"add_ignore_patterns: added={update.added}, invalid={update.invalid}")
        return AddIgnorePatternsOutput(
            request_id=request_id,
            added=update.added,
            invalid=update.invalid,
            all_patterns=update.all_patterns,
        )

    async def remove_ignore_patterns(
        self, input_data: IgnorePatternsInput, request_id: UUID
    ) -> RemoveIgnorePatternsOutput:
        """Remove user patterns. Default patterns are reported as skipped."""
        removal = self.ignore_filter.remove_patterns(input_data.patterns)
        return RemoveIgnorePatternsOutput(
            request_id=request_id,
            default_patterns=removal.default_patterns,
            user_patterns=removal.user_patterns,
            all_patterns=removal.all_patterns,
            removed=removal.removed,
            not_found=removal.not_found,
            default_skipped=removal.default_skipped,
        )

    async def clear_ignore_patterns(
        self, input_data: NoArgsInput, request_id: UUID
    ) -> ClearIgnorePatternsOutput:
        """Remove every user pattern."""
        return ClearIgnorePatternsOutput(
            request_id=request_id,
            user_patterns=self.ignore_filter.clear_patterns(),
        )

    async def get_ignore_patterns(
        self, input_data: NoArgsInput, request_id: UUID
    ) -> IgnorePatternsOutput:
        """Return default, user and combined patterns."""
        patterns = self.ignore_filter.get_patterns()
        return IgnorePatternsOutput(
            request_id=request_id,
            default_patterns=patterns.default_patterns,
            user_patterns=patterns.user_patterns,
            all_patterns=patterns.all_patterns,
        )

    async def get_state_file_location(
        self, input_data: NoArgsInput, request_id: UUID
    ) -> StateFileLocationOutput:
        """Report where user patterns are stored."""
        return StateFileLocationOutput(
            request_id=request_id,
            state_file_path=str(self.ignore_filter.state_file_location),
        )

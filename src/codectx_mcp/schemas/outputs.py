"""
Pydantic models for all tool outputs.

These models define the structure of tool responses including
success envelopes, error envelopes, and domain-specific output types.
"""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field


# =============================================================================
# Common Types
# =============================================================================


class ErrorInfo(BaseModel):
    """Structured error information."""

    code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    retryable: bool = Field(default=False, description="Whether the operation can be retried")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Additional error details"
    )


# =============================================================================
# Response Envelopes
# =============================================================================


class SuccessEnvelope(BaseModel):
    """Base success response envelope."""

    ok: Literal[True] = Field(default=True, description="Indicates success")
    request_id: UUID = Field(..., description="Unique request identifier for tracing")


class ErrorEnvelope(BaseModel):
    """Error response envelope."""

    ok: Literal[False] = Field(default=False, description="Indicates failure")
    error: ErrorInfo = Field(..., description="Error details")
    request_id: UUID = Field(..., description="Unique request identifier for tracing")


# =============================================================================
# Search Outputs
# =============================================================================


class SemanticSearchHit(BaseModel):
    """A single semantic search result."""

    file_path: str = Field(..., description="Path relative to the base directory")
    start_line: int = Field(..., ge=1, description="Starting line number (1-indexed)")
    end_line: int = Field(..., ge=1, description="Ending line number (1-indexed)")
    content: str = Field(..., description="Snippet text formatted for display")
    score: float = Field(..., description="Cosine similarity as a percentage, one decimal")
    scope: str = Field(default="", description="Dotted namespace/type/member path")


class SemanticSearchOutput(SuccessEnvelope):
    """Output schema for semantic_search tool."""

    results: list[SemanticSearchHit] = Field(default_factory=list)
    embedding_available: bool = Field(
        ..., description="False when embedding credentials are not configured"
    )


class SearchCodeOutput(SuccessEnvelope):
    """Output schema for search_code tool."""

    matches: list[str] = Field(
        default_factory=list, description="Matches as '<path>:<line>: <text>'"
    )
    total: int = Field(..., ge=0)


# =============================================================================
# File Outputs
# =============================================================================


class PathListOutput(SuccessEnvelope):
    """Output schema for listing tools."""

    paths: list[str] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class FileContentOutput(SuccessEnvelope):
    """Output schema for open_file tool."""

    file_path: str
    content: str
    truncated: bool = Field(default=False)


class BaseDirectoryOutput(SuccessEnvelope):
    """Output schema for set_base_directory and get_base_directory tools."""

    base_directory: str
    exists: bool


# =============================================================================
# Ignore Pattern Outputs
# =============================================================================


class IgnorePatternsOutput(SuccessEnvelope):
    """Output schema for get_ignore_patterns tool."""

    default_patterns: list[str] = Field(default_factory=list)
    user_patterns: list[str] = Field(default_factory=list)
    all_patterns: list[str] = Field(default_factory=list)


class AddIgnorePatternsOutput(SuccessEnvelope):
    """Output schema for add_ignore_patterns tool."""

    added: list[str] = Field(default_factory=list)
    invalid: list[str] = Field(default_factory=list)
    all_patterns: list[str] = Field(default_factory=list)


class RemoveIgnorePatternsOutput(SuccessEnvelope):
    """Output schema for remove_ignore_patterns tool."""

    default_patterns: list[str] = Field(default_factory=list)
    user_patterns: list[str] = Field(default_factory=list)
    all_patterns: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    not_found: list[str] = Field(default_factory=list)
    default_skipped: list[str] = Field(default_factory=list)


class ClearIgnorePatternsOutput(SuccessEnvelope):
    """Output schema for clear_ignore_patterns tool."""

    user_patterns: list[str] = Field(default_factory=list)


class StateFileLocationOutput(SuccessEnvelope):
    """Output schema for get_state_file_location tool."""

    state_file_path: str


# =============================================================================
# Admin Outputs
# =============================================================================


class HelloOutput(SuccessEnvelope):
    """Output schema for hello tool."""

    message: str


class AdminPingOutput(SuccessEnvelope):
    """Output schema for admin_ping tool."""

    echo: str | None = Field(default=None, description="Echoed string")
    server_version: str = Field(..., description="Server version")
    server_name: str = Field(default="codectx", description="Server name")
    uptime_seconds: float = Field(..., ge=0.0, description="Server uptime in seconds")
    diagnostics: dict[str, Any] | None = Field(
        default=None, description="Server diagnostics if requested"
    )

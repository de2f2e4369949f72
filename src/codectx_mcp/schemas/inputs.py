"""
Pydantic models for all tool inputs.

These models provide strict validation for tool parameters with
appropriate bounds and constraints.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NoArgsInput(BaseModel):
    """Input schema for tools that take no parameters."""

    model_config = ConfigDict(extra="ignore")


class SemanticSearchInput(BaseModel):
    """Input schema for semantic_search tool."""

    query: str = Field(
        ...,
        min_length=1,
        max_length=4000,
        description="Natural-language description of the code to find",
    )
    top_k: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Maximum number of results (0-50)",
    )

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        """Reject whitespace-only queries."""
        if not v.strip():
            raise ValueError("query must not be blank")
        return v


class SearchCodeInput(BaseModel):
    """Input schema for search_code tool."""

    text: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Text to search for (case-insensitive substring match)",
    )


class DirectoryInput(BaseModel):
    """Input schema for tools that operate on a directory."""

    directory: str = Field(
        ...,
        min_length=1,
        description="Absolute path of a directory inside the base directory",
    )


class ProjectPathInput(BaseModel):
    """Input schema for list_files and list_source_files tools."""

    project_path: str = Field(
        ...,
        min_length=1,
        description="Absolute path of the project directory",
    )


class OpenFileInput(BaseModel):
    """Input schema for open_file tool."""

    file_path: str = Field(
        ...,
        min_length=1,
        description="Absolute path of the file to read",
    )


class IgnorePatternsInput(BaseModel):
    """Input schema for add_ignore_patterns and remove_ignore_patterns tools."""

    patterns: list[str] = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Glob patterns such as '*.generated.cs' or '**/Migrations/**'",
    )


class AdminPingInput(BaseModel):
    """Input schema for admin_ping tool."""

    echo: str | None = Field(
        default=None,
        max_length=256,
        description="Optional string to echo back",
    )
    include_diagnostics: bool = Field(
        default=False,
        description="Include index and embedding diagnostics in response",
    )

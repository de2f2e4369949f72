"""
Configuration module for codectx.

Provides strongly-typed configuration with pydantic, supporting both
file-based and environment variable configuration.
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INDEX_IGNORE_PATTERNS = [
    "**/obj/**",
    "**/bin/**",
    "**/*.generated.cs",
    "**/*.designer.cs",
    "**/*.g.cs",
    "**/*.AssemblyInfo.cs",
]

DOTNET_SOURCE_PATTERNS = [
    "*.cs",
    "*.vb",
    "*.fs",
    "*.fsx",
    "*.fsi",
    "*.cshtml",
    "*.vbhtml",
    "*.razor",
]


class EmbeddingConfig(BaseModel):
    """Embedding provider configuration."""

    endpoint: str | None = Field(
        default=None,
        description="Azure OpenAI endpoint (falls back to AZURE_OPENAI_ENDPOINT)",
    )
    api_key: str | None = Field(
        default=None,
        description="Azure OpenAI API key (falls back to AZURE_OPENAI_API_KEY)",
    )
    deployment: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model deployment name",
    )
    api_version: str = Field(
        default="2024-02-01",
        description="Azure OpenAI API version",
    )
    dimension: int = Field(
        default=1536,
        ge=8,
        le=8192,
        description="Embedding dimension; vectors returned by the deployment must match",
    )
    batch_size: int = Field(
        default=2048,
        ge=1,
        le=2048,
        description="Maximum inputs per embeddings request",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Request timeout for embedding calls",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Client-side retries for transient failures",
    )
    cache_size: int = Field(
        default=10000,
        ge=0,
        le=1000000,
        description="Content-hash embedding cache entries (0 disables)",
    )

    @property
    def has_credentials(self) -> bool:
        """True when both endpoint and key are set."""
        return bool(self.endpoint) and bool(self.api_key)


class ChunkingConfig(BaseModel):
    """Chunking configuration."""

    chunk_size: int = Field(
        default=200,
        ge=1,
        le=10000,
        description="Target chunk size in lines",
    )
    overlap: int = Field(
        default=20,
        ge=0,
        le=1000,
        description="Lines carried over from the previous chunk",
    )

    @model_validator(mode="after")
    def check_overlap(self) -> "ChunkingConfig":
        if self.overlap >= self.chunk_size:
            raise ValueError("overlap must be smaller than chunk_size")
        return self


class SearchConfig(BaseModel):
    """Semantic search configuration."""

    default_top_k: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Number of results when the caller does not ask",
    )
    max_top_k: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Upper bound accepted from tool callers",
    )


class IgnoreConfig(BaseModel):
    """Ignore pattern configuration."""

    index_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INDEX_IGNORE_PATTERNS),
        description="Full-path wildcard patterns excluded from semantic indexing",
    )
    state_file: Path | None = Field(
        default=None,
        description="JSON file holding user patterns (defaults to <data_dir>/ignore_patterns.json)",
    )


class FilesConfig(BaseModel):
    """Workspace file access configuration."""

    source_patterns: list[str] = Field(
        default_factory=lambda: list(DOTNET_SOURCE_PATTERNS),
        description="File name globs treated as source files",
    )
    project_pattern: str = Field(default="*.csproj")
    solution_pattern: str = Field(default="*.sln")
    max_open_chars: int = Field(
        default=100_000,
        ge=1,
        description="open_file truncates content beyond this many characters",
    )


class Config(BaseSettings):
    """
    Main codectx configuration.

    Can be configured via:
    1. Configuration file (codectx.toml, codectx.yaml or JSON)
    2. Environment variables with CODECTX_ prefix
    3. Programmatic overrides
    """

    model_config = SettingsConfigDict(
        env_prefix="CODECTX_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    base_dir: Path = Field(
        default_factory=lambda: Path.cwd(),
        description="Directory all file access is restricted to",
    )
    data_dir: Path = Field(
        default=Path(".codectx"),
        description="State directory (relative to base_dir)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    ignore: IgnoreConfig = Field(default_factory=IgnoreConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)

    @field_validator("base_dir", mode="before")
    @classmethod
    def resolve_base_dir(cls, v: Path | str) -> Path:
        """Resolve base directory to absolute path."""
        path = Path(v) if isinstance(v, str) else v
        return path.resolve()

    @model_validator(mode="after")
    def apply_azure_environment(self) -> "Config":
        """Fill embedding credentials from the standard Azure variables."""
        if not self.embedding.endpoint:
            self.embedding.endpoint = os.environ.get("AZURE_OPENAI_ENDPOINT") or None
        if not self.embedding.api_key:
            self.embedding.api_key = os.environ.get("AZURE_OPENAI_API_KEY") or None
        return self

    @property
    def absolute_data_dir(self) -> Path:
        """Get absolute path to data directory."""
        if self.data_dir.is_absolute():
            return self.data_dir
        return self.base_dir / self.data_dir

    @property
    def ignore_state_path(self) -> Path:
        """Get absolute path to the persisted user ignore patterns."""
        if self.ignore.state_file is not None:
            return self.ignore.state_file
        return self.absolute_data_dir / "ignore_patterns.json"

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from a TOML, YAML or JSON file."""
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        content = path.read_text()

        if suffix == ".toml":
            data = tomllib.loads(content)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif suffix == ".json":
            data = json.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

        return cls(**data)


def load_config(
    config_path: Path | None = None,
    base_dir: Path | None = None,
) -> Config:
    """
    Load configuration with automatic discovery.

    Priority:
    1. Explicit config_path if provided
    2. codectx.toml in base_dir
    3. .codectx/config.toml in base_dir
    4. YAML equivalents of the above
    5. Default configuration
    """
    root = (base_dir or Path.cwd()).resolve()

    if config_path and config_path.exists():
        config = Config.from_file(config_path)
        return config.model_copy(update={"base_dir": root})

    candidates = [
        root / "codectx.toml",
        root / ".codectx" / "config.toml",
        root / "codectx.yaml",
        root / ".codectx" / "config.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            config = Config.from_file(candidate)
            return config.model_copy(update={"base_dir": root})

    return Config(base_dir=root)

"""Exception hierarchy shared by the engine, service and MCP layers."""

from __future__ import annotations


class CodeCtxError(Exception):
    """Base exception for codectx errors."""

    pass


class ConfigurationError(CodeCtxError):
    """Raised when configuration is invalid."""

    pass


class EmbeddingUnavailableError(CodeCtxError):
    """Raised by an embedding backend that cannot serve requests."""

    pass


class OperationCancelledError(CodeCtxError):
    """Raised when a caller-requested cancellation aborts index or search."""

    pass


class PathAccessError(CodeCtxError):
    """Raised for missing paths, paths outside the base directory, or restricted files."""

    pass


class InvalidPatternError(CodeCtxError):
    """Raised when an ignore pattern fails validation."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid ignore pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason

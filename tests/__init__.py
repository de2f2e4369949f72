"""
codectx Test Suite.

Tests for the semantic indexing engine and its collaborators:
- Unit tests for individual components
- Integration tests for the service, CLI and MCP server
"""

"""
codectx Main Entry Point.

Provides the CodeContextService orchestration class and CLI interface.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, AsyncIterator

import click
import structlog
from rich.console import Console
from rich.table import Table

from codectx.config import Config, load_config
from codectx.engine import SemanticSearchEngine
from codectx.indexing.embedder import EmbeddingProvider
from codectx.indexing.ignore_parser import IgnoreFilter
from codectx.indexing.indexer import IndexStats
from codectx.retrieval.formatting import format_code_content
from codectx.retrieval.ranker import display_score
from codectx.retrieval.scope import resolve_scope
from codectx.workspace.files import WorkspaceFiles
from codectx.workspace.text_search import search_code

logger = structlog.get_logger(__name__)


@dataclass
class SemanticSearchResult:
    """A semantic search hit prepared for display."""

    file_path: str
    start_line: int
    end_line: int
    content: str
    score: float
    scope: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class CodeContextService:
    """
    Main service wiring the ignore filter, workspace and search engine.

    Semantic search indexes every source file under the base directory the
    first time it is used; later calls reuse that index.
    """

    def __init__(
        self,
        config: Config | None = None,
        provider: EmbeddingProvider | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            config: Configuration instance. Uses default if not provided.
            provider: Embedding provider override; built from config if omitted.
        """
        self.config = config or Config()
        self.ignore_filter = IgnoreFilter(self.config)
        self.workspace = WorkspaceFiles(self.config, self.ignore_filter)
        self.engine = SemanticSearchEngine(self.config, self.ignore_filter, provider=provider)

        self._indexed = False
        self._index_lock = asyncio.Lock()
        self._initialized = False

        logger.info(
            "codectx service created",
            base_dir=str(self.config.base_dir),
            embedding_available=self.engine.is_available,
        )

    @property
    def base_dir(self) -> Path:
        return self.workspace.base_dir

    @property
    def embedding_available(self) -> bool:
        return self.engine.is_available

    async def initialize(self) -> None:
        """Initialize all components."""
        if self._initialized:
            return
        await self.engine.initialize()
        self._initialized = True
        logger.info("codectx service initialized", embedding_available=self.engine.is_available)

    async def shutdown(self) -> None:
        """Release the embedding backend."""
        await self.engine.close()
        self._initialized = False
        logger.info("codectx service shutdown complete")

    @asynccontextmanager
    async def session(self) -> AsyncIterator["CodeContextService"]:
        """Context manager for service lifecycle."""
        try:
            await self.initialize()
            yield self
        finally:
            await self.shutdown()

    async def ensure_indexed(self, cancel_event: asyncio.Event | None = None) -> IndexStats | None:
        """
        Index all source files under the base directory once.

        Returns:
            Statistics of the indexing run, or None if it already happened.
        """
        async with self._index_lock:
            if self._indexed:
                return None

            files = self.workspace.list_source_files()
            logger.info("Starting initial indexing", base_dir=str(self.base_dir), files=len(files))
            stats = await self.engine.index(files, cancel_event=cancel_event)
            self._indexed = True
            return stats

    async def index_files(
        self,
        paths: list[str | Path],
        cancel_event: asyncio.Event | None = None,
    ) -> IndexStats:
        """Index specific files (already indexed files are skipped)."""
        return await self.engine.index(paths, cancel_event=cancel_event)

    async def semantic_search(
        self,
        query: str,
        top_k: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[SemanticSearchResult]:
        """
        Search indexed code by meaning.

        Args:
            query: Natural-language query.
            top_k: Maximum results (``search.default_top_k`` if None).
            cancel_event: Cancellation signal for indexing and search.

        Returns:
            Results best first. Empty when nothing matches or when the
            embedding provider is unavailable.
        """
        await self.ensure_indexed(cancel_event=cancel_event)

        k = self.config.search.default_top_k if top_k is None else top_k
        ranked = await self.engine.search(query, top_k=k, cancel_event=cancel_event)

        return [
            SemanticSearchResult(
                file_path=self.workspace.relative_path(hit.snippet.file_path),
                start_line=hit.snippet.start_line,
                end_line=hit.snippet.end_line,
                content=format_code_content(hit.snippet.content),
                score=display_score(hit.score),
                scope=resolve_scope(hit.snippet.content),
            )
            for hit in ranked
        ]

    def search_code(self, text: str) -> list[str]:
        """Case-insensitive text search across source files."""
        return search_code(self.workspace, text)

    async def set_base_directory(self, directory: str | Path) -> Path:
        """
        Point the service at a new base directory.

        The semantic index is dropped and rebuilt on the next search.
        """
        path = self.workspace.set_base_directory(directory)
        async with self._index_lock:
            await self.engine.reset()
            self._indexed = False
        return path

    def get_stats(self) -> dict[str, Any]:
        """Get service statistics."""
        return {
            "base_dir": str(self.base_dir),
            "indexed": self._indexed,
            "engine": self.engine.get_stats(),
            "ignore_state_file": str(self.ignore_filter.state_file_location),
        }


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with a level filter."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )


# CLI Implementation
@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--base-dir",
    "-d",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Base directory (defaults to the current directory)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def cli(ctx: click.Context, config: Path | None, base_dir: Path | None, verbose: bool) -> None:
    """codectx - semantic code search for .NET workspaces."""
    ctx.ensure_object(dict)
    configure_logging("DEBUG" if verbose else "INFO")
    ctx.obj["config"] = load_config(config_path=config, base_dir=base_dir)


@cli.command()
@click.pass_context
def index(ctx: click.Context) -> None:
    """Index the base directory and report what was embedded."""
    config = ctx.obj["config"]

    async def run_index() -> None:
        service = CodeContextService(config)
        async with service.session():
            if not service.embedding_available:
                click.echo("Semantic search unavailable: embedding credentials not configured", err=True)
                return
            stats = await service.ensure_indexed()
            if stats is None:
                return
            click.echo(f"Indexed {stats.indexed} files")
            click.echo(f"Stored {stats.snippets} snippets")
            if stats.errors > 0:
                click.echo(f"Errors: {stats.errors}", err=True)

    asyncio.run(run_index())


@cli.command()
@click.argument("query")
@click.option("--limit", "-n", type=int, default=None, help="Number of results")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int | None) -> None:
    """Semantic search over the base directory."""
    config = ctx.obj["config"]

    async def run_search() -> None:
        service = CodeContextService(config)
        async with service.session():
            results = await service.semantic_search(query, top_k=limit)

        if not results:
            click.echo("No results", err=True)
            return

        console = Console()
        table = Table(title=f"Results for: {query}")
        table.add_column("Score", justify="right", style="green")
        table.add_column("Location", style="cyan")
        table.add_column("Scope", style="magenta")
        for result in results:
            table.add_row(
                f"{result.score:.1f}",
                f"{result.file_path}:{result.start_line}-{result.end_line}",
                result.scope,
            )
        console.print(table)

    asyncio.run(run_search())


@cli.command()
@click.argument("text")
@click.pass_context
def grep(ctx: click.Context, text: str) -> None:
    """Case-insensitive text search across source files."""
    service = CodeContextService(ctx.obj["config"])
    for line in service.search_code(text):
        click.echo(line)


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show service statistics."""
    config = ctx.obj["config"]

    async def run_stats() -> None:
        service = CodeContextService(config)
        async with service.session():
            stats = service.get_stats()
        click.echo("codectx Statistics")
        click.echo("=" * 40)
        for key, value in stats.items():
            if isinstance(value, dict):
                click.echo(f"\n{key}:")
                for k, v in value.items():
                    click.echo(f"  {k}: {v}")
            else:
                click.echo(f"{key}: {value}")

    asyncio.run(run_stats())


@cli.group()
def ignore() -> None:
    """Manage user ignore patterns."""


@ignore.command("list")
@click.pass_context
def ignore_list(ctx: click.Context) -> None:
    """Show default and user ignore patterns."""
    patterns = IgnoreFilter(ctx.obj["config"]).get_patterns()
    for pattern in patterns.default_patterns:
        click.echo(f"{pattern}  (default)")
    for pattern in patterns.user_patterns:
        click.echo(pattern)


@ignore.command("add")
@click.argument("patterns", nargs=-1, required=True)
@click.pass_context
def ignore_add(ctx: click.Context, patterns: tuple[str, ...]) -> None:
    """Add user ignore patterns."""
    update = IgnoreFilter(ctx.obj["config"]).add_patterns(list(patterns))
    for pattern in update.added:
        click.echo(f"Added {pattern}")
    for pattern in update.invalid:
        click.echo(f"Invalid pattern: {pattern}", err=True)


@ignore.command("remove")
@click.argument("patterns", nargs=-1, required=True)
@click.pass_context
def ignore_remove(ctx: click.Context, patterns: tuple[str, ...]) -> None:
    """Remove user ignore patterns."""
    removal = IgnoreFilter(ctx.obj["config"]).remove_patterns(list(patterns))
    for pattern in removal.removed:
        click.echo(f"Removed {pattern}")
    for pattern in removal.not_found:
        click.echo(f"Not found: {pattern}", err=True)
    for pattern in removal.default_skipped:
        click.echo(f"Cannot remove default pattern: {pattern}", err=True)


@ignore.command("clear")
@click.pass_context
def ignore_clear(ctx: click.Context) -> None:
    """Remove all user ignore patterns."""
    IgnoreFilter(ctx.obj["config"]).clear_patterns()
    click.echo("Cleared user ignore patterns")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()

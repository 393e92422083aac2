"""Command-line interface for MCP Grounding."""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .config.logging import setup_logging
from .config.settings import Settings
from .core.exceptions import GroundingError
from .core.service import RetrievalService
from .mcp.server import GroundingMCPServer

app = typer.Typer(
    name="mcp-grounding",
    help="MCP Grounding - retrieval-augmented knowledge grounding for conversational agents",
    add_completion=False,
)
console = Console()


def _load_settings(debug: bool = False) -> Settings:
    settings = Settings()
    if debug:
        settings.DEBUG = True
        settings.LOG_LEVEL = "DEBUG"
    setup_logging(settings)
    return settings


@app.command("ingest")
def ingest_sources(
    paths: List[Path] = typer.Argument(..., help="Files or directories to ingest"),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="Glob pattern to skip (repeatable)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Ingest sources into their persisted indexes."""
    settings = _load_settings(debug)
    source_paths = [str(path) for path in paths]

    async def run() -> None:
        service = RetrievalService(settings)
        try:
            report = await service.initialize(source_paths, exclude or None)
        finally:
            await service.close()

        if not report.success:
            console.print(f"[red]Ingestion failed: {report.error}[/red]")
            raise typer.Exit(1)

        table = Table(title="Ingestion")
        table.add_column("Source")
        table.add_column("Index")
        table.add_column("Documents", justify="right")
        table.add_column("Embedded", justify="right")
        table.add_column("Failed", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Status")
        for item in report.reports:
            status = "[green]ok[/green]" if item.success else f"[red]{item.error}[/red]"
            if item.cancelled:
                status = "[yellow]stopped[/yellow]"
            table.add_row(
                item.source_path,
                item.index_name or "",
                str(item.documents),
                str(item.chunks_embedded),
                str(item.chunks_failed),
                str(item.total_chunks),
                status,
            )
        console.print(table)

        if report.failed_sources:
            raise typer.Exit(1)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Ingestion stopped by user[/yellow]")


@app.command("search")
def search(
    query: str = typer.Argument(..., help="Text to search for"),
    top_k: Optional[int] = typer.Option(None, "--top-k", "-k", help="Maximum number of passages"),
    min_score: Optional[float] = typer.Option(None, "--min-score", "-s", help="Minimum cosine similarity"),
    source: Optional[str] = typer.Option(None, "--source", help="Only search this source's index"),
) -> None:
    """Search the persisted indexes of the configured sources."""
    settings = _load_settings()

    async def run() -> None:
        service = RetrievalService(settings)
        try:
            report = await service.initialize(ingest=False)
            if not report.success:
                console.print(f"[red]Search unavailable: {report.error}[/red]")
                raise typer.Exit(1)
            hits = await service.query(query, top_k=top_k, min_score=min_score, source=source)
        finally:
            await service.close()

        if not hits:
            console.print("[yellow]No relevant passages found[/yellow]")
            return

        for hit in hits:
            console.print(f"[bold]#{hit.rank}[/bold] score={hit.score:.3f} source={hit.source or hit.index_name}")
            console.print(hit.text)
            console.print()

    try:
        asyncio.run(run())
    except GroundingError as e:
        console.print(f"[red]Search failed: {e}[/red]")
        sys.exit(1)


@app.command("stats")
def show_stats() -> None:
    """Show statistics of the persisted indexes of the configured sources."""
    settings = _load_settings()

    async def run() -> None:
        service = RetrievalService(settings)
        await service.load_indexes(settings.RAG_SOURCE_PATHS)

        table = Table(title="Indexes")
        table.add_column("Index")
        table.add_column("Source")
        table.add_column("Chunks", justify="right")
        table.add_column("Dimension", justify="right")
        table.add_column("File")
        for stats in service.get_stats():
            table.add_row(
                stats.index_name,
                stats.source_path or "",
                str(stats.total_chunks),
                str(stats.dimension or "-"),
                str(stats.index_path),
            )
        console.print(table)

    asyncio.run(run())


@app.command("serve")
def serve(
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Start the MCP server on stdio."""
    try:
        settings = Settings()
        if debug:
            settings.DEBUG = True
            settings.LOG_LEVEL = "DEBUG"

        server = GroundingMCPServer(settings)
        asyncio.run(server.run())

    except KeyboardInterrupt:
        pass
    except Exception as e:
        Console(stderr=True).print(f"[red]Error starting server: {e}[/red]")
        sys.exit(1)


@app.command("init")
def init_project(
    directory: Path = typer.Argument(Path("."), help="Directory to initialize"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing files"),
) -> None:
    """Initialize a new MCP Grounding project."""
    directory = directory.resolve()

    if not directory.exists():
        directory.mkdir(parents=True)

    config_file = directory / ".env"
    index_dir = directory / "data" / "indexes"

    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration file already exists: {config_file}[/yellow]")
        console.print("Use --force to overwrite")
        return

    index_dir.mkdir(parents=True, exist_ok=True)

    config_content = """# MCP Grounding Configuration
DEBUG=false
LOG_LEVEL=INFO
LOG_DIRECTORY=./logs

# Indexes
INDEX_DIRECTORY=./data/indexes
RAG_SOURCE_PATHS=["./docs"]
RAG_EXCLUDE_PATTERNS=["**/temp/**", "**/*.log"]

# Chunking
CHUNK_SIZE=100
CHUNK_OVERLAP=50

# Embeddings (ollama, api or local)
EMBEDDING_PROVIDER=ollama
EMBEDDING_MODEL=nomic-embed-text
EMBEDDING_API_BASE=http://localhost:11434

# Retrieval
MAX_RAG_RESULTS=5
RAG_SIMILARITY_THRESHOLD=0.7
"""

    config_file.write_text(config_content)
    console.print(f"[green]Initialized MCP Grounding project in {directory}[/green]")
    console.print(f"Configuration file: {config_file}")
    console.print(f"Index directory: {index_dir}")


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from . import __version__
    console.print(f"MCP Grounding version {__version__}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

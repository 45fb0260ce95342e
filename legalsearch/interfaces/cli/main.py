"""
CLI Main - Typer-based command-line interface.

Usage:
    legalsearch search "rescisión de contrato"
    legalsearch search "despido" --semantic --limit 5
    legalsearch analytics top-queries --days 7
    legalsearch telemetry recent
    legalsearch init
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from legalsearch.config import LegalSearchError, configure_logging, get_settings

app = typer.Typer(
    name="legalsearch",
    help="LegalSearch - Semantic and hybrid search over legal documents",
    add_completion=False,
)
analytics_app = typer.Typer(help="Search analytics reports", no_args_is_help=True)
telemetry_app = typer.Typer(help="Search telemetry", no_args_is_help=True)
app.add_typer(analytics_app, name="analytics")
app.add_typer(telemetry_app, name="telemetry")

console = Console()


@app.callback()
def setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging for every command."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_json)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    hybrid: bool = typer.Option(True, "--hybrid/--semantic", help="Hybrid or pure semantic search"),
    limit: int | None = typer.Option(
        None, "--limit", "-n", min=1, max=100, help="Number of results"
    ),
    weight: float | None = typer.Option(
        None, "--weight", "-w", min=0.0, max=1.0, help="Semantic weight (hybrid only)"
    ),
    document_type: str | None = typer.Option(None, "--type", "-t", help="Document type filter"),
    scope: str | None = typer.Option(None, "--scope", "-s", help="Scope filter"),
    no_keyword: bool = typer.Option(False, "--no-keyword", help="Skip keyword search"),
) -> None:
    """Search the legal document corpus."""
    asyncio.run(_search_async(query, hybrid, limit, weight, document_type, scope, no_keyword))


async def _search_async(
    query: str,
    hybrid: bool,
    limit: int | None,
    weight: float | None,
    document_type: str | None,
    scope: str | None,
    no_keyword: bool,
) -> None:
    """Async search implementation."""
    from legalsearch.domains.search import HybridSearchQuery, SemanticSearchQuery
    from legalsearch.interfaces import deps

    settings = get_settings()
    limit = limit or settings.search_default_limit

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Searching...", total=None)
            await deps.init_services()

            if hybrid:
                response = await deps.get_hybrid_search().search(
                    HybridSearchQuery(
                        query=query,
                        limit=limit,
                        semantic_weight=(
                            weight if weight is not None else settings.default_semantic_weight
                        ),
                        include_keyword_search=not no_keyword,
                        document_type=document_type,
                        scope=scope,
                    )
                )
            else:
                response = await deps.get_semantic_search().search(
                    SemanticSearchQuery(
                        query=query,
                        limit=limit,
                        similarity_threshold=settings.semantic_similarity_threshold,
                        document_type=document_type,
                        scope=scope,
                    )
                )
    except LegalSearchError as e:
        console.print(f"[red]Error:[/red] {e.message} [dim]({e.code.value})[/dim]")
        raise typer.Exit(1)
    finally:
        await deps.cleanup_services()

    console.print(
        f"\n[yellow]{response.search_type.title()} search:[/yellow] {query}  "
        f"[dim]{response.total} results in {response.execution_time_ms}ms[/dim]\n"
    )

    if not response.results:
        console.print(Panel("No documents matched.", style="yellow"))
        return

    table = Table(show_lines=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Document", style="cyan")
    table.add_column("Match", style="magenta")
    table.add_column("Relevance", justify="right", style="green")
    table.add_column("Similarity", justify="right")
    table.add_column("Excerpt")

    for i, result in enumerate(response.results, 1):
        doc = result.document
        label = f"{doc.title}\n[dim]{doc.document_number or doc.id} · {doc.document_type}[/dim]"
        table.add_row(
            str(i),
            label,
            result.match_type.value,
            f"{result.relevance_score:.3f}",
            f"{result.similarity_score:.3f}",
            result.excerpt or "",
        )

    console.print(table)


@analytics_app.command("top-queries")
def top_queries(
    limit: int = typer.Option(10, "--limit", "-n", help="Number of queries"),
    days: int | None = typer.Option(None, "--days", "-d", help="Last N days"),
    start_date: str | None = typer.Option(None, "--from", help="Start day (YYYY-MM-DD)"),
    end_date: str | None = typer.Option(None, "--to", help="End day (YYYY-MM-DD)"),
) -> None:
    """Most frequent queries."""
    asyncio.run(_query_report_async(limit, days, start_date, end_date, zero_results=False))


@analytics_app.command("zero-results")
def zero_results(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of queries"),
    days: int | None = typer.Option(None, "--days", "-d", help="Last N days"),
    start_date: str | None = typer.Option(None, "--from", help="Start day (YYYY-MM-DD)"),
    end_date: str | None = typer.Option(None, "--to", help="End day (YYYY-MM-DD)"),
) -> None:
    """Most frequent queries that returned nothing."""
    asyncio.run(_query_report_async(limit, days, start_date, end_date, zero_results=True))


async def _query_report_async(
    limit: int,
    days: int | None,
    start_date: str | None,
    end_date: str | None,
    zero_results: bool,
) -> None:
    from legalsearch.interfaces import deps

    await deps.init_services()
    try:
        analytics = deps.get_analytics_service()
        if zero_results:
            stats = await analytics.get_zero_result_queries(limit, days, start_date, end_date)
        else:
            stats = await analytics.get_top_queries(limit, days, start_date, end_date)
    finally:
        await deps.cleanup_services()

    table = Table(title="Zero-result queries" if zero_results else "Top queries")
    table.add_column("Query", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_column("Avg ms", justify="right")
    table.add_column("Avg results", justify="right")
    table.add_column("Last searched", style="dim")

    for row in stats:
        table.add_row(
            row.query,
            str(row.count),
            f"{row.avg_execution_time_ms:.0f}",
            f"{row.avg_total_results:.1f}",
            row.last_searched.strftime("%Y-%m-%d %H:%M") if row.last_searched else "",
        )

    console.print(table)


@analytics_app.command("top-documents")
def top_documents(
    limit: int = typer.Option(10, "--limit", "-n", help="Number of documents"),
    days: int | None = typer.Option(None, "--days", "-d", help="Last N days"),
    start_date: str | None = typer.Option(None, "--from", help="Start day (YYYY-MM-DD)"),
    end_date: str | None = typer.Option(None, "--to", help="End day (YYYY-MM-DD)"),
) -> None:
    """Most viewed documents."""
    asyncio.run(_top_documents_async(limit, days, start_date, end_date))


async def _top_documents_async(
    limit: int,
    days: int | None,
    start_date: str | None,
    end_date: str | None,
) -> None:
    from legalsearch.interfaces import deps

    await deps.init_services()
    try:
        stats = await deps.get_analytics_service().get_top_viewed_documents(
            limit, days, start_date, end_date
        )
    finally:
        await deps.cleanup_services()

    table = Table(title="Most viewed documents")
    table.add_column("Document", style="cyan")
    table.add_column("Number")
    table.add_column("Type")
    table.add_column("Views", justify="right", style="green")
    table.add_column("Last viewed", style="dim")

    for row in stats:
        table.add_row(
            row.title,
            row.document_number or "",
            row.document_type or "",
            str(row.view_count),
            row.last_viewed.strftime("%Y-%m-%d %H:%M") if row.last_viewed else "",
        )

    console.print(table)


@analytics_app.command("history")
def history(
    query: str = typer.Argument(..., help="Query to look up"),
    days: int | None = typer.Option(None, "--days", "-d", help="Last N days"),
) -> None:
    """Every recorded execution of a query."""
    asyncio.run(_history_async(query, days))


async def _history_async(query: str, days: int | None) -> None:
    from legalsearch.interfaces import deps

    await deps.init_services()
    try:
        entries = await deps.get_analytics_service().get_query_history(query, days=days)
    finally:
        await deps.cleanup_services()

    table = Table(title=f"History: {query}")
    table.add_column("When", style="dim")
    table.add_column("Results", justify="right", style="green")
    table.add_column("ms", justify="right")
    table.add_column("User")

    for entry in entries:
        table.add_row(
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            str(entry.total_results),
            str(entry.execution_time_ms),
            entry.user_id or "",
        )

    console.print(table)


@telemetry_app.command("recent")
def recent(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of records"),
    offset: int = typer.Option(0, "--offset", help="Records to skip"),
    user_id: str | None = typer.Option(None, "--user", "-u", help="Filter by user id"),
) -> None:
    """Most recent persisted telemetry records."""
    asyncio.run(_recent_async(limit, offset, user_id))


async def _recent_async(limit: int, offset: int, user_id: str | None) -> None:
    from legalsearch.interfaces import deps

    await deps.init_services()
    try:
        recorder = deps.get_telemetry_recorder()
        records = await recorder.get_recent_records(limit=limit, offset=offset, user_id=user_id)
        total = await recorder.count_records(user_id=user_id)
    finally:
        await deps.cleanup_services()

    table = Table(title=f"Search telemetry ({total} stored)")
    table.add_column("When", style="dim")
    table.add_column("Query", style="cyan")
    table.add_column("OK")
    table.add_column("Total ms", justify="right")
    table.add_column("Found/Used", justify="right")
    table.add_column("Max score", justify="right", style="green")

    for record in records:
        table.add_row(
            record.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            record.query_original[:60],
            "[green]yes[/green]" if record.success else "[red]no[/red]",
            str(record.timing.total_ms),
            f"{record.context.documents_found}/{record.context.documents_used}",
            f"{record.context.max_score:.3f}",
        )

    console.print(table)


@app.command()
def init() -> None:
    """Initialize LegalSearch database and index."""
    asyncio.run(_init_async())


async def _init_async() -> None:
    """Async initialization."""
    from legalsearch.interfaces import deps

    settings = get_settings()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Initializing...", total=3)

        progress.update(task, description="Creating directories...")
        Path(settings.data_dir).mkdir(parents=True, exist_ok=True)
        Path(settings.faiss_index_path).mkdir(parents=True, exist_ok=True)
        progress.advance(task)

        progress.update(task, description="Initializing SQLite database...")
        await deps.init_services()
        progress.advance(task)

        progress.update(task, description="Checking index...")
        documents = await deps.get_document_repository().get_document_count()
        vectors = deps.get_similarity_index().size
        await deps.cleanup_services()
        progress.advance(task)

    console.print("\n[green]Initialization complete![/green]")
    console.print(f"[dim]Database: {settings.db_path} ({documents} documents)[/dim]")
    console.print(f"[dim]FAISS index: {settings.faiss_index_path} ({vectors} vectors)[/dim]")


@app.command()
def version() -> None:
    """Show version information."""
    from legalsearch import __version__

    console.print(f"LegalSearch v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()

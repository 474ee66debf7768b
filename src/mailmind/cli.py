"""Command-line interface for MailMind."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

app = typer.Typer(
    name="mailmind",
    help="Import, classify and search email archives with a local LLM.",
)
console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (defaults to LOG_LEVEL from the environment).",
    ),
):
    """Configure logging before any command runs."""
    from .config.settings import get_settings
    from .logging_config import configure_logging

    configure_logging(log_level or get_settings().log_level)


def _services():
    from .analysis.llm import get_llm_client
    from .services.processing import EmailProcessor
    from .storage.database import get_db
    from .storage.repository import EmailStore

    store = EmailStore(get_db())
    llm = get_llm_client()
    return store, llm, EmailProcessor(store, llm)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-H", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="HTTP port."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
):
    """Run the HTTP API server."""
    import uvicorn

    from .config.settings import get_settings

    settings = get_settings()
    uvicorn.run(
        "mailmind.api.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@app.command("import")
def import_archive(
    path: Optional[Path] = typer.Argument(
        None,
        help="PST, EML, ZIP or JSON file. Loads the demo emails when omitted.",
    ),
):
    """Import an email archive and run AI processing on the new emails."""
    from .exceptions import MailMindError

    if path is not None and not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)

    _, _, processor = _services()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Importing {path.name if path else 'demo emails'}...", total=None)
        try:
            if path is None:
                summary = processor.import_file()
            else:
                summary = processor.import_file(path.name, path.read_bytes())
        except MailMindError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(1)

    console.print(f"[green]{summary.message}[/green]")
    if summary.parse_errors:
        console.print(f"[yellow]{summary.parse_errors} items could not be read (see log)[/yellow]")


@app.command()
def reprocess(
    unprocessed_only: bool = typer.Option(
        False,
        "--unprocessed-only",
        help="Only process emails never marked processed.",
    ),
):
    """Classify, extract events from and embed pending emails."""
    from .exceptions import LLMUnavailableError

    _, _, processor = _services()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Processing emails...", total=None)
        try:
            if unprocessed_only:
                stats, message = processor.process_unprocessed()
            else:
                stats, message = processor.reprocess()
        except LLMUnavailableError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(1)

    table = Table(title="Processing Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")
    table.add_row("Processed", str(stats.processed))
    table.add_row("Failed", str(stats.failed))
    table.add_row("Classified", str(stats.classified))
    table.add_row("Events extracted", str(stats.events_extracted))
    table.add_row("Chunks embedded", str(stats.embedded))
    console.print(table)
    console.print(message)


@app.command()
def stats():
    """Show archive statistics."""
    store, llm, _ = _services()

    storage = store.get_stats()
    counts = store.classification_stats()

    table = Table(title="MailMind Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Storage", storage.mode)
    table.add_row("Emails", str(storage.emails_count))
    table.add_row(
        "Last import",
        storage.last_import.strftime("%Y-%m-%d %H:%M") if storage.last_import else "-",
    )
    for label in ("task", "meeting", "approval", "notice", "unclassified"):
        table.add_row(f"  {label}", str(counts[label]))
    table.add_row("Events", str(len(store.list_events())))
    table.add_row("RAG chunks", str(store.count_chunks()))
    table.add_row("AI server", "connected" if llm.check_connection() else "[red]not connected[/red]")
    console.print(table)


@app.command()
def search(
    query: str = typer.Argument("", help="Search keywords."),
    top_k: int = typer.Option(10, "--top", "-n", min=1, max=50, help="Number of results."),
    sender: Optional[str] = typer.Option(None, "--sender", help="Filter by sender."),
    subject: Optional[str] = typer.Option(None, "--subject", help="Filter by subject."),
    date_from: Optional[str] = typer.Option(None, "--from", help="Earliest date (YYYY-MM-DD)."),
    date_to: Optional[str] = typer.Option(None, "--to", help="Latest date (YYYY-MM-DD)."),
    bm25: bool = typer.Option(False, "--bm25", help="Rank with BM25 instead (filters are ignored)."),
):
    """Keyword search over stored emails."""
    from .search.keyword import SearchFilters
    from .services.chat import ChatService

    filters = SearchFilters(sender=sender, subject=subject, start_date=date_from, end_date=date_to)
    if bm25 and not query.strip():
        console.print("[red]Error: BM25 search needs a query[/red]")
        raise typer.Exit(1)
    if not query.strip() and filters.is_empty():
        console.print("[red]Error: Enter a search query or a filter[/red]")
        raise typer.Exit(1)

    store, llm, _ = _services()
    if bm25:
        results = store.search_emails_bm25(query, top_k)
    else:
        results = ChatService(store, llm).search(query, top_k, filters).citations

    table = Table(title=f"Results for: {query or '(filters only)'}")
    table.add_column("ID", style="cyan")
    table.add_column("Score", style="magenta")
    table.add_column("Date")
    table.add_column("Sender")
    table.add_column("Subject", style="green")
    for result in results:
        table.add_row(
            str(result.mail_id),
            f"{result.score:.1f}",
            result.date or "",
            result.sender or "",
            result.subject,
        )
    console.print(table)


@app.command()
def chat(
    message: str = typer.Argument(..., help="Question about the archive."),
    conversation_id: Optional[int] = typer.Option(
        None,
        "--conversation",
        "-c",
        help="Continue an existing conversation.",
    ),
):
    """Ask a question answered from the archive."""
    from .exceptions import MailMindError
    from .services.chat import ChatService

    store, llm, _ = _services()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Thinking...", total=None)
        try:
            reply = ChatService(store, llm).chat(message, conversation_id)
        except MailMindError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(1)

    console.print(reply.response)
    console.print(f"\n[dim]Conversation {reply.conversation_id}[/dim]")


@app.command()
def events(
    keyword: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by keyword."),
):
    """List extracted calendar events."""
    store, _, _ = _services()

    rows = store.search_events(keyword) if keyword else store.list_events()

    table = Table(title="Calendar Events")
    table.add_column("Start", style="cyan")
    table.add_column("End")
    table.add_column("Title", style="green")
    table.add_column("Location")
    table.add_column("Email", style="magenta")
    for event in rows:
        table.add_row(
            event.start_date,
            event.end_date or "",
            event.title,
            event.location or "",
            str(event.email_id) if event.email_id else "",
        )
    console.print(table)


if __name__ == "__main__":
    app()

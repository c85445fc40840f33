"""Catalog CLI commands: schema setup, sample data and the development server."""

from datetime import date

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.catalog.runtime.context import get_config

console = Console()

app = typer.Typer(
    name="catalog",
    help="Book catalog management CLI",
    rich_markup_mode="rich",
)

SAMPLE_BOOKS = [
    ("Dune", "Frank Herbert", date(1965, 8, 1), "Science fiction on the desert planet Arrakis"),
    ("Foundation", "Isaac Asimov", date(1951, 6, 1), "The fall and rebirth of a galactic empire"),
    ("Neuromancer", "William Gibson", date(1984, 7, 1), "Cyberpunk heist in the matrix"),
    ("The Left Hand of Darkness", "Ursula K. Le Guin", date(1969, 3, 1), "An envoy on the ice world Gethen"),
    ("Hyperion", "Dan Simmons", date(1989, 5, 26), "Pilgrims travel to the Time Tombs"),
]


@app.command(name="init-db")
def init_db_command(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables first"),
) -> None:
    """Create the book table in the configured database."""
    from src.catalog.runtime.init_db import init_db

    if drop and not typer.confirm("Drop every catalog table?"):
        raise typer.Abort()

    init_db(drop=drop)
    console.print(f"[green]✓[/green] Database ready at {get_config().database.url}")


@app.command()
def seed() -> None:
    """Insert a handful of sample books."""
    from src.catalog.core.services import BookCatalogService, DbManageService, DbSessionService
    from src.catalog.entities.service.book import Book

    database_service = DbSessionService()
    DbManageService(database_service.engine).create_all()
    catalog = BookCatalogService(database_service)

    table = Table(title="Seeded books")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Author")

    for name, author, published, description in SAMPLE_BOOKS:
        book_id = catalog.insert(
            Book(name=name, author=author, publish_date=published, description=description)
        )
        table.add_row(str(book_id), name, author)

    database_service.dispose()
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind the server to (defaults to config)"),
    port: int = typer.Option(None, help="Port to bind the server to (defaults to config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """Start the catalog HTTP server."""
    import uvicorn

    config = get_config()
    host = host or config.app.host
    port = port or config.app.port

    console.print(
        Panel.fit(
            f"[bold green]Starting Book Catalog[/bold green]\nhttp://{host}:{port}/books",
            border_style="green",
        )
    )
    uvicorn.run(
        "src.catalog.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    app()

"""
Table ordering CLI.

Command-line interface for common operations.
"""

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="table-ordering",
    help="Table Ordering Service CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================


@app.command()
def init_db():
    """Create the database tables."""
    from shared.infrastructure.db import engine
    from ordering_api.models import Base

    console.print(f"[blue]Creating tables on {engine.url.render_as_string(hide_password=True)}[/blue]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓ Tables created/verified[/green]")


# =============================================================================
# Session Commands
# =============================================================================


@app.command()
def sessions(
    table: int = typer.Option(None, "--table", "-t", help="Only this table"),
    include_paid: bool = typer.Option(False, "--all", "-a", help="Include paid sessions"),
    limit: int = typer.Option(50, help="Maximum rows"),
):
    """List table sessions."""
    from shared.infrastructure.db import get_db_context
    from ordering_api.repositories.table_session import SessionFilters
    from ordering_api.services.domain import TableSessionService
    from ordering_api.services.domain.pricing import from_cents
    from ordering_api.services.domain.session_state import session_phase

    filters = SessionFilters(
        limit=limit,
        table_number=table,
        is_paid=None if include_paid else False,
    )
    with get_db_context() as db:
        rows = TableSessionService(db).list_sessions(filters)

    if not rows:
        console.print("[yellow]No sessions[/yellow]")
        return

    output = Table(title="Table sessions")
    output.add_column("ID", style="cyan")
    output.add_column("Table")
    output.add_column("Phase")
    output.add_column("Orders", justify="right")
    output.add_column("Total", justify="right")
    output.add_column("Receipt")

    for session in rows:
        output.add_row(
            str(session.id),
            str(session.table_number),
            session_phase(session),
            str(len(session.submissions)),
            str(from_cents(session.grand_total_cents)),
            session.receipt_number or "-",
        )

    console.print(output)


@app.command()
def dashboard():
    """Show the dining room overview."""
    from shared.infrastructure.db import get_db_context
    from ordering_api.services.domain import DashboardService
    from ordering_api.services.domain.pricing import from_cents

    with get_db_context() as db:
        summary = DashboardService(db).summary()

    console.print(
        f"Active orders: [bold]{summary.active_submissions}[/bold]  "
        f"Active tables: [bold]{summary.active_tables}[/bold]  "
        f"Completed: [bold]{summary.completed_submissions}[/bold]  "
        f"Awaiting payment: [bold]{summary.awaiting_payment}[/bold]  "
        f"Revenue today: [bold]{summary.todays_revenue}[/bold]"
    )

    board = Table(title="Tables")
    board.add_column("Table", style="cyan")
    board.add_column("Status")
    board.add_column("Total", justify="right")
    for entry in summary.tables:
        if not entry.occupied:
            status = "[green]vacant[/green]"
        elif entry.awaiting_payment:
            status = "[yellow]awaiting payment[/yellow]"
        else:
            status = "[blue]occupied[/blue]"
        board.add_row(str(entry.table_number), status, str(from_cents(entry.grand_total_cents)))
    console.print(board)

    if summary.overdue:
        console.print(
            f"[red]{len(summary.overdue)} order(s) past the "
            f"{summary.prep_target_minutes}-minute target[/red]"
        )
        for entry in summary.overdue:
            console.print(
                f"  table {entry.table_number} order #{entry.submission_number}: "
                f"{entry.elapsed_minutes} min ({entry.status})"
            )


# =============================================================================
# Server Commands
# =============================================================================


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(None, help="Port (defaults to REST_API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Run the API server."""
    import uvicorn
    from shared.config.settings import settings

    uvicorn.run(
        "ordering_api.main:app",
        host=host,
        port=port or settings.api_port,
        reload=reload,
    )


@app.command()
def health():
    """Check database connectivity."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError
    from shared.infrastructure.db import get_db_context

    try:
        with get_db_context() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Database: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Database: healthy[/green]")


@app.command()
def version():
    """Show version information."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version

    try:
        installed = pkg_version("table-ordering")
    except PackageNotFoundError:
        installed = "dev"
    console.print(f"[bold]Table Ordering[/bold] v{installed}")


if __name__ == "__main__":
    app()

"""Schema migration CLI commands."""

import typer
from rich.table import Table

from book_api.cli.utils import console, get_database_service
from book_api.core.errors import MigrationError
from book_api.core.services import MigrationRunner

db_app = typer.Typer(help="Manage the database schema")


@db_app.command("migrate")
def migrate() -> None:
    """Apply all pending migrations."""
    database_service = get_database_service()
    try:
        applied = MigrationRunner(database_service.engine).apply_all()
    except MigrationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    if not applied:
        console.print("[green]✅ Database schema is up to date[/green]")
        return
    for migration in applied:
        console.print(f"[green]Applied[/green] {migration.label}")


@db_app.command("revert")
def revert(
    steps: int = typer.Option(1, "--steps", "-n", min=1, help="Number of migrations to revert"),
    revert_all: bool = typer.Option(False, "--all", help="Revert every applied migration"),
) -> None:
    """Revert the most recently applied migrations."""
    database_service = get_database_service()
    runner = MigrationRunner(database_service.engine)
    try:
        reverted = runner.revert_all() if revert_all else runner.revert(steps)
    except MigrationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    if not reverted:
        console.print("[yellow]Nothing to revert[/yellow]")
        return
    for migration in reverted:
        console.print(f"[yellow]Reverted[/yellow] {migration.label}")


@db_app.command("status")
def status() -> None:
    """Show which migrations have been applied."""
    database_service = get_database_service()
    try:
        statuses = MigrationRunner(database_service.engine).status()
    except MigrationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    table = Table(title="Migrations")
    table.add_column("Version", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Applied At", style="magenta")
    for entry in statuses:
        table.add_row(
            f"{entry.migration.version:04d}",
            entry.migration.name,
            entry.applied_at.isoformat(sep=" ", timespec="seconds") if entry.applied_at else "pending",
        )
    console.print(table)

"""API user management CLI commands."""

import typer
from rich.prompt import Confirm
from rich.table import Table

from book_api.cli.utils import console, migrated_session
from book_api.core.services import UserManagementService

users_app = typer.Typer(help="Manage users allowed to call the API")


@users_app.command("add")
def add_user(
    username: str = typer.Argument(..., help="Username for the new user"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True,
        help="Password (prompted when omitted)",
    ),
) -> None:
    """Add a user."""
    try:
        with migrated_session() as session:
            user = UserManagementService(session).create_user(username, password)
    except ValueError as e:
        console.print(f"[red]❌ Failed to add user: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Created user '{user.username}' ({user.id})[/green]")


@users_app.command("list")
def list_users() -> None:
    """List all users."""
    with migrated_session() as session:
        users = UserManagementService(session).list_users()

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Username", style="green")
    for user in users:
        table.add_row(user.id, user.username)
    console.print(table)
    console.print(f"\n[green]Found {len(users)} users[/green]")


@users_app.command("set-password")
def set_password(
    username: str = typer.Argument(..., help="Username whose password changes"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True,
        help="New password (prompted when omitted)",
    ),
) -> None:
    """Replace a user's password."""
    try:
        with migrated_session() as session:
            changed = UserManagementService(session).set_password(username, password)
    except ValueError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e

    if not changed:
        console.print(f"[red]❌ User '{username}' not found[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✅ Password updated for '{username}'[/green]")


@users_app.command("remove")
def remove_user(
    username: str = typer.Argument(..., help="Username to remove"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Remove a user."""
    if not yes and not Confirm.ask(f"Remove user '{username}'?"):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(code=0)

    with migrated_session() as session:
        removed = UserManagementService(session).remove_user(username)

    if not removed:
        console.print(f"[red]❌ User '{username}' not found[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✅ Removed user '{username}'[/green]")

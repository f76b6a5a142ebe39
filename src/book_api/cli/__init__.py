"""Main CLI application module."""

import typer

from book_api.cli.db_commands import db_app
from book_api.cli.user_commands import users_app
from book_api.runtime.context import get_config

app = typer.Typer(
    help="📚 Book API - server and administration tool",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (defaults to config)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (defaults to config)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP server."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "book_api.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        reload=reload,
        access_log=False,  # request logging middleware covers this
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

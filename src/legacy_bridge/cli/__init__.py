"""Main CLI application module."""

import typer

from src.legacy_bridge.runtime.context import get_config

from .user_commands import lookup, users_app
from .utils import console

app = typer.Typer(
    help="🔐 Legacy Identity Bridge CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(users_app, name="users")
app.command("lookup")(lookup)


@app.command("init-db")
def init_db() -> None:
    """
    🗄️ Create the local store tables.
    """
    from src.legacy_bridge.runtime.init_db import init_db as create_tables

    create_tables()
    console.print("[green]✅ Database tables created[/green]")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, help="Bind address (defaults to config)"),
    port: int | None = typer.Option(None, help="Port (defaults to config)"),
) -> None:
    """
    🚀 Run the federation API under uvicorn.
    """
    import uvicorn

    config = get_config()
    uvicorn.run(
        "src.legacy_bridge.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        access_log=False,
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

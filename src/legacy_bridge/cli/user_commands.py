"""Local user and legacy profile commands."""

import asyncio

import typer
from rich.panel import Panel
from rich.table import Table

from src.legacy_bridge.core.errors import LegacyTransportError, LegacyUserNotFound
from src.legacy_bridge.core.services import DbSessionService, LegacyIdentityClient
from src.legacy_bridge.entities.core.local_user import LocalUserRepository
from src.legacy_bridge.runtime.context import get_config

from .utils import console

users_app = typer.Typer(help="👥 Local user commands")


@users_app.command("list")
def list_users(
    limit: int = typer.Option(50, min=1, help="Maximum number of users to show"),
) -> None:
    """
    📋 List users provisioned in the local store.
    """
    db_service = DbSessionService()
    with db_service.session_scope() as session:
        users = LocalUserRepository(session).list_users(limit)

    if not users:
        console.print("[yellow]No local users found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Username", style="cyan")
    table.add_column("Email", style="green")
    table.add_column("Name", style="blue")
    table.add_column("Legacy Roles", style="blue")
    table.add_column("Enabled", style="yellow")
    table.add_column("Created", style="dim")

    for user in users:
        name = " ".join(part for part in (user.first_name, user.last_name) if part)
        table.add_row(
            user.username,
            user.email or "",
            name,
            ", ".join(user.get_attribute("legacyRoles")),
            "✅" if user.enabled else "❌",
            user.created_at.isoformat(timespec="seconds"),
        )

    console.print(table)
    console.print(f"\n[dim]Showing {len(users)} user{'s' if len(users) != 1 else ''}[/dim]")


def lookup(username: str = typer.Argument(..., help="Legacy username")) -> None:
    """
    🔎 Fetch a profile straight from the legacy facade (no cache).
    """
    client = LegacyIdentityClient.from_config(get_config().legacy)
    try:
        profile = asyncio.run(client.fetch_profile(username))
    except LegacyUserNotFound:
        console.print(f"[yellow]Legacy user '{username}' not found[/yellow]")
        raise typer.Exit(1) from None
    except LegacyTransportError as e:
        console.print(f"[red]❌ Legacy facade unavailable: {e}[/red]")
        raise typer.Exit(2) from None

    first_name, last_name = profile.name_parts()
    console.print(
        Panel.fit(
            "\n".join(
                [
                    f"[bold]Username:[/bold] {profile.username}",
                    f"[bold]Display name:[/bold] {profile.display_name or ''}",
                    f"[bold]First / last:[/bold] {first_name or ''} / {last_name or ''}",
                    f"[bold]Email:[/bold] {profile.email or ''}",
                    f"[bold]Roles:[/bold] {', '.join(profile.roles)}",
                ]
            ),
            title=f"Legacy profile @ {client.base_url}",
            border_style="cyan",
        )
    )

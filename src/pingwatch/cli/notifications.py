from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from pingwatch.errors import CacheError
from pingwatch.models import Notification, Severity

from .common import build_cache, build_engine, load_settings_or_exit

app = typer.Typer(no_args_is_help=True, help="Read or clear the notification log")

SEVERITY_STYLE = {
    Severity.WHITE: "white",
    Severity.RED: "red",
    Severity.YELLOW: "yellow",
    Severity.GREEN: "green",
}


def render_notification(notification: Notification) -> str:
    style = SEVERITY_STYLE[notification.severity]
    return f"[{style}]{notification.timestamp}  {notification.message}[/{style}]"


@app.command("list")
def list_notifications(
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Show at most this many")
    ] = 50,
) -> None:
    """Show the newest notifications first."""
    console = Console()
    cache = build_cache(load_settings_or_exit())
    try:
        notifications = asyncio.run(cache.load_notifications())
    except CacheError as exc:
        console.print(f"[red]Failed to read notifications[/red]: {exc}")
        raise typer.Exit(1) from exc

    if not notifications:
        console.print("No notifications")
        return

    table = Table()
    table.add_column("Time")
    table.add_column("Message")
    table.add_column("ID", style="dim")
    for notification in notifications[:limit]:
        style = SEVERITY_STYLE[notification.severity]
        table.add_row(
            notification.timestamp,
            f"[{style}]{notification.message}[/{style}]",
            str(notification.id),
        )
    console.print(table)


async def _clear(notification_id: str | None) -> int:
    engine = build_engine(load_settings_or_exit())
    try:
        await engine.sink.load()
        return await engine.sink.clear(notification_id)
    finally:
        await engine.stop()


@app.command("clear")
def clear_notifications(
    notification_id: Annotated[
        str | None, typer.Option("--id", help="Delete only this notification")
    ] = None,
) -> None:
    """Delete one notification, or all of them."""
    console = Console()
    removed = asyncio.run(_clear(notification_id))

    if notification_id is not None and removed == 0:
        console.print(f"[yellow]![/yellow] Notification '{notification_id}' not found")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Removed {removed} notification(s)")

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from pingwatch.errors import CacheError

from .common import build_cache, load_settings_or_exit, resolve_config_path_or_exit


def register(app: typer.Typer) -> None:
    @app.command()
    def info() -> None:
        """Show pingwatch data directory, config and cache stats."""
        settings = load_settings_or_exit()
        cache = build_cache(settings)
        config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)

        console = Console()

        console.print("[bold]pingwatch info[/bold]\n")
        console.print(f"Data directory: {cache.path}")
        console.print(f"Config file: {config_path if config_exists else 'defaults'}")

        console.print("\n[bold]Configuration[/bold]")
        console.print(f"Server: {settings.app.base_url}")
        console.print(f"Mode: {settings.app.mode}")
        console.print(f"Max missed probes: {settings.app.max_missed_probes}")
        console.print(f"Probe interval: {settings.schedule.probe_interval:g}s")
        console.print(f"Resync interval: {settings.schedule.resync_interval:g}s")

        console.print("\n[bold]Cache[/bold]")
        try:
            devices = asyncio.run(cache.load_devices())
            notifications = asyncio.run(cache.load_notifications())
        except CacheError as exc:
            console.print(f"[red]Cache unreadable[/red]: {exc}")
            raise typer.Exit(1) from exc
        console.print(f"Cached devices: {len(devices)}")
        console.print(f"Notifications: {len(notifications)}")

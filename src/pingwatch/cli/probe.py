from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from pingwatch.core import PingProber
from pingwatch.errors import RegistryError
from pingwatch.models import is_ipv4_address

from .common import build_engine, load_settings_or_exit


def register(app: typer.Typer) -> None:
    @app.command()
    def probe(
        address: str = typer.Argument(..., help="IPv4 address to probe"),
        visible: Annotated[
            bool,
            typer.Option("--visible", help="Show the ping output instead of a verdict"),
        ] = False,
    ) -> None:
        """Probe a single address once."""
        console = Console()
        if not is_ipv4_address(address):
            console.print(f"[red]Invalid IP address[/red]: {address}")
            raise typer.Exit(1)

        settings = load_settings_or_exit()
        prober = PingProber(
            timeout=settings.probing.timeout,
            visible_count=settings.probing.visible_count,
        )

        if visible:
            asyncio.run(prober.probe_visible(address))
            return

        if asyncio.run(prober.probe(address)):
            console.print(f"[green]{address} is reachable[/green]")
        else:
            console.print(f"[red]{address} is unreachable[/red]")
            raise typer.Exit(1)

    @app.command()
    def broadcast() -> None:
        """Run a visible ping against every registered device at once."""
        console = Console()
        engine = build_engine(load_settings_or_exit())

        async def _run() -> int:
            try:
                try:
                    await engine.registry.load()
                except RegistryError as exc:
                    console.print(f"[red]{exc.title}[/red]: {exc.message}")
                    return 0
                tasks = engine.scheduler.broadcast()
                if not tasks:
                    console.print("No devices.")
                await asyncio.gather(*tasks)
                return len(tasks)
            finally:
                await engine.stop()

        count = asyncio.run(_run())
        if count == 0:
            raise typer.Exit(1)
        console.print(f"Pinged {count} device(s)")

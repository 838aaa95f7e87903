from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from .common import build_engine, load_settings_or_exit
from .notifications import render_notification


def register(app: typer.Typer) -> None:
    @app.command()
    def monitor(
        duration: Annotated[
            float | None,
            typer.Option("--duration", "-d", help="Stop after this many seconds"),
        ] = None,
    ) -> None:
        """Probe all devices continuously and print up/down changes."""
        console = Console()
        settings = load_settings_or_exit()

        async def _run() -> None:
            engine = build_engine(settings)
            engine.sink.subscribe(
                lambda notification: console.print(render_notification(notification))
            )
            await engine.run(duration)

        console.print(
            f"Monitoring via {settings.app.base_url} "
            f"(down after {settings.app.max_missed_probes} missed probes)"
        )
        try:
            asyncio.run(_run())
        except KeyboardInterrupt:
            console.print("Stopped.")

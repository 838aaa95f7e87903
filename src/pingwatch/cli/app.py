from __future__ import annotations

from typing import Annotated

import typer

from pingwatch.utils.logging import setup_logging

from . import config as config_cmd
from . import devices as devices_cmd
from . import notifications as notifications_cmd
from .info import register as register_info
from .monitor import register as register_monitor
from .probe import register as register_probe

app = typer.Typer(
    help="pingwatch - device reachability monitor", no_args_is_help=True
)

app.add_typer(config_cmd.app, name="config")
app.add_typer(devices_cmd.app, name="devices")
app.add_typer(notifications_cmd.app, name="notifications")

register_info(app)
register_monitor(app)
register_probe(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """pingwatch CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"pingwatch version {get_version('pingwatch')}")
        raise typer.Exit()

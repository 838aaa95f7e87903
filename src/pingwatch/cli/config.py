from __future__ import annotations

from typing import Annotated

import typer

from pingwatch.config import Settings, render_settings_toml, write_settings

from .common import load_settings_or_exit, resolve_config_path_or_exit

app = typer.Typer(no_args_is_help=True, help="Show or create the config file")


@app.command("show")
def show_config() -> None:
    """Show current configuration."""
    settings = load_settings_or_exit()
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    source = str(path) if exists else "defaults"
    typer.echo(f"Config source: {source}")
    typer.echo(render_settings_toml(settings))


@app.command("path")
def config_path() -> None:
    """Print the config file location."""
    path, _ = resolve_config_path_or_exit(allow_missing=True)
    typer.echo(str(path))


@app.command("init")
def init_config(
    server: Annotated[
        str | None,
        typer.Option("--server", help="Directory server address (ip:port)"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Write a default config file."""
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    if exists and not force:
        typer.echo(f"Config already exists at {path}")
        return

    settings = Settings()
    if server is not None:
        try:
            settings = Settings.model_validate({"app": {"server_address": server}})
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(1) from exc

    write_settings(settings, path)
    typer.echo(f"Wrote default config to {path}")


@app.command("set")
def set_config(
    server: Annotated[
        str | None,
        typer.Option("--server", help="Directory server address (ip:port)"),
    ] = None,
    mode: Annotated[
        str | None, typer.Option("--mode", help="SWITCH or ENCRYPTOR")
    ] = None,
    max_missed_probes: Annotated[
        int | None,
        typer.Option(
            "--max-missed-probes", help="Misses before a device is reported down"
        ),
    ] = None,
) -> None:
    """Change app settings in the config file.

    A running monitor picks the change up on its next config refresh.
    """
    path, exists = resolve_config_path_or_exit(allow_missing=True)
    current = load_settings_or_exit() if exists else Settings()

    changes = {
        key: value
        for key, value in (
            ("server_address", server),
            ("mode", mode.upper() if mode else None),
            ("max_missed_probes", max_missed_probes),
        )
        if value is not None
    }
    if not changes:
        typer.echo("Nothing to change", err=True)
        raise typer.Exit(1)

    data = current.model_dump()
    data["app"].update(changes)
    try:
        settings = Settings.model_validate(data)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    write_settings(settings, path)
    typer.echo(f"Updated {', '.join(sorted(changes))} in {path}")

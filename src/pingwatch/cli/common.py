from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from pingwatch.config import (
    Settings,
    data_dir_from_settings,
    get_settings,
    resolve_config_path,
)
from pingwatch.core import Engine
from pingwatch.errors import ConfigError, RegistryError
from pingwatch.storage import JsonCacheStore


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ConfigError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_cache(settings: Settings, data_dir: Path | None = None) -> JsonCacheStore:
    return JsonCacheStore(data_dir or data_dir_from_settings(settings))


def build_engine(settings: Settings) -> Engine:
    path, exists = resolve_config_path(allow_missing=True)
    return Engine.from_settings(settings, path if exists else None)


def fail(console: Console, exc: RegistryError) -> typer.Exit:
    console.print(f"[red]{exc.title}[/red]: {exc.message}")
    return typer.Exit(1)

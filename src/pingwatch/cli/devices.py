from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console
from rich.table import Table

from pingwatch.core import DeviceRegistry
from pingwatch.errors import RegistryError
from pingwatch.models import Device

from .common import build_engine, fail, load_settings_or_exit

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Manage devices on the directory server")


async def _list() -> tuple[list[Device], bool, RegistryError | None]:
    engine = build_engine(load_settings_or_exit())
    try:
        try:
            await engine.registry.load()
        except RegistryError as exc:
            return [], False, exc
        registry = engine.registry
        return registry.get_devices(), registry.online, registry.last_error
    finally:
        await engine.stop()


@app.command("list")
def list_devices() -> None:
    """List devices (from the server, or the local cache when it is offline)."""
    console = Console()
    devices, online, error = asyncio.run(_list())

    if error is not None:
        console.print(f"[yellow]![/yellow] {error.title}: {error.message}")

    if not devices:
        console.print("No devices.")
        return

    table = Table(title="Server online" if online else "Server offline (cached)")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Address", style="cyan")

    for device in sorted(devices, key=lambda d: d.id):
        table.add_row(str(device.id), device.name, device.address)

    console.print(table)


async def _mutate(action: Callable[[DeviceRegistry], Awaitable[T]]) -> T:
    engine = build_engine(load_settings_or_exit())
    try:
        try:
            await engine.registry.load()
        except RegistryError as exc:
            logger.debug("Device list unavailable: %s", exc)
        return await action(engine.registry)
    finally:
        await engine.stop()


@app.command("add")
def add_device(
    address: str = typer.Argument(..., help="IPv4 address"),
    name: str = typer.Argument(..., help="Display name"),
) -> None:
    """Add a device."""
    console = Console()
    try:
        device = asyncio.run(_mutate(lambda registry: registry.add(address, name)))
    except RegistryError as exc:
        raise fail(console, exc) from exc
    console.print(f"[green]✓[/green] Added '{device.name}' at {device.address}")


@app.command("edit")
def edit_device(
    device_id: int = typer.Argument(..., help="Device id"),
    address: str = typer.Argument(..., help="New IPv4 address"),
    name: str = typer.Argument(..., help="New display name"),
) -> None:
    """Change a device's address and name."""
    console = Console()
    try:
        asyncio.run(
            _mutate(lambda registry: registry.edit(device_id, address, name))
        )
    except RegistryError as exc:
        raise fail(console, exc) from exc
    console.print(f"[green]✓[/green] Updated device {device_id}")


@app.command("remove")
def remove_device(
    address: str = typer.Argument(..., help="Address of the device to remove"),
) -> None:
    """Remove a device."""
    console = Console()
    try:
        asyncio.run(_mutate(lambda registry: registry.delete(address)))
    except RegistryError as exc:
        raise fail(console, exc) from exc
    console.print(f"[green]✓[/green] Removed device at {address}")

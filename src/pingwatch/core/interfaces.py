"""Collaborators the engine depends on.

The engine only talks to these protocols; the default implementations live in
``directory``, ``prober`` and ``pingwatch.storage``.
"""

from __future__ import annotations

from typing import Protocol

from pingwatch.models import Device, Notification


class RemoteDirectory(Protocol):
    async def list(self) -> list[Device]: ...

    async def create(self, address: str, name: str) -> None: ...

    async def update(self, device_id: int, address: str, name: str) -> None: ...

    async def delete(self, address: str) -> None: ...


class CacheStore(Protocol):
    async def load_devices(self) -> list[Device]: ...

    async def save_devices(self, devices: list[Device]) -> None: ...

    async def load_notifications(self) -> list[Notification]: ...

    async def save_notifications(self, notifications: list[Notification]) -> None: ...


class Prober(Protocol):
    async def probe(self, address: str) -> bool:
        """Return True when the address answered. Must never raise."""
        ...

    async def probe_visible(self, address: str) -> None: ...

from __future__ import annotations

import asyncio

import pytest

from pingwatch.config import get_settings
from pingwatch.errors import CacheError, DirectoryError
from pingwatch.models import Device, Notification


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.delenv("PINGWATCH_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeDirectory:
    """In-memory directory server. Set ``error`` to make every call fail."""

    def __init__(self, devices: list[Device] | None = None) -> None:
        self.devices = list(devices or [])
        self.error: DirectoryError | None = None
        self.calls: list[tuple] = []

    def _call(self, *call: object) -> None:
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    async def list(self) -> list[Device]:
        self._call("list")
        return list(self.devices)

    async def create(self, address: str, name: str) -> None:
        self._call("create", address, name)

    async def update(self, device_id: int, address: str, name: str) -> None:
        self._call("update", device_id, address, name)

    async def delete(self, address: str) -> None:
        self._call("delete", address)

    async def aclose(self) -> None:
        self.calls.append(("aclose",))


class MemoryCache:
    def __init__(self, devices: list[Device] | None = None) -> None:
        self.devices = list(devices or [])
        self.notifications: list[Notification] = []
        self.device_saves = 0
        self.notification_saves = 0
        self.fail_reads = False
        self.fail_writes = False

    async def load_devices(self) -> list[Device]:
        if self.fail_reads:
            raise CacheError("devices.json is corrupt")
        return list(self.devices)

    async def save_devices(self, devices: list[Device]) -> None:
        if self.fail_writes:
            raise CacheError("disk full")
        self.device_saves += 1
        self.devices = list(devices)

    async def load_notifications(self) -> list[Notification]:
        if self.fail_reads:
            raise CacheError("notifications.json is corrupt")
        return list(self.notifications)

    async def save_notifications(self, notifications: list[Notification]) -> None:
        if self.fail_writes:
            raise CacheError("disk full")
        self.notification_saves += 1
        self.notifications = list(notifications)


class ScriptedProber:
    """Answers from a per-address script; unscripted addresses are reachable."""

    def __init__(self) -> None:
        self.results: dict[str, list[bool]] = {}
        self.delays: dict[str, float] = {}
        self.probed: list[str] = []
        self.visible: list[str] = []

    def script(self, address: str, *results: bool) -> None:
        self.results.setdefault(address, []).extend(results)

    async def probe(self, address: str) -> bool:
        self.probed.append(address)
        delay = self.delays.get(address)
        if delay:
            await asyncio.sleep(delay)
        queue = self.results.get(address)
        if queue:
            return queue.pop(0)
        return True

    async def probe_visible(self, address: str) -> None:
        self.visible.append(address)


@pytest.fixture
def core_sw() -> Device:
    return Device(id=1, name="core-sw", address="10.0.0.5")


@pytest.fixture
def directory(core_sw: Device) -> FakeDirectory:
    return FakeDirectory([core_sw, Device(id=2, name="edge-sw", address="10.0.0.6")])


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def prober() -> ScriptedProber:
    return ScriptedProber()

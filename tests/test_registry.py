from __future__ import annotations

import asyncio

import pytest
from conftest import FakeDirectory, MemoryCache

from pingwatch.core import DeviceRegistry
from pingwatch.errors import DirectoryError, ErrorCategory, RegistryError
from pingwatch.models import Device


def _online_registry(directory, cache) -> DeviceRegistry:
    registry = DeviceRegistry(directory, cache)
    asyncio.run(registry.load())
    assert registry.online
    return registry


def test_load_success_replaces_list_and_writes_cache(directory, cache):
    registry = DeviceRegistry(directory, cache)
    asyncio.run(registry.load())

    assert registry.online
    assert [d.name for d in registry.get_devices()] == ["core-sw", "edge-sw"]
    assert cache.devices == registry.get_devices()
    assert registry.last_error is None


def test_load_failure_falls_back_to_cache(core_sw):
    directory = FakeDirectory()
    directory.error = DirectoryError(None, "connection refused")
    cache = MemoryCache([core_sw])
    registry = DeviceRegistry(directory, cache)

    asyncio.run(registry.load())

    assert not registry.online
    assert registry.get_devices() == [core_sw]
    assert registry.last_error is not None
    assert registry.last_error.category is ErrorCategory.CONNECTIVITY
    assert cache.device_saves == 0


def test_load_non_2xx_is_offline_too(core_sw):
    directory = FakeDirectory()
    directory.error = DirectoryError(500, "database locked")
    registry = DeviceRegistry(directory, MemoryCache([core_sw]))

    asyncio.run(registry.load())

    assert not registry.online
    assert registry.last_error is not None
    assert registry.last_error.category is ErrorCategory.SERVER_FAULT


def test_load_failure_with_empty_cache_raises_and_keeps_list(directory, cache):
    registry = _online_registry(directory, cache)
    before = registry.get_devices()
    cache.devices = []
    directory.error = DirectoryError(None, "timed out")

    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(registry.load())

    assert excinfo.value.category is ErrorCategory.CONNECTIVITY
    assert registry.get_devices() == before
    assert not registry.online


def test_load_failure_with_unreadable_cache_is_cache_fault(directory, cache):
    directory.error = DirectoryError(None, "timed out")
    cache.fail_reads = True
    registry = DeviceRegistry(directory, cache)

    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(registry.load())

    assert excinfo.value.category is ErrorCategory.CACHE_FAULT
    assert registry.get_devices() == []


def test_resync_brings_registry_back_online(directory, cache, core_sw):
    cache.devices = [core_sw]
    directory.error = DirectoryError(None, "down")
    registry = DeviceRegistry(directory, cache)
    asyncio.run(registry.load())
    assert not registry.online

    directory.error = None
    asyncio.run(registry.load())
    assert registry.online
    assert len(registry.get_devices()) == 2


def test_add_while_offline_does_nothing():
    directory = FakeDirectory()
    directory.error = DirectoryError(None, "down")
    cache = MemoryCache([Device(id=1, name="core-sw", address="10.0.0.5")])
    registry = DeviceRegistry(directory, cache)
    asyncio.run(registry.load())
    directory.calls.clear()
    before = registry.get_devices()

    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(registry.add("192.168.1.50", "nas1"))

    assert excinfo.value.category is ErrorCategory.OFFLINE
    assert directory.calls == []
    assert registry.get_devices() == before
    assert cache.device_saves == 0


@pytest.mark.parametrize(
    "call",
    [
        lambda registry: registry.edit(1, "10.0.0.9", "core-sw"),
        lambda registry: registry.delete("10.0.0.5"),
    ],
)
def test_edit_and_delete_while_offline_do_nothing(call, core_sw):
    directory = FakeDirectory()
    directory.error = DirectoryError(None, "down")
    cache = MemoryCache([core_sw])
    registry = DeviceRegistry(directory, cache)
    asyncio.run(registry.load())
    directory.calls.clear()

    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(call(registry))

    assert excinfo.value.category is ErrorCategory.OFFLINE
    assert directory.calls == []
    assert registry.get_devices() == [core_sw]
    assert cache.device_saves == 0


def test_add_assigns_next_id_and_persists(directory, cache):
    registry = _online_registry(directory, cache)

    device = asyncio.run(registry.add("192.168.1.50", "nas1"))

    assert device == Device(id=3, name="nas1", address="192.168.1.50")
    assert directory.calls[-1] == ("create", "192.168.1.50", "nas1")
    assert registry.get_devices()[-1] == device
    assert cache.devices[-1] == device


def test_add_to_empty_registry_starts_at_one(cache):
    registry = _online_registry(FakeDirectory(), cache)
    device = asyncio.run(registry.add("192.168.1.50", "nas1"))
    assert device.id == 1


def test_add_rejects_invalid_input_before_network(directory, cache):
    registry = _online_registry(directory, cache)
    directory.calls.clear()

    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(registry.add("300.1.1.1", "nas1"))

    assert excinfo.value.category is ErrorCategory.VALIDATION
    assert directory.calls == []


def test_add_duplicate_address_reports_conflict(directory, cache):
    registry = _online_registry(directory, cache)
    saves = cache.device_saves
    directory.error = DirectoryError(409, "UNIQUE constraint failed: switches.ip")

    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(registry.add("10.0.0.5", "dup"))

    assert excinfo.value.category is ErrorCategory.CONFLICT
    assert excinfo.value.message.startswith(
        "A device with this IP address already exists."
    )
    assert len(registry.get_devices()) == 2
    assert cache.device_saves == saves
    # a rejected request still proves the server is reachable
    assert registry.online


def test_network_error_on_mutation_flips_offline(directory, cache):
    registry = _online_registry(directory, cache)
    directory.error = DirectoryError(None, "connection reset")

    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(registry.add("192.168.1.50", "nas1"))

    assert excinfo.value.category is ErrorCategory.CONNECTIVITY
    assert not registry.online
    assert len(registry.get_devices()) == 2


def test_edit_replaces_fields_and_moves_selection(directory, cache):
    registry = _online_registry(directory, cache)
    registry.select("10.0.0.5")

    device = asyncio.run(registry.edit(1, "10.0.0.50", "core-sw-2"))

    assert device == Device(id=1, name="core-sw-2", address="10.0.0.50")
    assert registry.get_device(1) == device
    assert registry.selected_address == "10.0.0.50"
    assert directory.calls[-1] == ("update", 1, "10.0.0.50", "core-sw-2")
    assert cache.devices[0] == device


def test_edit_other_device_keeps_selection(directory, cache):
    registry = _online_registry(directory, cache)
    registry.select("10.0.0.5")

    asyncio.run(registry.edit(2, "10.0.0.60", "edge-sw"))

    assert registry.selected_address == "10.0.0.5"


def test_edit_unknown_id_is_not_found(directory, cache):
    registry = _online_registry(directory, cache)
    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(registry.edit(42, "10.0.0.1", "ghost"))
    assert excinfo.value.category is ErrorCategory.NOT_FOUND


def test_edit_rejected_by_server_leaves_list(directory, cache):
    registry = _online_registry(directory, cache)
    before = registry.get_devices()
    directory.error = DirectoryError(404, "Switch not found")

    with pytest.raises(RegistryError) as excinfo:
        asyncio.run(registry.edit(1, "10.0.0.50", "core-sw-2"))

    assert excinfo.value.category is ErrorCategory.NOT_FOUND
    assert registry.get_devices() == before


def test_delete_removes_by_address(directory, cache):
    registry = _online_registry(directory, cache)

    asyncio.run(registry.delete("10.0.0.5"))

    assert [d.address for d in registry.get_devices()] == ["10.0.0.6"]
    assert [d.address for d in cache.devices] == ["10.0.0.6"]


def test_cache_write_failure_keeps_in_memory_state(directory, cache):
    registry = _online_registry(directory, cache)
    cache.fail_writes = True

    device = asyncio.run(registry.add("192.168.1.50", "nas1"))

    assert registry.get_devices()[-1] == device


def test_select_toggles():
    registry = DeviceRegistry(FakeDirectory(), MemoryCache())
    assert registry.select("10.0.0.5") == "10.0.0.5"
    assert registry.select("10.0.0.5") == ""


def test_listeners_see_every_change(directory, cache):
    seen: list[list[str]] = []
    registry = DeviceRegistry(directory, cache)
    registry.subscribe(lambda devices: seen.append([d.address for d in devices]))

    asyncio.run(registry.load())
    asyncio.run(registry.add("192.168.1.50", "nas1"))

    assert seen == [["10.0.0.5", "10.0.0.6"], ["10.0.0.5", "10.0.0.6", "192.168.1.50"]]

"""Canonical device list, reconciled between the directory server and the cache.

Reads are remote-first with a cache fallback; the outcome of the last read sets
the ``online`` flag. Writes only go through while online: a mutation must reach
the directory before it is applied locally, so the local list never diverges
from the server of record. A failed write leaves the local list untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import ValidationError

from pingwatch.errors import (
    CONNECTION_ERROR_MESSAGE,
    CacheError,
    DirectoryError,
    ErrorCategory,
    RegistryError,
    category_for_status,
    humanize_error,
)
from pingwatch.models import Device

from .interfaces import CacheStore, RemoteDirectory

logger = logging.getLogger(__name__)

RegistryListener = Callable[[list[Device]], None]


class DeviceRegistry:
    def __init__(self, directory: RemoteDirectory, cache: CacheStore) -> None:
        self._directory = directory
        self._cache = cache
        self._devices: list[Device] = []
        self._online = False
        self._selected_address = ""
        self._listeners: list[RegistryListener] = []
        self.last_error: RegistryError | None = None

    @property
    def online(self) -> bool:
        return self._online

    @property
    def selected_address(self) -> str:
        return self._selected_address

    def get_devices(self) -> list[Device]:
        return list(self._devices)

    def get_device(self, device_id: int) -> Device | None:
        return next((d for d in self._devices if d.id == device_id), None)

    def find_by_address(self, address: str) -> Device | None:
        return next((d for d in self._devices if d.address == address), None)

    def select(self, address: str) -> str:
        """Toggle the selection: selecting the selected address clears it."""
        self._selected_address = "" if self._selected_address == address else address
        return self._selected_address

    def subscribe(self, listener: RegistryListener) -> None:
        self._listeners.append(listener)

    def _replace(self, devices: list[Device]) -> None:
        self._devices = devices
        for listener in self._listeners:
            listener(self.get_devices())

    async def _persist(self) -> None:
        try:
            await self._cache.save_devices(self._devices)
        except CacheError as exc:
            # The in-memory list stays authoritative for this session.
            logger.warning("Failed to save device list: %s", exc)

    async def load(self) -> None:
        """Refresh from the directory, falling back to the cache when it fails.

        Raises ``RegistryError`` only when both tiers come up empty.
        """
        try:
            devices = await self._directory.list()
        except DirectoryError as exc:
            was_online = self._online
            self._online = False
            if was_online:
                logger.warning("Directory server went offline: %s", exc)
            await self._load_from_cache(exc)
            return

        if not self._online:
            logger.info("Directory server online, %d devices", len(devices))
        self._online = True
        self.last_error = None
        self._replace(devices)
        await self._persist()

    async def _load_from_cache(self, cause: DirectoryError) -> None:
        if cause.is_connectivity:
            advisory = RegistryError(
                ErrorCategory.CONNECTIVITY, "Connection Error", CONNECTION_ERROR_MESSAGE
            )
        else:
            advisory = RegistryError(
                category_for_status(cause.status),
                "Failed to load Device",
                humanize_error(cause.status or 0, cause.message),
            )
        self.last_error = advisory

        try:
            cached = await self._cache.load_devices()
        except CacheError as exc:
            logger.error("Failed to load device list from cache: %s", exc)
            raise RegistryError(
                ErrorCategory.CACHE_FAULT, "Failed to load item list", str(exc)
            ) from exc

        if not cached:
            raise advisory from cause

        logger.warning(
            "Directory unavailable, using %d cached devices: %s",
            len(cached),
            advisory.message,
        )
        self._replace(cached)

    def _check_online(self, action: str) -> None:
        if not self._online:
            raise RegistryError(
                ErrorCategory.OFFLINE,
                "Server Offline",
                f"Cannot {action} devices while the server is offline. "
                "Please wait for the server to come back online.",
            )

    def _validate(self, action: str, device_id: int, address: str, name: str) -> Device:
        try:
            return Device(id=device_id, name=name, address=address)
        except ValidationError as exc:
            reason = "; ".join(str(error["msg"]) for error in exc.errors())
            raise RegistryError(
                ErrorCategory.VALIDATION, f"Failed to {action} Device", reason
            ) from exc

    def _mutation_failed(self, action: str, exc: DirectoryError) -> RegistryError:
        if exc.status is None:
            self._online = False
            logger.warning("Directory unreachable during %s: %s", action, exc)
            return RegistryError(
                ErrorCategory.CONNECTIVITY, "Connection Error", CONNECTION_ERROR_MESSAGE
            )
        logger.warning(
            "Directory rejected %s (%d): %s", action, exc.status, exc.message
        )
        return RegistryError(
            category_for_status(exc.status),
            f"Failed to {action} Device",
            humanize_error(exc.status, exc.message),
        )

    async def add(self, address: str, name: str) -> Device:
        self._check_online("add")
        device = self._validate("add", 0, address, name)

        try:
            await self._directory.create(device.address, device.name)
        except DirectoryError as exc:
            raise self._mutation_failed("add", exc) from exc

        # ids are assigned locally; the next resync brings the server's view
        device = device.model_copy(
            update={"id": max((d.id for d in self._devices), default=0) + 1}
        )
        self._replace([*self._devices, device])
        await self._persist()
        logger.info("Added device %s (%s)", device.name, device.address)
        return device

    async def edit(self, device_id: int, address: str, name: str) -> Device:
        self._check_online("edit")
        previous = self.get_device(device_id)
        if previous is None:
            raise RegistryError(
                ErrorCategory.NOT_FOUND,
                "Failed to edit Device",
                humanize_error(404),
            )
        device = self._validate("edit", device_id, address, name)

        try:
            await self._directory.update(device_id, device.address, device.name)
        except DirectoryError as exc:
            raise self._mutation_failed("edit", exc) from exc

        self._replace([device if d.id == device_id else d for d in self._devices])
        if previous.address and self._selected_address == previous.address:
            self._selected_address = device.address
        await self._persist()
        logger.info("Edited device %d: %s (%s)", device_id, device.name, device.address)
        return device

    async def delete(self, address: str) -> None:
        self._check_online("delete")

        try:
            await self._directory.delete(address)
        except DirectoryError as exc:
            raise self._mutation_failed("delete", exc) from exc

        self._replace([d for d in self._devices if d.address != address])
        if self._selected_address == address:
            self._selected_address = ""
        await self._persist()
        logger.info("Deleted device at %s", address)

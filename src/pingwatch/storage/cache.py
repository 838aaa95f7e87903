from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from pingwatch.errors import CacheError
from pingwatch.models import Device, Notification

logger = logging.getLogger(__name__)

DEVICES_FILE = "devices.json"
NOTIFICATIONS_FILE = "notifications.json"

_devices_adapter = TypeAdapter(list[Device])
_notifications_adapter = TypeAdapter(list[Notification])


class JsonCacheStore:
    """Local copy of the device list and the notification log.

    Each list lives in its own JSON file under ``data_dir``. A missing file reads
    as an empty list; anything unreadable raises ``CacheError``. File access runs
    in a worker thread so the event loop keeps probing meanwhile.
    """

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._devices_path = data_dir / DEVICES_FILE
        self._notifications_path = data_dir / NOTIFICATIONS_FILE

    @property
    def path(self) -> Path:
        return self._data_dir

    @property
    def devices_path(self) -> Path:
        return self._devices_path

    @property
    def notifications_path(self) -> Path:
        return self._notifications_path

    def ensure_dirs(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)

    async def load_devices(self) -> list[Device]:
        data = await asyncio.to_thread(self._read, self._devices_path)
        try:
            return _devices_adapter.validate_python(data)
        except ValidationError as exc:
            raise CacheError(
                f"Invalid devices file: {self._devices_path}\n{exc}"
            ) from exc

    async def save_devices(self, devices: list[Device]) -> None:
        payload = [device.to_wire() for device in devices]
        await asyncio.to_thread(self._write, self._devices_path, payload)
        logger.debug("Saved %d devices to %s", len(devices), self._devices_path)

    async def load_notifications(self) -> list[Notification]:
        data = await asyncio.to_thread(self._read, self._notifications_path)
        try:
            return _notifications_adapter.validate_python(data)
        except ValidationError as exc:
            raise CacheError(
                f"Invalid notifications file: {self._notifications_path}\n{exc}"
            ) from exc

    async def save_notifications(self, notifications: list[Notification]) -> None:
        payload = [notification.to_wire() for notification in notifications]
        await asyncio.to_thread(self._write, self._notifications_path, payload)

    def _read(self, path: Path) -> Any:
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except json.JSONDecodeError as exc:
            raise CacheError(f"Invalid JSON in {path}\n{exc}") from exc
        except OSError as exc:
            raise CacheError(f"Cannot read {path}: {exc}") from exc

    def _write(self, path: Path, payload: list[dict[str, Any]]) -> None:
        try:
            self.ensure_dirs()
            with path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
        except OSError as exc:
            raise CacheError(f"Cannot write {path}: {exc}") from exc

from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import UUID

from pingwatch.errors import CacheError
from pingwatch.models import Direction, Notification, Severity, TransitionEvent

from .interfaces import CacheStore
from .registry import DeviceRegistry

logger = logging.getLogger(__name__)

NotificationListener = Callable[[Notification], None]

_SEVERITY = {Direction.UP: Severity.GREEN, Direction.DOWN: Severity.RED}
_WORDING = {Direction.UP: "up", Direction.DOWN: "down"}


def transition_message(name: str, address: str, direction: Direction) -> str:
    return f"{name} is {_WORDING[direction]}. Address is {address}"


class NotificationSink:
    """Newest-first log of transition notifications, written through to the cache.

    Deduplication is the tracker's job: it only emits on a real state change, so
    every event that reaches ``on_transition`` becomes exactly one notification.
    """

    def __init__(self, registry: DeviceRegistry, cache: CacheStore) -> None:
        self._registry = registry
        self._cache = cache
        self._notifications: list[Notification] = []
        self._listeners: list[NotificationListener] = []

    def get_notifications(self) -> list[Notification]:
        return list(self._notifications)

    def devices_with_events(self) -> set[int]:
        return {n.device_id for n in self._notifications}

    def subscribe(self, listener: NotificationListener) -> None:
        self._listeners.append(listener)

    async def load(self) -> None:
        try:
            self._notifications = await self._cache.load_notifications()
        except CacheError as exc:
            logger.warning("Could not read notification log, starting empty: %s", exc)
            self._notifications = []

    async def _persist(self) -> None:
        try:
            await self._cache.save_notifications(self._notifications)
        except CacheError as exc:
            logger.warning("Failed to save notifications: %s", exc)

    async def on_transition(self, event: TransitionEvent) -> Notification | None:
        device = self._registry.get_device(event.device_id)
        if device is None:
            logger.warning("Transition for unknown device %d ignored", event.device_id)
            return None

        notification = Notification(
            device_id=device.id,
            message=transition_message(device.name, device.address, event.direction),
            severity=_SEVERITY[event.direction],
        )
        self._notifications.insert(0, notification)
        await self._persist()
        for listener in self._listeners:
            try:
                listener(notification)
            except Exception:
                logger.exception("Notification listener %r failed", listener)
        return notification

    async def clear(self, notification_id: UUID | str | None = None) -> int:
        """Delete one notification, or all of them when no id is given."""
        before = len(self._notifications)
        if notification_id is None:
            self._notifications = []
        else:
            target = str(notification_id)
            self._notifications = [
                n for n in self._notifications if str(n.id) != target
            ]
        removed = before - len(self._notifications)
        if removed:
            await self._persist()
        return removed

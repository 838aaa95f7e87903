"""Debounced reachability per device.

A device is declared DOWN only after ``max_missed_probes`` consecutive misses,
and UP again on the first success after that. Only those crossings produce a
``TransitionEvent``; steady state, in either direction, produces nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from pingwatch.models import (
    Device,
    Direction,
    ReachabilityRecord,
    ReachabilityState,
    TransitionEvent,
)

logger = logging.getLogger(__name__)


class LivenessTracker:
    def __init__(self, threshold: Callable[[], int]) -> None:
        # Read on every call so a config refresh applies to the next probe.
        self._threshold = threshold
        self._records: dict[int, ReachabilityRecord] = {}
        self._observed: set[int] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def max_missed_probes(self) -> int:
        return self._threshold()

    def close(self) -> None:
        self._closed = True

    def sync(self, devices: Iterable[Device]) -> None:
        """Start tracking new devices and forget the ones that are gone."""
        ids = {device.id for device in devices}
        for device_id in ids - self._records.keys():
            self._records[device_id] = ReachabilityRecord(device_id=device_id)
        for device_id in self._records.keys() - ids:
            del self._records[device_id]
            self._observed.discard(device_id)

    def record(self, device_id: int) -> ReachabilityRecord | None:
        return self._records.get(device_id)

    def consecutive_misses(self, device_id: int) -> int:
        record = self._records.get(device_id)
        return record.consecutive_misses if record else 0

    def state(self, device_id: int) -> ReachabilityState:
        record = self._records.get(device_id) or ReachabilityRecord(device_id=device_id)
        return record.state(self._threshold())

    def is_reachable(self, device_id: int) -> bool:
        return self.state(device_id) is ReachabilityState.UP

    def partition(self, devices: Iterable[Device]) -> tuple[list[Device], list[Device]]:
        """Split devices into (up, down) by their current state."""
        up: list[Device] = []
        down: list[Device] = []
        for device in devices:
            (up if self.is_reachable(device.id) else down).append(device)
        return up, down

    def record_probe_result(
        self, device_id: int, success: bool
    ) -> TransitionEvent | None:
        if self._closed:
            logger.debug("Tracker closed, dropping result for device %d", device_id)
            return None

        threshold = self._threshold()
        record = self._records.setdefault(
            device_id, ReachabilityRecord(device_id=device_id)
        )

        was_reachable: bool | None = None
        if device_id in self._observed:
            was_reachable = record.consecutive_misses < threshold
        self._observed.add(device_id)

        record.consecutive_misses = 0 if success else record.consecutive_misses + 1
        is_reachable = record.consecutive_misses < threshold

        if was_reachable is not False and not is_reachable:
            return TransitionEvent(device_id=device_id, direction=Direction.DOWN)
        if was_reachable is False and is_reachable:
            return TransitionEvent(device_id=device_id, direction=Direction.UP)
        return None

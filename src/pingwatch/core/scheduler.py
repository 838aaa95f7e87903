"""Probe scheduling.

Two cadences run while the scheduler is started:

- steady interval: probe every registered device; restarted whenever the
  device list changes, since the change itself triggers a probe pass
- resync interval: reload the registry from the directory server

Each probe is its own task, so a slow or hung address never holds up the rest
of a pass. Results are matched back to a device by address when they arrive;
a result whose address is no longer registered is dropped.

``stop`` cancels the cadences only. Probes already in flight finish on their
own and report to the tracker, which discards them once it is closed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pingwatch.errors import PingwatchError
from pingwatch.models import Device, TransitionEvent

from .interfaces import Prober
from .liveness import LivenessTracker
from .registry import DeviceRegistry

logger = logging.getLogger(__name__)

TransitionCallback = Callable[[TransitionEvent], Awaitable[object]]

DEFAULT_PROBE_INTERVAL = 15.0
DEFAULT_RESYNC_INTERVAL = 30.0


@dataclass
class Cadence:
    name: str
    interval: float
    action: Callable[[], Awaitable[None]]


class ProbeScheduler:
    def __init__(
        self,
        registry: DeviceRegistry,
        tracker: LivenessTracker,
        prober: Prober,
        on_transition: TransitionCallback | None = None,
        probe_interval: float = DEFAULT_PROBE_INTERVAL,
        resync_interval: float = DEFAULT_RESYNC_INTERVAL,
    ) -> None:
        self._registry = registry
        self._tracker = tracker
        self._prober = prober
        self._on_transition = on_transition
        self._cadences = [
            Cadence("probe", probe_interval, self._probe_pass),
            Cadence("resync", resync_interval, self._resync),
        ]
        self._timers: dict[str, asyncio.Task[None]] = {}
        self._inflight: set[asyncio.Task[None]] = set()
        self._running = False
        self._known: list[Device] = []
        registry.subscribe(self._on_registry_change)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def add_cadence(
        self, name: str, interval: float, action: Callable[[], Awaitable[None]]
    ) -> None:
        self._cadences.append(Cadence(name, interval, action))

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        for cadence in self._cadences:
            self._arm(cadence)
        logger.debug(
            "Scheduler started: %s",
            ", ".join(f"{c.name} every {c.interval:g}s" for c in self._cadences),
        )
        self.probe_all()

    def stop(self) -> None:
        for task in self._timers.values():
            task.cancel()
        self._timers.clear()
        self._running = False
        logger.debug(
            "Scheduler stopped, %d probes still in flight", len(self._inflight)
        )

    def _arm(self, cadence: Cadence) -> None:
        previous = self._timers.pop(cadence.name, None)
        if previous is not None:
            previous.cancel()
        self._timers[cadence.name] = asyncio.create_task(
            self._every(cadence), name=f"cadence-{cadence.name}"
        )

    async def drain(self) -> None:
        """Wait for every probe dispatched so far to finish."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def _every(self, cadence: Cadence) -> None:
        while True:
            await asyncio.sleep(cadence.interval)
            try:
                await cadence.action()
            except PingwatchError as exc:
                logger.warning("%s failed: %s", cadence.name, exc)

    async def _probe_pass(self) -> None:
        self.probe_all()

    async def _resync(self) -> None:
        await self._registry.load()

    def _on_registry_change(self, devices: list[Device]) -> None:
        self._tracker.sync(devices)
        changed = devices != self._known
        self._known = devices
        if self._running and changed:
            # the kick stands in for the next steady tick
            self._arm(self._cadences[0])
            self.probe_all()

    def _dispatch(self, address: str, visible: bool) -> asyncio.Task[None]:
        task = asyncio.create_task(self.probe_now(address, visible))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    def probe_all(self, visible: bool = False) -> list[asyncio.Task[None]]:
        """Dispatch one probe per registered device without awaiting any."""
        devices = self._registry.get_devices()
        logger.debug("Probing %d devices (visible=%s)", len(devices), visible)
        return [self._dispatch(device.address, visible) for device in devices]

    def broadcast(self) -> list[asyncio.Task[None]]:
        return self.probe_all(visible=True)

    async def probe_now(self, address: str, visible: bool = False) -> None:
        if visible:
            await self._prober.probe_visible(address)
            return

        success = await self._prober.probe(address)
        device = self._registry.find_by_address(address)
        if device is None:
            logger.debug("Dropping probe result for unregistered address %s", address)
            return

        event = self._tracker.record_probe_result(device.id, success)
        if event is None:
            return
        logger.info("%s (%s) is %s", device.name, device.address, event.direction.value)
        if self._on_transition is not None:
            await self._on_transition(event)

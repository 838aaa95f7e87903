from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pingwatch.config import ConfigProvider, Settings, data_dir_from_settings
from pingwatch.errors import RegistryError
from pingwatch.storage import JsonCacheStore

from .directory import HttpDirectory
from .interfaces import CacheStore, Prober, RemoteDirectory
from .liveness import LivenessTracker
from .notifications import NotificationSink
from .prober import PingProber
from .registry import DeviceRegistry
from .scheduler import ProbeScheduler

logger = logging.getLogger(__name__)


class Engine:
    """Device liveness engine: registry, tracker, scheduler and sink wired together.

    Usage:
        engine = Engine.from_settings(get_settings(), config_path)
        await engine.run(duration=60)
    """

    def __init__(
        self,
        config: ConfigProvider,
        directory: RemoteDirectory,
        cache: CacheStore,
        prober: Prober,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings()
        self.config = config
        self.directory = directory
        self.cache = cache
        self.registry = DeviceRegistry(directory, cache)
        self.tracker = LivenessTracker(lambda: self.config.get().max_missed_probes)
        self.sink = NotificationSink(self.registry, cache)
        self.scheduler = ProbeScheduler(
            self.registry,
            self.tracker,
            prober,
            on_transition=self.sink.on_transition,
            probe_interval=settings.schedule.probe_interval,
            resync_interval=settings.schedule.resync_interval,
        )
        self.scheduler.add_cadence(
            "config", settings.schedule.config_refresh_interval, self._refresh_config
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, config_path: Path | None = None
    ) -> Engine:
        config = ConfigProvider(config_path, initial=settings.app)
        directory = HttpDirectory(
            settings.app.base_url, timeout=settings.directory.timeout
        )
        cache = JsonCacheStore(data_dir_from_settings(settings))
        prober = PingProber(
            timeout=settings.probing.timeout,
            visible_count=settings.probing.visible_count,
        )
        return cls(config, directory, cache, prober, settings=settings)

    async def _refresh_config(self) -> None:
        self.config.refresh()

    async def start(self) -> None:
        await self.sink.load()
        try:
            await self.registry.load()
        except RegistryError as exc:
            logger.error("%s: %s", exc.title, exc.message)
        self.scheduler.start()
        logger.info(
            "Monitoring %d devices (server %s)",
            len(self.registry.get_devices()),
            "online" if self.registry.online else "offline",
        )

    async def stop(self) -> None:
        self.scheduler.stop()
        self.tracker.close()
        aclose = getattr(self.directory, "aclose", None)
        if aclose is not None:
            await aclose()

    async def run(self, duration: float | None = None) -> None:
        await self.start()
        try:
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)
        finally:
            await self.stop()

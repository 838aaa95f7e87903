"""Live view of the application config.

The config file can be edited while the engine runs. ``refresh`` re-reads it and
the rest of the engine always asks ``get`` for the current snapshot, so a new
``max_missed_probes`` applies from the next probe on.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pingwatch.errors import ConfigError

from .settings import AppConfig, Settings, load_settings

logger = logging.getLogger(__name__)


class ConfigProvider:
    def __init__(
        self, path: Path | None = None, initial: AppConfig | None = None
    ) -> None:
        self._path = path
        self._current = initial

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self) -> AppConfig:
        if self._current is None:
            return self.refresh()
        return self._current

    def set(self, config: AppConfig) -> None:
        self._current = config

    def refresh(self) -> AppConfig:
        """Re-read the config file, keeping the last good snapshot on failure."""
        if self._path is None:
            if self._current is None:
                self._current = AppConfig()
            return self._current

        try:
            if self._path.exists():
                settings = load_settings(self._path)
            else:
                settings = Settings()
        except ConfigError:
            if self._current is None:
                raise
            logger.warning(
                "Config file %s is invalid, keeping previous config", self._path
            )
            return self._current

        if self._current is not None and settings.app != self._current:
            logger.info("Config changed: %s", settings.app)
        self._current = settings.app
        return self._current
